"""
Configuration loading and management for Zotero Assistant.

Supports loading configuration from:
- Standalone config (~/.config/zotero-assistant/config.json)
- Environment variables (.env)

Environment variables always win over the standalone config file.
"""

import json
import os
from pathlib import Path
import time
from typing import Any

from dotenv import load_dotenv

# -------------------- Configuration Cache --------------------


_config_cache: dict[str, Any] | None = None
_cache_timestamp: float = 0
_CACHE_TTL = 300  # 5 minutes cache TTL

RELEVANT_ENV_PREFIXES = [
    "ZOTERO_",
    "LOG_LEVEL",
    "DEBUG",
]


def _clear_cache() -> None:
    """Clear configuration cache."""
    global _config_cache, _cache_timestamp
    _config_cache = None
    _cache_timestamp = 0


def _is_cache_valid() -> bool:
    """Check if cache is still valid."""
    return _config_cache is not None and (time.time() - _cache_timestamp) < _CACHE_TTL


def get_config_path() -> Path:
    """
    Get the path to the Zotero Assistant config directory.

    Returns:
        Path to ~/.config/zotero-assistant/
    """
    config_dir = Path.home() / ".config" / "zotero-assistant"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_file_path() -> Path:
    """Path to ~/.config/zotero-assistant/config.json."""
    return get_config_path() / "config.json"


def load_standalone_config() -> dict[str, Any]:
    """
    Load configuration from standalone config file.

    Returns:
        Full configuration dictionary, or empty dict if missing or unreadable.
    """
    config_path = get_config_file_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError):
        return {}


def load_config(
    use_cache: bool = True, load_dotenv_file: bool = True
) -> dict[str, Any]:
    """
    Load configuration from all available sources.

    Priority order:
    1. Environment variables (highest priority)
    2. Standalone config (~/.config/zotero-assistant/config.json)

    Values from the config file are exported to ``os.environ`` when the
    variable is not already set, so ``ZoteroSettings`` sees them.

    Args:
        use_cache: Whether to use cached configuration (default: True)
        load_dotenv_file: Whether to load .env file (default: True, set to False in tests)

    Returns:
        Merged configuration dictionary with an 'env' key.
    """
    global _config_cache, _cache_timestamp

    if use_cache and _is_cache_valid():
        assert _config_cache is not None
        return _config_cache

    if load_dotenv_file:
        load_dotenv()

    env_config: dict[str, str] = {}

    standalone = load_standalone_config()
    client_env = standalone.get("client_env", {})
    env_config.update({key: str(value) for key, value in client_env.items()})

    for key, value in os.environ.items():
        if any(key.startswith(prefix) for prefix in RELEVANT_ENV_PREFIXES):
            env_config[key] = value

    for key, value in env_config.items():
        if key not in os.environ:
            os.environ[key] = value

    config = {"env": env_config}

    _config_cache = config
    _cache_timestamp = time.time()
    return config

"""Configuration loading."""

from .config import (
    _clear_cache,
    get_config_file_path,
    get_config_path,
    load_config,
)

__all__ = [
    "_clear_cache",
    "get_config_file_path",
    "get_config_path",
    "load_config",
]

"""Configuration management using Pydantic Settings."""

from importlib.metadata import version as _pkg_version

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_version() -> str:
    try:
        return _pkg_version("zotero-assistant-mcp")
    except Exception:
        return "0.0.0"


class ZoteroSettings(BaseSettings):
    """Zotero Assistant settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ZOTERO_",
        extra="ignore",
    )

    # Library credentials
    api_key: str = Field(default="")
    library_id: str = Field(default="")
    library_type: str = Field(default="user")

    # Remote endpoints
    api_base_url: str = Field(default="https://api.zotero.org")
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; ZoteroAssistantMCP/1.0)"
    )

    # Timeouts in seconds; no request is retried automatically
    metadata_timeout: float = Field(default=30.0, gt=0)
    transfer_timeout: float = Field(default=60.0, gt=0)

    # Library stats
    stats_tag_limit: int = Field(default=25, ge=1, le=100)
    stats_top_tags: int = Field(default=15, ge=1, le=100)

    # Server metadata
    server_name: str = Field(default="zotero-assistant")
    server_version: str = Field(default_factory=_get_version)

    # Feature flags
    enable_write_tools: bool = Field(default=True)


settings = ZoteroSettings()

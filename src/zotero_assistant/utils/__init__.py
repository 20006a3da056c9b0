"""
Utility functions and helpers for Zotero Assistant.
"""

from .config import load_config
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    InvalidItemTypeError,
    NotFoundError,
    RemoteRejection,
    TransportError,
    ValidationError,
    ZoteroMCPError,
    format_api_error,
    handle_error,
)
from .helpers import clean_html, format_creators, format_item_summary, parse_tags
from .logging_config import PerformanceMonitor, log_operation
from .urls import unwrap_url

__all__ = [
    # Errors
    "ZoteroMCPError",
    "ValidationError",
    "InvalidItemTypeError",
    "TransportError",
    "RemoteRejection",
    "ConflictError",
    "NotFoundError",
    "AuthenticationError",
    "ConfigurationError",
    "handle_error",
    "format_api_error",
    # Config
    "load_config",
    # Logging
    "log_operation",
    "PerformanceMonitor",
    # Formatting
    "clean_html",
    "format_creators",
    "format_item_summary",
    "parse_tags",
    "unwrap_url",
]

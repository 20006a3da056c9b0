"""MCP handlers."""

from .help import get_help
from .tools import ToolHandler

__all__ = ["ToolHandler", "get_help"]

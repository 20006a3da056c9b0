"""
Services for Zotero Assistant.

Provides the library synchronization logic behind the MCP tools.
"""

from .library_service import LibraryService, get_library_service

__all__ = [
    "LibraryService",
    "get_library_service",
]

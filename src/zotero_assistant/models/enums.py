"""Enum definitions for tool names."""

from enum import StrEnum


class ToolName(StrEnum):
    """Canonical tool names exposed over MCP."""

    # Utility
    GET_HELP = "get_help"

    # Search & browse
    SEARCH_ITEMS = "search_items"
    GET_COLLECTION_ITEMS = "get_collection_items"
    GET_RECENT_ITEMS = "get_recent_items"
    LIST_COLLECTIONS = "list_collections"
    LIST_TAGS = "list_tags"
    LIST_GROUPS = "list_groups"
    GET_LIBRARY_STATS = "get_library_stats"

    # Read
    GET_ITEM = "get_item"
    GET_ITEM_FULLTEXT = "get_item_fulltext"
    GET_ATTACHMENT_CONTENT = "get_attachment_content"

    # Write
    SAVE_ITEM = "save_item"
    ATTACH_PDF = "attach_pdf"
    ATTACH_SNAPSHOT = "attach_snapshot"
    CREATE_NOTE = "create_note"
    UPDATE_ITEM = "update_item"
    CREATE_COLLECTION = "create_collection"

"""Workflow guidance returned by the get_help tool."""

from typing import Any

from zotero_assistant.services.item_types import list_item_types

HELP_TOPICS: dict[str, dict[str, Any]] = {
    "overview": {
        "available_topics": [
            "search: search syntax, qmode, tag filters, sorting",
            "saving: workflow for saving URLs, metadata extraction, item types",
            "attachments: snapshots vs PDFs, reading attachment content back",
            "updating: editing metadata, tags, moving between collections",
            "collections: creating, listing, organizing collections",
        ],
        "available_tools": {
            "search_and_browse": [
                "search_items: search by text, tags, type, or collection",
                "get_collection_items: list items in a collection",
                "get_recent_items: recently added or modified items",
                "list_collections: all collections (folders)",
                "create_collection: create a new collection",
                "list_tags: all tags in the library",
                "list_groups: group libraries you belong to",
                "get_library_stats: library overview with counts and top tags",
            ],
            "read": [
                "get_item: full metadata plus children summary",
                "get_item_fulltext: extracted text from PDFs",
                "get_attachment_content: read snapshot HTML or attachment files",
            ],
            "write": [
                "save_item: create a new item with metadata and an attachment",
                "attach_pdf: attach a PDF to an existing item",
                "attach_snapshot: attach a webpage snapshot to an existing item",
                "create_note: create a note on an existing item",
                "update_item: modify metadata, tags, and collections",
            ],
        },
        "quick_tips": [
            "Always include 2-5 descriptive tags when saving",
            "Use get_library_stats for a quick overview instead of broad searches",
            "Use get_attachment_content (not get_item_fulltext) to read saved snapshots",
        ],
    },
    "search": {
        "description": "How to search the Zotero library effectively",
        "qmode": {
            "titleCreatorYear": "Default. Searches titles, creators, and year.",
            "everything": "Also searches full-text content. Slower; use when the "
            "default search returns nothing.",
        },
        "tag_filters": {
            "single_tag": "tag: 'AI' returns items with this tag",
            "multiple_tags_AND": "tag: ['AI', 'ethics'] returns items with ALL these tags",
            "exclude_tag": "tag: '-reviewed' returns items WITHOUT this tag",
        },
        "item_type_filters": {
            "include": "item_type: 'article' returns only journal articles",
            "exclude": "item_type: '-book' excludes books",
        },
        "tips": [
            "Combine query, tag and collection_key for precise results",
            "Use sort: 'dateAdded' to see the newest additions first",
            "Attachments and notes are never listed as search results",
        ],
    },
    "saving": {
        "description": "How to save items to the Zotero library",
        "workflow": [
            "1. Fetch the URL content using your own web tools",
            "2. Extract metadata: title, authors, date, abstract, tags",
            "3. Call list_collections to find the right folder",
            "4. Call save_item with the metadata plus snapshot_url (webpages) "
            "or pdf_url (PDFs)",
        ],
        "metadata_tips": [
            "Authors can be organizations: 'World Health Organization'",
            "For journal articles, include DOI, volume, issue and pages if available",
            "item_type defaults to 'webpage'; use 'article' for journal papers and "
            "'report' for reports",
            "If both pdf_url and snapshot_url are given only the PDF is attached",
        ],
        "item_types": list_item_types(),
    },
    "attachments": {
        "description": "Working with PDFs, snapshots, and file attachments",
        "saving_attachments": {
            "pdf": "Include pdf_url in save_item, or use attach_pdf on an existing item",
            "snapshot": "Include snapshot_url in save_item, or use attach_snapshot "
            "on an existing item",
        },
        "reading_attachments": {
            "html_snapshots": "Use get_attachment_content with the attachment key "
            "from get_item children",
            "pdf_text": "Use get_item_fulltext. Only works if Zotero has indexed the PDF.",
            "binary_files": "get_attachment_content returns metadata only for binary files",
        },
        "partial_failures": "registered: true with uploaded: false means the "
        "attachment record exists but its file did not upload. Retry with "
        "attach_pdf/attach_snapshot or delete the empty attachment in Zotero.",
    },
    "updating": {
        "description": "How to modify existing items",
        "tag_operations": {
            "add": "add_tags: ['new_tag'] adds without removing existing tags",
            "remove": "remove_tags: ['old_tag'] removes specific tags, keeps the rest",
            "replace": "tags: ['tag1', 'tag2'] replaces ALL tags with this list",
        },
        "collection_operations": {
            "add": "add_collections: ['KEY'] adds the item to a collection",
            "remove": "remove_collections: ['KEY'] removes it from a collection",
            "replace": "collections: ['KEY1', 'KEY2'] replaces ALL memberships",
        },
        "other_fields": "title, abstract, date, extra",
        "conflicts": "Pass expected_version (from get_item) to make sure nobody "
        "changed the item since you read it. A conflict error means re-read "
        "the item and decide again.",
    },
    "collections": {
        "description": "Working with collections (folders)",
        "operations": [
            "list_collections: see all collections with keys",
            "create_collection: create new, optionally nested under a parent",
            "update_item with add_collections/remove_collections: move items",
        ],
        "tips": [
            "Items can belong to multiple collections simultaneously",
            "Use get_collection_items to browse a specific collection",
            "Use collection_key in search_items to search within a collection",
        ],
    },
}


def get_help(topic: str | None = None) -> dict[str, Any]:
    """Help content for ``topic``, or the overview when omitted."""
    name = (topic or "overview").lower()
    if name in HELP_TOPICS:
        return HELP_TOPICS[name]
    available = ", ".join(t for t in HELP_TOPICS if t != "overview")
    return {
        "error": f"Unknown topic '{name}'. Available: {available}",
        "error_type": "validation",
    }

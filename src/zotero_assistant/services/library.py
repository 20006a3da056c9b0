"""
Library browsing and the smaller write operations.

Search, item reads, collections, tags, groups, notes and attachment content.
"""

import asyncio
import logging
from typing import Any

from zotero_assistant.clients.web_api import ZoteroWebAPI
from zotero_assistant.clients.zotero_client import ZoteroAPIClient, created_key
from zotero_assistant.models.items import (
    GetCollectionItemsInput,
    GetRecentInput,
    SearchItemsInput,
)
from zotero_assistant.services.item_types import resolve_item_type
from zotero_assistant.services.templates import TemplateService
from zotero_assistant.utils.errors import ValidationError
from zotero_assistant.utils.helpers import (
    clean_html,
    format_item_summary,
    is_listed_item,
    truncate_text,
)

logger = logging.getLogger(__name__)

# Content types returned as text by get_attachment_content
TEXT_CONTENT_MARKERS = ("html", "text", "xml", "json")


def _listing(
    raw_items: list[dict[str, Any]], total: int | None, offset: int, limit: int
) -> dict[str, Any]:
    items = [format_item_summary(raw) for raw in raw_items if is_listed_item(raw)]
    return {
        "items": items,
        "total_results": total if total is not None else len(items),
        "offset": offset,
        "limit": limit,
    }


class LibraryBrowser:
    """Read access to a library plus notes and collections."""

    def __init__(
        self,
        api_client: ZoteroAPIClient,
        web_api: ZoteroWebAPI,
        templates: TemplateService,
    ):
        self.api_client = api_client
        self.web_api = web_api
        self.templates = templates

    # -------------------- Items --------------------

    async def search_items(self, params: SearchItemsInput) -> dict[str, Any]:
        """
        Search top-level items.

        Multiple tags must all match. A leading ``-`` excludes a tag.
        """
        query: dict[str, Any] = {
            "sort": params.sort,
            "direction": params.direction.value,
            "limit": params.limit,
            "start": params.offset,
        }
        if params.query:
            query["q"] = params.query
            query["qmode"] = params.qmode.value
        if params.tag:
            # Repeated tag parameters are AND-ed by the Web API
            query["tag"] = params.tag if isinstance(params.tag, list) else [params.tag]
        if params.item_type:
            query["itemType"] = _resolve_type_filter(params.item_type)

        if params.collection_key:
            raw, total = await self.api_client.get_collection_top_items(
                params.collection_key, **query
            )
        else:
            raw, total = await self.api_client.get_top_items(**query)

        return _listing(raw, total, params.offset, params.limit)

    async def get_item(self, item_key: str) -> dict[str, Any]:
        """Get an item's fields and a summary of its children."""
        item, children = await asyncio.gather(
            self.api_client.get_item(item_key),
            self.api_client.get_item_children(item_key),
        )
        data = item.get("data", {})
        return {
            "key": item.get("key", item_key),
            "version": item.get("version"),
            **{k: v for k, v in data.items() if k not in ("key", "version")},
            "children": [_child_summary(child) for child in children],
        }

    async def get_collection_items(self, params: GetCollectionItemsInput) -> dict[str, Any]:
        """List top-level items of a collection."""
        raw, total = await self.api_client.get_collection_top_items(
            params.collection_key,
            sort=params.sort,
            direction=params.direction.value,
            limit=params.limit,
            start=params.offset,
        )
        return _listing(raw, total, params.offset, params.limit)

    async def get_recent_items(self, params: GetRecentInput) -> dict[str, Any]:
        """Most recently added or modified top-level items."""
        raw, _ = await self.api_client.get_top_items(
            sort=params.sort, direction="desc", limit=params.limit
        )
        return {"items": [format_item_summary(r) for r in raw if is_listed_item(r)]}

    # -------------------- Collections, tags, groups --------------------

    async def list_collections(self) -> dict[str, Any]:
        collections = await self.api_client.get_collections()
        return {
            "collections": [
                {
                    "key": c.get("key"),
                    "name": c.get("data", {}).get("name"),
                    "parent": c.get("data", {}).get("parentCollection") or None,
                }
                for c in collections
            ],
            "total": len(collections),
        }

    async def create_collection(
        self, name: str, parent_key: str | None = None
    ) -> dict[str, Any]:
        """
        Create a collection.

        Raises:
            ValidationError: If the name is blank (no remote call is made)
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Collection name is required")

        response = await self.api_client.create_collection(name, parent_key)
        collection_key = created_key(response, "Failed to create collection")
        logger.info(
            f"Created collection {collection_key} '{name}'"
            + (f" under {parent_key}" if parent_key else " (top-level)")
        )
        return {
            "success": True,
            "collection_key": collection_key,
            "name": name,
            "parent": parent_key,
            "message": f"Created collection: {name}",
        }

    async def list_tags(self, limit: int = 100, offset: int = 0) -> dict[str, Any]:
        tags, total = await self.web_api.get_tags(limit=limit, start=offset)
        return {
            "tags": tags,
            "total_results": total if total is not None else len(tags),
            "offset": offset,
            "limit": limit,
        }

    async def list_groups(self) -> dict[str, Any]:
        """Groups the API key's user belongs to."""
        library = self.web_api.library
        if library.library_type == "user":
            user_id = library.library_id
        else:
            key_info = await self.web_api.get_current_key()
            user_id = str(key_info.get("userID", ""))

        groups = await self.web_api.list_groups(user_id)
        return {
            "groups": [
                {
                    "id": str(g.get("id")),
                    "name": g.get("data", {}).get("name") or "(unnamed)",
                    "type": g.get("data", {}).get("type"),
                    "owner": g.get("meta", {}).get("owner"),
                    "num_items": g.get("meta", {}).get("numItems"),
                }
                for g in groups
            ]
        }

    # -------------------- Notes & attachment content --------------------

    async def create_note(
        self, parent_key: str, content: str, tags: list[str] | None = None
    ) -> dict[str, Any]:
        """Create a child note on ``parent_key``."""
        template = await self.templates.acquire("note")
        template["parentItem"] = parent_key
        template["note"] = content
        template["tags"] = [{"tag": tag} for tag in tags or []]

        response = await self.api_client.create_items([template])
        note_key = created_key(response, "Failed to create note")
        logger.info(f"Created note {note_key} on {parent_key}")
        return {
            "success": True,
            "item_key": note_key,
            "parent_key": parent_key,
            "message": f"Note created on item {parent_key}",
        }

    async def get_attachment_content(self, item_key: str) -> dict[str, Any]:
        """
        Read an attachment's stored file.

        Text-like files are returned as text; binary files only as metadata.

        Raises:
            ValidationError: If the item is not an attachment
        """
        item = await self.api_client.get_item(item_key)
        data = item.get("data", {})
        if data.get("itemType") != "attachment":
            raise ValidationError(
                f"Item {item_key} is not an attachment (type: {data.get('itemType')})",
                suggestion="Use get_item to find child attachment keys",
            )

        content_type = data.get("contentType", "")
        filename = data.get("filename") or data.get("title") or "unknown"
        response = await self.web_api.download_file(item_key)

        result: dict[str, Any] = {
            "item_key": item_key,
            "filename": filename,
            "content_type": content_type,
            "size_bytes": len(response.content),
        }
        if any(marker in content_type for marker in TEXT_CONTENT_MARKERS):
            result["content"] = response.text
        else:
            result["content"] = None
            result["message"] = (
                f"Binary file ({content_type}). Use get_item_fulltext to retrieve "
                "extracted text content if available."
            )
        return result


def _resolve_type_filter(item_type: str) -> str:
    """Resolve a friendly type filter, keeping a leading ``-`` exclusion."""
    if item_type.startswith("-"):
        return "-" + resolve_item_type(item_type[1:])
    return resolve_item_type(item_type)


def _child_summary(child: dict[str, Any]) -> dict[str, Any]:
    data = child.get("data", {})
    return {
        "key": child.get("key"),
        "item_type": data.get("itemType"),
        "title": data.get("title") or truncate_text(clean_html(data.get("note", ""))) or None,
        "content_type": data.get("contentType"),
    }

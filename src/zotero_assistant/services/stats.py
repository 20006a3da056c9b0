"""
Library summary built from three concurrent read queries.
"""

import asyncio
import logging
from typing import Any

from zotero_assistant.clients.web_api import ZoteroWebAPI
from zotero_assistant.clients.zotero_client import ZoteroAPIClient

logger = logging.getLogger(__name__)

TAG_QUERY_LIMIT = 25
TOP_TAG_COUNT = 15


class LibraryStatsAggregator:
    """Summarizes item, collection and tag counts of a library."""

    def __init__(
        self,
        api_client: ZoteroAPIClient,
        web_api: ZoteroWebAPI,
        tag_limit: int = TAG_QUERY_LIMIT,
        top_tags: int = TOP_TAG_COUNT,
    ):
        self.api_client = api_client
        self.web_api = web_api
        self.tag_limit = tag_limit
        self.top_tags = top_tags

    async def summarize(self) -> dict[str, Any]:
        """
        Get library counts, collections, top tags and the last modified item.

        The three queries run concurrently; if any fails the whole summary
        fails.
        """
        (items, total_items), collections, (tags, total_tags) = await asyncio.gather(
            self.api_client.get_top_items(limit=1, sort="dateModified", direction="desc"),
            self.api_client.get_collections(),
            self.web_api.get_tags(limit=self.tag_limit),
        )

        # sorted() is stable, so tags with equal counts keep the store's order
        top_tags = sorted(tags, key=lambda t: t.get("numItems", 0), reverse=True)

        last_modified = None
        if items:
            data = items[0].get("data", {})
            last_modified = {
                "title": data.get("title") or "(untitled)",
                "date": data.get("dateModified"),
            }

        logger.debug(
            f"Library stats: {total_items} items, {len(collections)} collections"
        )
        return {
            "total_items": total_items or 0,
            "total_collections": len(collections),
            "total_tags": total_tags if total_tags is not None else len(tags),
            "collections": [
                {"key": c.get("key"), "name": c.get("data", {}).get("name")}
                for c in collections
            ],
            "top_tags": top_tags[: self.top_tags],
            "last_modified_item": last_modified,
        }

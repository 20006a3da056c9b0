"""
Full-text lookup over an item and its child attachments.

Zotero only serves full text for attachments that Zotero desktop has
indexed and synced, so absence is an expected outcome and is reported
with guidance rather than as an error.
"""

import logging
from typing import Any

from zotero_assistant.clients.web_api import ZoteroWebAPI
from zotero_assistant.clients.zotero_client import ZoteroAPIClient
from zotero_assistant.utils.errors import ZoteroMCPError

logger = logging.getLogger(__name__)

PDF_NOT_INDEXED_MESSAGE = (
    "PDF has not been indexed by Zotero. Full-text indexing happens in Zotero "
    "desktop and must sync to the cloud. Try: 1) Open Zotero desktop, "
    "2) Right-click the PDF and choose 'Reindex Item', 3) Sync your library."
)
NO_ATTACHMENTS_MESSAGE = (
    "This item has no attachments. Full-text is only available for items "
    "with PDF or text attachments."
)
NOT_INDEXED_MESSAGE = (
    "No full-text content available. PDFs must be indexed by Zotero desktop "
    "before full-text is accessible via the API. Try: 1) Open Zotero desktop, "
    "2) Right-click the item and choose 'Reindex Item', 3) Sync your library, "
    "then try again."
)


def order_attachments(children: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Attachments with a content type, PDFs first.

    Relative order is kept within the PDF group and within the rest.
    """
    attachments = [
        child
        for child in children
        if child.get("data", {}).get("itemType") == "attachment"
        and child.get("data", {}).get("contentType")
    ]
    pdfs = [a for a in attachments if "pdf" in a["data"]["contentType"]]
    others = [a for a in attachments if "pdf" not in a["data"]["contentType"]]
    return pdfs + others


def _attachment_name(data: dict[str, Any]) -> str | None:
    return data.get("filename") or data.get("title")


class FulltextResolver:
    """Finds the best available extracted text for an item."""

    def __init__(self, api_client: ZoteroAPIClient, web_api: ZoteroWebAPI):
        self.api_client = api_client
        self.web_api = web_api

    async def resolve(self, item_key: str) -> dict[str, Any]:
        """
        Get full text for an item.

        An attachment is probed directly. A regular item's attachments are
        probed one at a time, PDFs first, stopping at the first one with
        text.

        Raises:
            NotFoundError: If the item does not exist
            TransportError: If the item, its children or a directly targeted
                attachment cannot be read
        """
        item = await self.api_client.get_item(item_key)
        data = item.get("data", {})
        item_type = data.get("itemType")
        logger.debug(f"Resolving full text for {item_key} ({item_type})")

        if item_type == "attachment":
            return await self._resolve_attachment(item_key, data)
        return await self._resolve_children(item_key)

    async def _resolve_attachment(
        self, item_key: str, data: dict[str, Any]
    ) -> dict[str, Any]:
        record = await self.web_api.get_fulltext(item_key)
        if record is not None and record.has_content:
            return {
                "item_key": item_key,
                "content": record.content,
                **record.extent(),
                "source": "fulltext_api",
            }

        content_type = data.get("contentType", "")
        if "pdf" in content_type:
            message = PDF_NOT_INDEXED_MESSAGE
        else:
            message = (
                f"Attachment type '{content_type}' does not support full-text extraction."
            )
        return {
            "item_key": item_key,
            "content": None,
            "content_type": content_type,
            "filename": _attachment_name(data) or "unknown",
            "message": message,
        }

    async def _resolve_children(self, item_key: str) -> dict[str, Any]:
        children = await self.api_client.get_item_children(item_key)
        attachments = order_attachments(children)
        logger.debug(f"Found {len(attachments)} attachments for {item_key}")

        if not attachments:
            return {"item_key": item_key, "content": None, "message": NO_ATTACHMENTS_MESSAGE}

        checked: list[dict[str, Any]] = []
        for attachment in attachments:
            key = attachment["key"]
            data = attachment["data"]
            summary: dict[str, Any] = {
                "key": key,
                "filename": _attachment_name(data),
                "content_type": data["contentType"],
            }
            checked.append(summary)

            try:
                record = await self.web_api.get_fulltext(key)
            except ZoteroMCPError as e:
                logger.warning(f"Full-text probe for attachment {key} failed: {e}")
                summary["error"] = str(e)
                continue

            if record is not None and record.has_content:
                logger.info(f"Found full text for {item_key} in attachment {key}")
                return {
                    "item_key": item_key,
                    "attachment_key": key,
                    "attachment_filename": _attachment_name(data),
                    "content": record.content,
                    **record.extent(),
                    "source": "child_attachment_fulltext",
                }

        return {
            "item_key": item_key,
            "content": None,
            "attachments_checked": checked,
            "message": NOT_INDEXED_MESSAGE,
        }

"""
Item creation with an optional follow-up attachment.
"""

import logging
from typing import Any

from zotero_assistant.clients.zotero_client import ZoteroAPIClient, created_key
from zotero_assistant.models.items import ItemFields
from zotero_assistant.services.attachments import AttachmentUploader
from zotero_assistant.services.item_types import resolve_item_type
from zotero_assistant.services.templates import TemplateService, map_fields

logger = logging.getLogger(__name__)


class ItemWriter:
    """Creates items from caller fields and attaches one source to them."""

    def __init__(
        self,
        api_client: ZoteroAPIClient,
        templates: TemplateService,
        uploader: AttachmentUploader,
    ):
        self.api_client = api_client
        self.templates = templates
        self.uploader = uploader

    async def create(
        self,
        fields: ItemFields,
        item_type: str = "webpage",
        pdf_url: str | None = None,
        snapshot_url: str | None = None,
    ) -> dict[str, Any]:
        """
        Create an item, then attach a PDF or snapshot if one was given.

        A PDF source takes priority over a snapshot source; only one
        attachment is made. Once the item exists the result is a success
        whatever happens to the attachment, whose outcome is nested in the
        result.

        Raises:
            InvalidItemTypeError: If the store rejects the item type
            RemoteRejection: If the store refuses to create the item
            TransportError: On network failure
        """
        canonical_type = resolve_item_type(item_type)
        template = await self.templates.acquire(canonical_type)
        payload = map_fields(template, fields)

        response = await self.api_client.create_items([payload])
        item_key = created_key(response, "Failed to create item")
        logger.info(f"Created {canonical_type} {item_key}: {fields.title}")

        result: dict[str, Any] = {
            "success": True,
            "item_key": item_key,
            "item_type": canonical_type,
            "message": f"Created {canonical_type}: {fields.title}",
        }

        if pdf_url:
            outcome = await self.uploader.attach_pdf(item_key, pdf_url)
            result["pdf_attachment"] = outcome.to_result()
        elif snapshot_url:
            outcome = await self.uploader.attach_snapshot(item_key, snapshot_url)
            result["snapshot_attachment"] = outcome.to_result()

        return result

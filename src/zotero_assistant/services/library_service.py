"""
Library service facade.

Owns one library reference and its clients, and exposes every public
operation. Each operation converts failures into a structured result at
its boundary, so callers always receive a dict.
"""

import logging
from typing import Any

from zotero_assistant.clients.fetcher import SourceFetcher
from zotero_assistant.clients.web_api import ZoteroWebAPI
from zotero_assistant.clients.zotero_client import (
    LibraryRef,
    ZoteroAPIClient,
    get_library_ref,
)
from zotero_assistant.models.items import (
    GetCollectionItemsInput,
    GetRecentInput,
    ItemChanges,
    ItemFields,
    SearchItemsInput,
)
from zotero_assistant.services.attachments import AttachmentUploader
from zotero_assistant.services.fulltext import FulltextResolver
from zotero_assistant.services.item_writer import ItemWriter
from zotero_assistant.services.library import LibraryBrowser
from zotero_assistant.services.operation_result import operation
from zotero_assistant.services.reconciler import ChangeReconciler
from zotero_assistant.services.stats import LibraryStatsAggregator
from zotero_assistant.services.templates import TemplateService
from zotero_assistant.settings import ZoteroSettings
from zotero_assistant.utils.logging_config import log_operation

logger = logging.getLogger(__name__)


class LibraryService:
    """
    Public operations on one Zotero library.

    Write operations return ``{"success": True, ...}`` or
    ``{"success": False, "error": ..., "error_type": ...}``; read
    operations return their data or ``{"error": ..., "error_type": ...}``.
    """

    def __init__(
        self,
        library: LibraryRef,
        *,
        config: ZoteroSettings | None = None,
        api_client: ZoteroAPIClient | None = None,
        web_api: ZoteroWebAPI | None = None,
        fetcher: SourceFetcher | None = None,
    ):
        """
        Initialize LibraryService.

        Args:
            library: Library credentials and identity
            config: Settings for timeouts and limits (loaded from env if omitted)
            api_client: pyzotero client (created if omitted)
            web_api: Web API client (created if omitted)
            fetcher: Source URL fetcher (created if omitted)
        """
        config = config or ZoteroSettings()
        self.library = library
        self.api_client = api_client or ZoteroAPIClient(
            library, base_url=config.api_base_url, timeout=config.metadata_timeout
        )
        self.web_api = web_api or ZoteroWebAPI(
            library,
            base_url=config.api_base_url,
            metadata_timeout=config.metadata_timeout,
            transfer_timeout=config.transfer_timeout,
        )
        self.fetcher = fetcher or SourceFetcher(
            user_agent=config.user_agent, timeout=config.transfer_timeout
        )

        self.templates = TemplateService(self.api_client)
        self.uploader = AttachmentUploader(self.api_client, self.web_api, self.fetcher)
        self.writer = ItemWriter(self.api_client, self.templates, self.uploader)
        self.fulltext = FulltextResolver(self.api_client, self.web_api)
        self.reconciler = ChangeReconciler(self.api_client)
        self.stats = LibraryStatsAggregator(
            self.api_client,
            self.web_api,
            tag_limit=config.stats_tag_limit,
            top_tags=config.stats_top_tags,
        )
        self.browser = LibraryBrowser(self.api_client, self.web_api, self.templates)

    async def close(self) -> None:
        """Release HTTP connections."""
        self.api_client.close()
        await self.web_api.close()

    # -------------------- Write operations --------------------

    @operation("save_item", write=True)
    async def save_item(
        self,
        fields: ItemFields,
        item_type: str = "webpage",
        pdf_url: str | None = None,
        snapshot_url: str | None = None,
    ) -> dict[str, Any]:
        result = await self.writer.create(fields, item_type, pdf_url, snapshot_url)
        attachment = result.get("pdf_attachment") or result.get("snapshot_attachment")
        log_operation(
            logger,
            "save_item",
            result["item_key"],
            "partial" if attachment and not attachment.get("uploaded") else "success",
            item_type=result["item_type"],
        )
        return result

    @operation("attach_pdf", write=True)
    async def attach_pdf(
        self, item_key: str, pdf_url: str, filename: str | None = None
    ) -> dict[str, Any]:
        outcome = await self.uploader.attach_pdf(item_key, pdf_url, filename)
        log_operation(logger, "attach_pdf", item_key, outcome.status.value)
        return outcome.to_result()

    @operation("attach_snapshot", write=True)
    async def attach_snapshot(
        self, item_key: str, url: str, title: str | None = None
    ) -> dict[str, Any]:
        outcome = await self.uploader.attach_snapshot(item_key, url, title)
        log_operation(logger, "attach_snapshot", item_key, outcome.status.value)
        return outcome.to_result()

    @operation("update_item", write=True)
    async def update_item(
        self,
        item_key: str,
        changes: ItemChanges,
        expected_version: int | None = None,
    ) -> dict[str, Any]:
        result = await self.reconciler.apply(item_key, changes, expected_version)
        log_operation(
            logger, "update_item", item_key, "success", fields=len(result["updated_fields"])
        )
        return result

    @operation("create_note", write=True)
    async def create_note(
        self, item_key: str, content: str, tags: list[str] | None = None
    ) -> dict[str, Any]:
        return await self.browser.create_note(item_key, content, tags)

    @operation("create_collection", write=True)
    async def create_collection(
        self, name: str, parent_key: str | None = None
    ) -> dict[str, Any]:
        return await self.browser.create_collection(name, parent_key)

    # -------------------- Read operations --------------------

    @operation("get_item_fulltext")
    async def get_item_fulltext(self, item_key: str) -> dict[str, Any]:
        return await self.fulltext.resolve(item_key)

    @operation("get_library_stats")
    async def get_library_stats(self) -> dict[str, Any]:
        return await self.stats.summarize()

    @operation("search_items")
    async def search_items(self, params: SearchItemsInput) -> dict[str, Any]:
        return await self.browser.search_items(params)

    @operation("get_item")
    async def get_item(self, item_key: str) -> dict[str, Any]:
        return await self.browser.get_item(item_key)

    @operation("get_collection_items")
    async def get_collection_items(self, params: GetCollectionItemsInput) -> dict[str, Any]:
        return await self.browser.get_collection_items(params)

    @operation("get_recent_items")
    async def get_recent_items(self, params: GetRecentInput) -> dict[str, Any]:
        return await self.browser.get_recent_items(params)

    @operation("list_collections")
    async def list_collections(self) -> dict[str, Any]:
        return await self.browser.list_collections()

    @operation("list_tags")
    async def list_tags(self, limit: int = 100, offset: int = 0) -> dict[str, Any]:
        return await self.browser.list_tags(limit, offset)

    @operation("list_groups")
    async def list_groups(self) -> dict[str, Any]:
        return await self.browser.list_groups()

    @operation("get_attachment_content")
    async def get_attachment_content(self, item_key: str) -> dict[str, Any]:
        return await self.browser.get_attachment_content(item_key)


_library_service: LibraryService | None = None


def get_library_service() -> LibraryService:
    """
    Get the shared library service, building it from configuration.

    Raises:
        ConfigurationError: If credentials are missing
    """
    global _library_service
    if _library_service is None:
        _library_service = LibraryService(get_library_ref())
    return _library_service

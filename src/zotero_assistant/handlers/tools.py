"""MCP tool handlers."""

from collections.abc import Sequence
import json
import logging
from typing import Any

from mcp.types import TextContent, Tool
from pydantic import ValidationError as InputValidationError

from zotero_assistant.handlers.help import get_help
from zotero_assistant.models.attachments import AttachPdfInput, AttachSnapshotInput
from zotero_assistant.models.collections import (
    CreateCollectionInput,
    GetHelpInput,
    ListTagsInput,
)
from zotero_assistant.models.common import EmptyInput
from zotero_assistant.models.enums import ToolName
from zotero_assistant.models.items import (
    CreateNoteInput,
    GetCollectionItemsInput,
    GetItemInput,
    GetRecentInput,
    ItemFields,
    SaveItemInput,
    SearchItemsInput,
    UpdateItemInput,
)
from zotero_assistant.services.library_service import LibraryService, get_library_service
from zotero_assistant.services.operation_result import operation_error
from zotero_assistant.settings import settings
from zotero_assistant.utils.errors import ZoteroMCPError, handle_error

logger = logging.getLogger(__name__)

WRITE_TOOLS = frozenset(
    {
        ToolName.SAVE_ITEM,
        ToolName.ATTACH_PDF,
        ToolName.ATTACH_SNAPSHOT,
        ToolName.CREATE_NOTE,
        ToolName.UPDATE_ITEM,
        ToolName.CREATE_COLLECTION,
    }
)


def _format_validation_error(exc: InputValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "input"
        problems.append(f"{location}: {error.get('msg')}")
    return "Invalid arguments: " + "; ".join(problems)


def _to_text(payload: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2, default=str))]


class ToolHandler:
    """Handler for MCP tool calls."""

    def __init__(
        self,
        service: LibraryService | None = None,
        enable_write_tools: bool | None = None,
    ):
        """
        Initialize ToolHandler.

        Args:
            service: Library service (built from configuration on first use if omitted)
            enable_write_tools: Expose write tools (defaults to the setting)
        """
        self._service = service
        self.enable_write_tools = (
            settings.enable_write_tools if enable_write_tools is None else enable_write_tools
        )

    @property
    def service(self) -> LibraryService:
        if self._service is None:
            self._service = get_library_service()
        return self._service

    async def close(self) -> None:
        """Close the service if it was built."""
        if self._service is not None:
            await self._service.close()

    def get_tools(self) -> list[Tool]:
        """Get all tool definitions."""
        tools: list[Tool] = [
            Tool(
                name=ToolName.GET_HELP,
                description="Get workflow instructions for using Zotero tools. Call "
                "with no topic for an overview. Topics: search, saving, "
                "attachments, updating, collections.",
                inputSchema=GetHelpInput.model_json_schema(),
            ),
            # Search & browse
            Tool(
                name=ToolName.SEARCH_ITEMS,
                description="Search the library by text, tags, item type, or collection",
                inputSchema=SearchItemsInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.GET_COLLECTION_ITEMS,
                description="List items in a collection",
                inputSchema=GetCollectionItemsInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.GET_RECENT_ITEMS,
                description="Get recently added or modified items",
                inputSchema=GetRecentInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.LIST_COLLECTIONS,
                description="List all collections with their keys",
                inputSchema=EmptyInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.LIST_TAGS,
                description="List tags with item counts",
                inputSchema=ListTagsInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.LIST_GROUPS,
                description="List the group libraries the API key's user belongs to",
                inputSchema=EmptyInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.GET_LIBRARY_STATS,
                description="Library overview: item, collection and tag counts, "
                "top tags, and the last modified item",
                inputSchema=EmptyInput.model_json_schema(),
            ),
            # Read
            Tool(
                name=ToolName.GET_ITEM,
                description="Get full item metadata plus a summary of its "
                "attachments and notes",
                inputSchema=GetItemInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.GET_ITEM_FULLTEXT,
                description="Get extracted full text of an item or attachment. "
                "PDFs are tried first.",
                inputSchema=GetItemInput.model_json_schema(),
            ),
            Tool(
                name=ToolName.GET_ATTACHMENT_CONTENT,
                description="Read the stored file of an attachment (HTML snapshots, "
                "text files)",
                inputSchema=GetItemInput.model_json_schema(),
            ),
        ]

        if self.enable_write_tools:
            tools.extend(
                [
                    Tool(
                        name=ToolName.SAVE_ITEM,
                        description="Create an item with metadata, optionally "
                        "attaching a PDF or a webpage snapshot",
                        inputSchema=SaveItemInput.model_json_schema(),
                    ),
                    Tool(
                        name=ToolName.ATTACH_PDF,
                        description="Download a PDF and attach it to an existing item",
                        inputSchema=AttachPdfInput.model_json_schema(),
                    ),
                    Tool(
                        name=ToolName.ATTACH_SNAPSHOT,
                        description="Save a webpage as an HTML snapshot on an "
                        "existing item",
                        inputSchema=AttachSnapshotInput.model_json_schema(),
                    ),
                    Tool(
                        name=ToolName.CREATE_NOTE,
                        description="Create a note on an existing item",
                        inputSchema=CreateNoteInput.model_json_schema(),
                    ),
                    Tool(
                        name=ToolName.UPDATE_ITEM,
                        description="Update metadata, tags, and collections of an "
                        "item. Tags and collections can be replaced, added to, or "
                        "removed from.",
                        inputSchema=UpdateItemInput.model_json_schema(),
                    ),
                    Tool(
                        name=ToolName.CREATE_COLLECTION,
                        description="Create a collection, optionally nested under a parent",
                        inputSchema=CreateCollectionInput.model_json_schema(),
                    ),
                ]
            )

        return tools

    async def handle_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> Sequence[TextContent]:
        """Handle tool call."""
        args = arguments or {}
        write = name in WRITE_TOOLS

        if write and not self.enable_write_tools:
            return _to_text(
                operation_error(
                    "configuration",
                    f"Tool '{name}' is disabled (ZOTERO_ENABLE_WRITE_TOOLS=false)",
                    write=True,
                )
            )

        try:
            result = await self._dispatch(name, args)
        except InputValidationError as exc:
            logger.warning(f"Invalid arguments for {name}: {exc}")
            result = operation_error(
                "validation", _format_validation_error(exc), write=write
            )
        except ZoteroMCPError as exc:
            error_type, message = handle_error(exc, name)
            result = operation_error(error_type, message, write=write)

        return _to_text(result)

    async def _dispatch(self, name: str, args: dict[str, Any]) -> Any:
        match name:
            case ToolName.GET_HELP:
                params = GetHelpInput(**args)
                return get_help(params.topic)

            case ToolName.SEARCH_ITEMS:
                params = SearchItemsInput(**args)
                return await self.service.search_items(params)

            case ToolName.GET_COLLECTION_ITEMS:
                params = GetCollectionItemsInput(**args)
                return await self.service.get_collection_items(params)

            case ToolName.GET_RECENT_ITEMS:
                params = GetRecentInput(**args)
                return await self.service.get_recent_items(params)

            case ToolName.LIST_COLLECTIONS:
                EmptyInput(**args)
                return await self.service.list_collections()

            case ToolName.LIST_TAGS:
                params = ListTagsInput(**args)
                return await self.service.list_tags(params.limit, params.offset)

            case ToolName.LIST_GROUPS:
                EmptyInput(**args)
                return await self.service.list_groups()

            case ToolName.GET_LIBRARY_STATS:
                EmptyInput(**args)
                return await self.service.get_library_stats()

            case ToolName.GET_ITEM:
                params = GetItemInput(**args)
                return await self.service.get_item(params.item_key)

            case ToolName.GET_ITEM_FULLTEXT:
                params = GetItemInput(**args)
                return await self.service.get_item_fulltext(params.item_key)

            case ToolName.GET_ATTACHMENT_CONTENT:
                params = GetItemInput(**args)
                return await self.service.get_attachment_content(params.item_key)

            case ToolName.SAVE_ITEM:
                params = SaveItemInput(**args)
                fields = ItemFields(
                    **params.model_dump(include=set(ItemFields.model_fields))
                )
                return await self.service.save_item(
                    fields,
                    item_type=params.item_type,
                    pdf_url=params.pdf_url,
                    snapshot_url=params.snapshot_url,
                )

            case ToolName.ATTACH_PDF:
                params = AttachPdfInput(**args)
                return await self.service.attach_pdf(
                    params.item_key, params.pdf_url, params.filename
                )

            case ToolName.ATTACH_SNAPSHOT:
                params = AttachSnapshotInput(**args)
                return await self.service.attach_snapshot(
                    params.item_key, params.url, params.title
                )

            case ToolName.CREATE_NOTE:
                params = CreateNoteInput(**args)
                return await self.service.create_note(
                    params.item_key, params.content, params.tags
                )

            case ToolName.UPDATE_ITEM:
                params = UpdateItemInput(**args)
                return await self.service.update_item(
                    params.item_key, params.changes(), params.expected_version
                )

            case ToolName.CREATE_COLLECTION:
                params = CreateCollectionInput(**args)
                return await self.service.create_collection(
                    params.name, params.parent_key
                )

            case _:
                return operation_error("validation", f"Unknown tool: {name}")

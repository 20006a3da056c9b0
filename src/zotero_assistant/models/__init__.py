"""Pydantic models for tool inputs and operation results."""

from .attachments import (
    AttachmentOutcome,
    AttachmentStatus,
    AttachPdfInput,
    AttachSnapshotInput,
)
from .collections import CreateCollectionInput, GetHelpInput, ListTagsInput
from .common import BaseInput, EmptyInput, PaginatedInput, SearchMode, SortDirection
from .enums import ToolName
from .fulltext import FulltextRecord
from .items import (
    CreateNoteInput,
    GetCollectionItemsInput,
    GetItemInput,
    GetRecentInput,
    ItemChanges,
    ItemFields,
    SaveItemInput,
    SearchItemsInput,
    UpdateItemInput,
)

__all__ = [
    "AttachPdfInput",
    "AttachSnapshotInput",
    "AttachmentOutcome",
    "AttachmentStatus",
    "BaseInput",
    "CreateCollectionInput",
    "CreateNoteInput",
    "EmptyInput",
    "FulltextRecord",
    "GetCollectionItemsInput",
    "GetHelpInput",
    "GetItemInput",
    "GetRecentInput",
    "ItemChanges",
    "ItemFields",
    "ListTagsInput",
    "PaginatedInput",
    "SaveItemInput",
    "SearchItemsInput",
    "SearchMode",
    "SortDirection",
    "ToolName",
    "UpdateItemInput",
]

"""
Pydantic models for collection and tag tools.
"""

from pydantic import Field

from zotero_assistant.models.common import BaseInput, PaginatedInput


class CreateCollectionInput(BaseInput):
    """Input for creating a new collection."""

    name: str = Field(..., max_length=255, description="Name of the new collection")
    parent_key: str | None = Field(
        default=None,
        description="Parent collection key. If None, creates a top-level collection.",
    )


class ListTagsInput(PaginatedInput):
    """Input for the list_tags tool."""

    limit: int = Field(default=100, ge=1, le=100, description="Maximum tags to return")


class GetHelpInput(BaseInput):
    """Input for the get_help tool."""

    topic: str | None = Field(
        default=None,
        description="Help topic: search, saving, attachments, updating, collections. "
        "Omit for overview.",
    )

"""
Pydantic models for item-related tools.
"""

from typing import Literal

from pydantic import Field

from zotero_assistant.models.common import (
    BaseInput,
    PaginatedInput,
    SearchMode,
    SortDirection,
)


class ItemFields(BaseInput):
    """Bibliographic fields supplied when creating an item."""

    title: str = Field(..., min_length=1, description="Item title")
    authors: list[str] = Field(
        default_factory=list,
        description="Author names, e.g. 'Jane Doe' or 'World Health Organization'",
    )
    date: str | None = Field(default=None, description="Publication date")
    url: str | None = Field(default=None, description="URL of the resource")
    abstract: str | None = Field(default=None, description="Abstract or summary")
    publication: str | None = Field(
        default=None, description="Journal, blog or website name"
    )
    volume: str | None = Field(default=None, description="Volume number")
    issue: str | None = Field(default=None, description="Issue number")
    pages: str | None = Field(default=None, description="Page range")
    doi: str | None = Field(default=None, description="Digital Object Identifier")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    collection_key: str | None = Field(
        default=None, description="Collection key to file the new item under"
    )
    extra: str | None = Field(default=None, description="Extra field content")


class SaveItemInput(ItemFields):
    """Input for the save_item tool."""

    item_type: str = Field(
        default="webpage",
        description="Friendly type (article, book, chapter, report, webpage, blog, ...) "
        "or a canonical Zotero item type",
    )
    pdf_url: str | None = Field(
        default=None,
        description="PDF to download and attach. Takes priority over snapshot_url.",
    )
    snapshot_url: str | None = Field(
        default=None, description="Web page to save as an HTML snapshot"
    )


class ItemChanges(BaseInput):
    """Changes to merge into an existing item."""

    title: str | None = Field(default=None, description="New title")
    abstract: str | None = Field(default=None, description="New abstract")
    date: str | None = Field(default=None, description="New date")
    extra: str | None = Field(default=None, description="New extra field")
    tags: list[str] | None = Field(
        default=None, description="Replace ALL tags with this list"
    )
    add_tags: list[str] | None = Field(
        default=None, description="Tags to add, keeping existing ones"
    )
    remove_tags: list[str] | None = Field(
        default=None, description="Tags to remove, keeping the rest"
    )
    collections: list[str] | None = Field(
        default=None, description="Replace ALL collection memberships"
    )
    add_collections: list[str] | None = Field(
        default=None, description="Collection keys to add the item to"
    )
    remove_collections: list[str] | None = Field(
        default=None, description="Collection keys to remove the item from"
    )

    def is_empty(self) -> bool:
        """True when no field would change."""
        return not self.model_dump(exclude_none=True)


class UpdateItemInput(ItemChanges):
    """Input for the update_item tool."""

    item_key: str = Field(
        ..., min_length=1, max_length=20, description="Zotero item key"
    )
    expected_version: int | None = Field(
        default=None,
        ge=0,
        description="Last version you observed. The update is rejected with a "
        "conflict if the item changed since.",
    )

    def changes(self) -> ItemChanges:
        return ItemChanges(
            **self.model_dump(exclude={"item_key", "expected_version"})
        )


class GetItemInput(BaseInput):
    """Input for get_item, get_item_fulltext and get_attachment_content."""

    item_key: str = Field(
        ..., min_length=1, max_length=20, description="Zotero item key"
    )


class SearchItemsInput(PaginatedInput):
    """Input for the search_items tool."""

    query: str | None = Field(default=None, description="Search text")
    qmode: SearchMode = Field(
        default=SearchMode.TITLE_CREATOR_YEAR,
        description="'titleCreatorYear' (default) or 'everything' (includes full text)",
    )
    tag: str | list[str] | None = Field(
        default=None,
        description="Tag filter. A list means ALL tags; prefix '-' to exclude.",
    )
    item_type: str | None = Field(
        default=None, description="Item type filter (friendly or canonical)"
    )
    collection_key: str | None = Field(
        default=None, description="Restrict the search to this collection"
    )
    sort: Literal["dateAdded", "dateModified", "title", "creator", "date"] = Field(
        default="dateModified", description="Sort field"
    )
    direction: SortDirection = Field(default=SortDirection.DESC)


class GetCollectionItemsInput(PaginatedInput):
    """Input for the get_collection_items tool."""

    collection_key: str = Field(
        ..., min_length=1, max_length=20, description="Collection key"
    )
    sort: Literal["dateAdded", "dateModified", "title", "creator", "date"] = Field(
        default="dateModified", description="Sort field"
    )
    direction: SortDirection = Field(default=SortDirection.DESC)


class GetRecentInput(BaseInput):
    """Input for the get_recent_items tool."""

    limit: int = Field(default=10, ge=1, le=100, description="Number of items")
    sort: Literal["dateAdded", "dateModified"] = Field(
        default="dateAdded", description="Recently added or recently modified"
    )


class CreateNoteInput(BaseInput):
    """Input for the create_note tool."""

    item_key: str = Field(
        ..., min_length=1, max_length=20, description="Zotero item key"
    )
    content: str = Field(..., min_length=1, description="Note content (HTML allowed)")
    tags: list[str] = Field(default_factory=list, description="Tags for the note")

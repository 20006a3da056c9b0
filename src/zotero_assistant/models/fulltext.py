"""Full-text records returned by the Zotero fulltext endpoint."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FulltextRecord(BaseModel):
    """Extracted text of one attachment plus its indexing progress."""

    model_config = ConfigDict(populate_by_name=True)

    content: str | None = None
    indexed_pages: int | None = Field(default=None, alias="indexedPages")
    total_pages: int | None = Field(default=None, alias="totalPages")
    indexed_chars: int | None = Field(default=None, alias="indexedChars")
    total_chars: int | None = Field(default=None, alias="totalChars")

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    def extent(self) -> dict[str, Any]:
        """Indexing extent in the store's own key names, unset ones omitted."""
        return self.model_dump(
            by_alias=True, exclude={"content"}, exclude_none=True
        )

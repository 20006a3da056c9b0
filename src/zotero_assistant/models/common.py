"""
Common Pydantic models and enums used across all tools.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SearchMode(str, Enum):
    """Search mode for keyword search."""

    TITLE_CREATOR_YEAR = "titleCreatorYear"
    EVERYTHING = "everything"


class SortDirection(str, Enum):
    """Sort direction for list endpoints."""

    ASC = "asc"
    DESC = "desc"


class BaseInput(BaseModel):
    """Base class for all tool input models."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


class PaginatedInput(BaseInput):
    """Base class for paginated tool inputs."""

    limit: int = Field(
        default=25,
        ge=1,
        le=100,
        description="Maximum number of results to return (1-100)",
    )
    offset: int = Field(
        default=0, ge=0, description="Number of results to skip for pagination"
    )


class EmptyInput(BaseInput):
    """Empty input for no-argument tools."""

    pass

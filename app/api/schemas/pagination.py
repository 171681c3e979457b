"""Offset pagination response schema."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Response model for one page of a search."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    per_page: int = Field(..., alias="perPage")
    items_count: int = Field(..., alias="itemsCount", description="Documents in the collection")
    items_found: int = Field(..., alias="itemsFound", description="Documents matching the filter")
    data: list[T]

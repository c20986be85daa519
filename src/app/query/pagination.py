from __future__ import annotations

from typing import Generic, List, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResult(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    data: List[T] = Field(..., description="Rows or documents of the requested page")
    total: int = Field(..., description="Number of items matching the filters")
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., alias="pageSize", description="Number of items per page")
    total_pages: int = Field(..., alias="totalPages", description="Total number of pages")


def assemble(data: Sequence[T], total: int, page: int, page_size: int) -> PaginatedResult[T]:
    """Wrap one page of results with the shared envelope.

    ``totalPages`` is ``ceil(total / pageSize)`` and is 0 exactly when ``total`` is 0.
    """
    if total == 0:
        total_pages = 0
    else:
        total_pages = (total + page_size - 1) // page_size
    return PaginatedResult(
        data=list(data),
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )

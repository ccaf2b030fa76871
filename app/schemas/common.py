"""Response envelopes shared by all resources."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PageMeta(BaseModel):
    """Pagination metadata."""

    current_page: int
    last_page: int
    per_page: int
    total: int


class ListResponse(BaseModel, Generic[T]):
    """Paginated collection envelope."""

    data: list[T]
    meta: PageMeta


class DataResponse(BaseModel, Generic[T]):
    """Single resource envelope."""

    data: T
    message: str | None = None


class MessageResponse(BaseModel):
    message: str


def last_page(total: int, per_page: int) -> int:
    """Number of the last page; 1 for an empty collection."""
    return max(math.ceil(total / per_page), 1)


def page_meta(total: int, page: int, per_page: int) -> PageMeta:
    return PageMeta(
        current_page=page,
        last_page=last_page(total, per_page),
        per_page=per_page,
        total=total,
    )

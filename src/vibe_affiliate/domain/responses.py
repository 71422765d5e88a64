"""
vibe_affiliate.domain.responses

API response envelope shared by every endpoint.

Responsibilities:
- `APIResponse[T]`: success flag + data or error/message + optional pagination meta.
- `PaginatedResponse[T]`: list payload with mandatory pagination meta.
- `paginate`: slice an in-memory list into a page.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseMeta(_Envelope):
    page: int | None = None
    limit: int | None = None
    total: int | None = None
    total_pages: int | None = None
    has_next: bool | None = None
    has_prev: bool | None = None


class PageMeta(_Envelope):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class APIResponse(_Envelope, Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None
    meta: ResponseMeta | None = None
    details: dict[str, Any] | None = None

    @classmethod
    def ok(cls, data: T, message: str | None = None) -> APIResponse[T]:
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(
        cls, error: str, message: str, *, details: dict[str, Any] | None = None
    ) -> APIResponse[T]:
        return cls(success=False, error=error, message=message, details=details)


class PaginatedResponse(_Envelope, Generic[T]):
    success: bool = True
    data: list[T] = Field(default_factory=list)
    message: str | None = None
    meta: PageMeta


def paginate(items: Sequence[T], *, page: int = 1, limit: int = 20) -> PaginatedResponse[T]:
    """
    1-based pagination over an in-memory sequence.

    A page past the end returns an empty `data` list with the real totals so
    clients can still render "page N of M".
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")

    total = len(items)
    total_pages = math.ceil(total / limit) if total else 0
    start = (page - 1) * limit
    return PaginatedResponse[T](
        data=list(items[start : start + limit]),
        meta=PageMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )

"""
ProjectHub Backend: Shared API Schemas
======================================

What:  Pagination envelopes and the error response model shared by every
       listing/route module.
How:   JSON field names are camelCase (aliases generated from the snake_case
       attributes); FastAPI serializes response models by alias.

Envelopes:
    Offset mode:  {"data": [...], "pagination": {"page", "limit", "total", "totalPages", "hasMore"}}
    Cursor mode:  {"data": [...], "pagination": {"limit", "hasMore", "nextCursor"?}}
"""

from typing import Any, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model that reads snake_case or camelCase and writes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationParams(CamelModel):
    """Normalized pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    limit: int = Field(default=20, ge=1, le=100, description="Items per page (max 100)")
    cursor: Optional[str] = Field(default=None, description="Identifier of the last row seen")


class PageMeta(CamelModel):
    """Offset pagination metadata."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool


class CursorMeta(CamelModel):
    """Cursor pagination metadata. `next_cursor` is omitted on the last page."""

    limit: int
    has_more: bool
    next_cursor: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_missing_cursor(self, handler):
        data = handler(self)
        if self.next_cursor is None:
            data.pop("nextCursor", None)
            data.pop("next_cursor", None)
        return data


class Page(CamelModel, Generic[T]):
    data: List[T]
    pagination: PageMeta


class CursorPage(CamelModel, Generic[T]):
    data: List[T]
    pagination: CursorMeta


class ErrorResponse(BaseModel):
    """
    Error envelope returned for every 4xx/5xx response.

    Example:
        {"error": "Notification ID is required", "code": "ValidationError",
         "details": {"field": "id"}}
    """

    error: str = Field(description="Client-safe error message")
    code: Optional[str] = Field(default=None, description="Machine-readable error kind")
    details: Optional[Union[dict, List[Any]]] = Field(default=None, description="Structured error info")

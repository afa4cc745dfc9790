"""
ProjectHub Backend: Pagination Helpers
======================================

Pure functions that normalize `page`/`limit`/`cursor` query parameters and
shape listing results into the shared `{data, pagination}` envelope.

Offset mode:
    params = parse_pagination_params(request.query_params)
    rows = await repo.find_many(db, **get_offset_options(params.page, params.limit))
    total = await repo.count(db)
    return create_pagination_result(rows, total, params.page, params.limit)

Cursor mode (one lookahead row detects further pages):
    rows = await repo.find_many(db, **get_cursor_options(params.cursor, params.limit))
    return create_cursor_pagination_result(rows, params.limit)

Out-of-range input is clamped silently; malformed input falls back to the
defaults. Nothing here raises for bad query strings.
"""

import math
import re
from collections.abc import Mapping
from typing import Any, Dict, Optional, Sequence, TypeVar

from projecthub.schemas.common import CursorMeta, CursorPage, Page, PageMeta, PaginationParams

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

# Leading integer, as in "20abc" → 20 or "2.5" → 2
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else default


def parse_pagination_params(query: Mapping) -> PaginationParams:
    """
    Read `page`, `limit` and `cursor` from a string-keyed mapping
    (e.g. `request.query_params`).

    Numbers are read from their leading digits ("2.5" is 2, "20abc" is 20);
    a value with no leading integer uses the default.

    page  = max(1, page)              default 1
    limit = min(100, max(1, limit))   default 20
    """
    page = _parse_int(query.get("page"), DEFAULT_PAGE)
    limit = _parse_int(query.get("limit"), DEFAULT_LIMIT)
    cursor = query.get("cursor") or None

    return PaginationParams(
        page=max(1, page),
        limit=min(MAX_LIMIT, max(1, limit)),
        cursor=cursor,
    )


def calculate_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def create_pagination_result(
    data: Sequence[T],
    total: int,
    page: int,
    limit: int,
) -> Page[T]:
    """Wrap one page of rows with totals; `data` is copied, not mutated."""
    total_pages = math.ceil(total / limit) if limit else 0
    return Page[Any](
        data=list(data),
        pagination=PageMeta(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_more=page < total_pages,
        ),
    )


def _cursor_of(row: Any, key: str) -> str:
    value = row[key] if isinstance(row, Mapping) else getattr(row, key)
    return str(value)


def create_cursor_pagination_result(
    data: Sequence[T],
    limit: int,
    key: str = "id",
) -> CursorPage[T]:
    """
    Build a cursor page from rows fetched with a `limit + 1` lookahead.

    The extra row, when present, only signals `has_more` and is dropped;
    `next_cursor` is the `key` of the last row kept.
    """
    has_more = len(data) > limit
    items = list(data[:limit]) if has_more else list(data)
    next_cursor = _cursor_of(items[-1], key) if has_more and items else None

    return CursorPage[Any](
        data=items,
        pagination=CursorMeta(limit=limit, has_more=has_more, next_cursor=next_cursor),
    )


def get_offset_options(page: int, limit: int) -> Dict[str, int]:
    """Query options for offset pagination: `{"skip", "take"}`."""
    return {
        "take": limit,
        "skip": calculate_offset(page, limit),
    }


def get_cursor_options(cursor: Optional[str], limit: int) -> Dict[str, Any]:
    """
    Query options for cursor pagination.

    `take` includes the lookahead row; `skip=1` excludes the cursor row
    itself when a cursor is given.
    """
    options: Dict[str, Any] = {
        "take": limit + 1,
        "skip": 1 if cursor else 0,
    }
    if cursor:
        options["cursor"] = cursor
    return options

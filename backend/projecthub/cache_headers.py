"""
ProjectHub Backend: Cache-Control Strategies
============================================

Named Cache-Control policies for API responses.

    no-cache                 always revalidate
    static                   one year, immutable
    short                    5 minutes
    medium                   1 hour
    long                     1 day
    stale-while-revalidate   1 minute fresh, 5 minutes stale

Unknown strategy names fall back to a no-store policy.
"""

from typing import Any, Literal

from fastapi.responses import JSONResponse
from starlette.responses import Response

CacheStrategy = Literal[
    "no-cache",
    "static",
    "short",
    "medium",
    "long",
    "stale-while-revalidate",
]

CACHE_POLICIES = {
    "no-cache": "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0",
    "static": "public, max-age=31536000, immutable",
    "short": "public, max-age=300, s-maxage=300",
    "medium": "public, max-age=3600, s-maxage=3600",
    "long": "public, max-age=86400, s-maxage=86400",
    "stale-while-revalidate": "public, max-age=60, stale-while-revalidate=300",
}

FALLBACK_POLICY = "no-store, no-cache, must-revalidate"


def get_cache_header(strategy: str) -> str:
    return CACHE_POLICIES.get(strategy, FALLBACK_POLICY)


def with_cache_headers(response: Response, strategy: CacheStrategy) -> Response:
    """Set Cache-Control on `response` in place and return it."""
    response.headers["Cache-Control"] = get_cache_header(strategy)
    return response


def cached_response(content: Any, strategy: CacheStrategy, status_code: int = 200) -> JSONResponse:
    """JSON response carrying the Cache-Control header for `strategy`."""
    return JSONResponse(
        content=content,
        status_code=status_code,
        headers={"Cache-Control": get_cache_header(strategy)},
    )

"""
ProjectHub Backend: Rate Limiting
=================================

What:  Per-(client IP, route) fixed-window rate limiter applied to individual
       route handlers.
How:   `rate_limit` wraps an async handler. Each call looks up the entry for
       `"{ip}:{path}"` in a store, starts a fresh window when the entry is
       absent or expired, and increments the count. A count above
       `max_requests` answers 429 without calling the handler; otherwise the
       handler runs and `X-RateLimit-*` headers are attached.

Algorithm: Fixed Window Counter
    1. key = client_ip + ":" + path
    2. entry missing or entry.reset_time < now  →  entry = {count: 0, reset_time: now + window}
    3. entry.count += 1
    4. entry.count > max_requests  →  429 + Retry-After
    5. else                        →  handler response + X-RateLimit-* headers

    Step 2-4 contain no await, so the read-increment sequence is atomic on
    the event loop. A threaded host would need a lock around it.

State:
    Entries live in a `RateLimitStore`. The default is a process-wide
    in-memory store, so counts reset on restart and are not shared between
    workers. `RateLimitSweeper` evicts expired entries on an interval; it is
    an explicit task started and stopped by the application lifespan.

Usage:
    @router.post("/forgot-password")
    @rate_limit(max_requests=5, window_ms=15 * 60 * 1000)
    @with_error_handler
    async def forgot_password(request: Request, ...):
        ...
"""

import asyncio
import contextlib
import functools
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Protocol, Tuple

from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from projecthub.config import settings
from projecthub.error_handler import find_request

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Handler = Callable[..., Awaitable[Any]]

DEFAULT_MESSAGE = "Too many requests. Please try again later."


@dataclass
class RateLimitEntry:
    """Request count for one key and the epoch second its window closes."""

    count: int
    reset_time: float

    def expired(self, now: float) -> bool:
        return self.reset_time < now


# ── Stores ────────────────────────────────────────────────────────────────

class RateLimitStore(Protocol):
    """Keyed storage for rate-limit entries."""

    def get(self, key: str) -> Optional[RateLimitEntry]: ...

    def set(self, key: str, entry: RateLimitEntry) -> None: ...

    def delete(self, key: str) -> None: ...

    def items(self) -> Iterator[Tuple[str, RateLimitEntry]]: ...

    def clear(self) -> None: ...


class InMemoryRateLimitStore:
    """Dict-backed store. Single process only."""

    def __init__(self) -> None:
        self._entries: Dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> Optional[RateLimitEntry]:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def items(self) -> Iterator[Tuple[str, RateLimitEntry]]:
        # Snapshot, so callers may delete while iterating
        return iter(list(self._entries.items()))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


default_store = InMemoryRateLimitStore()


# ── Client identification ─────────────────────────────────────────────────

def get_client_ip(request: Request) -> str:
    """
    Client IP as reported by the fronting proxy.

    Order: first entry of X-Forwarded-For, X-Real-IP, CF-Connecting-IP.
    Requests with none of these share the "unknown" bucket.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()

    return "unknown"


def rate_limit_key(ip: str, path: str) -> str:
    return f"{ip}:{path}"


def _rate_limit_headers(max_requests: int, remaining: int, reset_time: float) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(max_requests),
        "X-RateLimit-Remaining": str(max(0, remaining)),
        "X-RateLimit-Reset": str(math.ceil(reset_time)),
    }


# ── Decorator ─────────────────────────────────────────────────────────────

def rate_limit(
    handler: Optional[Handler] = None,
    *,
    max_requests: Optional[int] = None,
    window_ms: Optional[int] = None,
    message: str = DEFAULT_MESSAGE,
    store: Optional[RateLimitStore] = None,
    clock: Optional[Clock] = None,
):
    """
    Wrap an async route handler with a fixed-window limit.

    Defaults come from settings (5 requests per 900000 ms). `store` and
    `clock` (epoch seconds) are injectable for tests. The handler must
    receive the Starlette `Request`; a call without one raises TypeError.
    Handler results that are not Responses are JSON-encoded so headers can
    be attached.
    """
    limit = max_requests if max_requests is not None else settings.rate_limit_max_requests
    window = window_ms if window_ms is not None else settings.rate_limit_window_ms
    window_seconds = window / 1000
    now_fn = clock or time.time

    def decorate(fn: Handler) -> Handler:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request = find_request(args, kwargs)
            if request is None:
                raise TypeError(f"{fn.__name__} must accept a Request to be rate limited")

            entries = store if store is not None else default_store
            ip = get_client_ip(request)
            key = rate_limit_key(ip, request.url.path)
            now = now_fn()

            entry = entries.get(key)
            if entry is None or entry.expired(now):
                entry = RateLimitEntry(count=0, reset_time=now + window_seconds)
            entry.count += 1
            entries.set(key, entry)

            if entry.count > limit:
                retry_after = max(0, math.ceil(entry.reset_time - now))
                logger.warning(
                    "Rate limit exceeded for %s on %s: %d requests in %ds window",
                    ip,
                    request.url.path,
                    entry.count,
                    window_seconds,
                )
                headers = _rate_limit_headers(limit, 0, entry.reset_time)
                headers["Retry-After"] = str(retry_after)
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": message,
                        "code": "RateLimitError",
                        "retryAfter": f"{retry_after} seconds",
                        "limit": limit,
                        "window": f"{window_seconds:g} seconds",
                    },
                    headers=headers,
                )

            result = await fn(*args, **kwargs)
            response = result if isinstance(result, Response) else JSONResponse(jsonable_encoder(result))
            response.headers.update(_rate_limit_headers(limit, limit - entry.count, entry.reset_time))
            return response

        return wrapper

    if handler is not None:
        return decorate(handler)
    return decorate


# ── Introspection ─────────────────────────────────────────────────────────

def _live_entry(
    ip: str,
    path: str,
    store: Optional[RateLimitStore],
    clock: Optional[Clock],
) -> Optional[RateLimitEntry]:
    entries = store if store is not None else default_store
    entry = entries.get(rate_limit_key(ip, path))
    if entry is None or entry.expired((clock or time.time)()):
        return None
    return entry


def get_rate_limit_status(
    ip: str,
    path: str,
    max_requests: Optional[int] = None,
    store: Optional[RateLimitStore] = None,
    clock: Optional[Clock] = None,
) -> Optional[Dict[str, Any]]:
    """`{count, reset_time, is_limited}` for a live window, else None."""
    entry = _live_entry(ip, path, store, clock)
    if entry is None:
        return None
    limit = max_requests if max_requests is not None else settings.rate_limit_max_requests
    return {
        "count": entry.count,
        "reset_time": entry.reset_time,
        "is_limited": entry.count > limit,
    }


def is_rate_limited(
    ip: str,
    path: str,
    max_requests: Optional[int] = None,
    store: Optional[RateLimitStore] = None,
    clock: Optional[Clock] = None,
) -> bool:
    status = get_rate_limit_status(ip, path, max_requests, store, clock)
    return bool(status and status["is_limited"])


def clear_rate_limit(ip: str, path: str, store: Optional[RateLimitStore] = None) -> None:
    (store if store is not None else default_store).delete(rate_limit_key(ip, path))


def clear_all_rate_limits(store: Optional[RateLimitStore] = None) -> None:
    (store if store is not None else default_store).clear()


# ── Sweeper ───────────────────────────────────────────────────────────────

def sweep_expired(store: RateLimitStore, now: float) -> int:
    """Delete every expired entry; returns how many were removed."""
    expired = [key for key, entry in store.items() if entry.expired(now)]
    for key in expired:
        store.delete(key)
    return len(expired)


class RateLimitSweeper:
    """
    Background task that evicts expired rate-limit entries.

    Lifecycle is explicit: `start()` schedules the loop on the running event
    loop, `stop()` cancels it and waits for it to finish.
    """

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        interval_seconds: Optional[float] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.store = store if store is not None else default_store
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else settings.rate_limit_sweep_interval_seconds
        )
        self._clock = clock or time.time
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self) -> int:
        removed = sweep_expired(self.store, self._clock())
        if removed:
            logger.debug("Evicted %d expired rate-limit entries", removed)
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.sweep()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info("Rate-limit sweeper started (every %ss)", self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Rate-limit sweeper stopped")

"""
ProjectHub Backend: API Error Handling
======================================

What:  Uniform error responses, request logging and slow-operation logging
       for API route handlers.
How:   `with_error_handler` wraps an async handler. The wrapped handler
       returns the inner response unchanged on success; any exception is
       mapped by `handle_api_error` to a JSON error envelope:

           {"error": "<client-safe message>", "code": "<kind>", "details": ...}

       Unclassified exceptions become `{"error": "Internal server error"}`
       with status 500; their message and stack are logged, never returned.

       `register_exception_handlers` installs the same mapping as FastAPI
       exception handlers, so errors raised before a wrapped handler runs
       (dependencies, request validation) produce the same envelope.

Usage:
    @router.get("/notifications")
    @with_error_handler
    async def list_notifications(request: Request, db: AsyncSession = Depends(get_db_session)):
        ...

Cancellation (asyncio.CancelledError) and Starlette HTTPException always
propagate to the framework.
"""

import functools
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from projecthub.exceptions import (
    GENERIC_ERROR_MESSAGE,
    AppError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from projecthub.logger import log

Handler = Callable[..., Awaitable[Any]]

# Set on handlers returned by with_error_handler
WRAPPED_MARKER = "__error_handled__"


# ══════════════════════════════════════════════════════════════════════════
# Classification
# ══════════════════════════════════════════════════════════════════════════

def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())) or "unknown",
            "message": err.get("msg", "Invalid value"),
        }
        for err in errors
    ]


def classify_error(error: BaseException) -> Optional[AppError]:
    """
    Map an exception onto the application taxonomy.

    Returns None for exceptions that have no client-safe meaning; the caller
    treats those as internal errors.
    """
    if isinstance(error, AppError):
        return error

    if isinstance(error, (RequestValidationError, PydanticValidationError)):
        details = _validation_details(list(error.errors()))
        message = details[0]["message"] if details else "Validation failed"
        return ValidationError(message, details)

    if isinstance(error, IntegrityError):
        return ConflictError("A record with these values already exists")

    if isinstance(error, NoResultFound):
        return NotFoundError()

    return None


def error_body(error: AppError) -> Dict[str, Any]:
    """Client-facing JSON envelope for a classified error."""
    if not error.is_client_error:
        return {"error": GENERIC_ERROR_MESSAGE, "code": error.code}
    body: Dict[str, Any] = {"error": error.client_message, "code": error.code}
    if error.details is not None:
        body["details"] = error.details
    return body


def handle_api_error(
    error: BaseException,
    method: Optional[str] = None,
    path: Optional[str] = None,
) -> JSONResponse:
    """
    Log `error` and build its JSON response.

    Client errors (4xx) log at WARNING; InternalError and unclassified
    exceptions log at ERROR with the full message and stack.
    """
    context: Dict[str, Any] = {}
    if method:
        context["method"] = method
    if path:
        context["path"] = path

    app_error = classify_error(error)

    if app_error is None:
        log.error("Unhandled exception in API route", error, context)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})

    if app_error.is_client_error:
        log.warn(
            f"{app_error.code}: {app_error.message}",
            {**context, "status": app_error.status_code, "details": app_error.details},
        )
    else:
        log.error(
            f"{app_error.code}: {app_error.message}",
            error,
            {**context, "details": app_error.details},
        )

    headers = None
    if isinstance(app_error, RateLimitError) and app_error.retry_after:
        headers = {"Retry-After": str(app_error.retry_after)}

    return JSONResponse(
        status_code=app_error.status_code,
        content=error_body(app_error),
        headers=headers,
    )


# ══════════════════════════════════════════════════════════════════════════
# Handler Wrapper
# ══════════════════════════════════════════════════════════════════════════

def find_request(args: tuple, kwargs: Dict[str, Any]) -> Optional[Request]:
    """First Starlette Request among a handler's arguments, if any."""
    for value in (*args, *kwargs.values()):
        if isinstance(value, Request):
            return value
    return None


def find_sessions(args: tuple, kwargs: Dict[str, Any]) -> List[AsyncSession]:
    return [value for value in (*args, *kwargs.values()) if isinstance(value, AsyncSession)]


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def with_error_handler(
    handler: Optional[Handler] = None,
    *,
    operation: Optional[str] = None,
):
    """
    Wrap an async route handler with error handling and timing.

    Usable bare (`@with_error_handler`) or with an operation name for the
    slow-operation log (`@with_error_handler(operation="List notifications")`).
    The wrapper keeps the handler's signature, so FastAPI resolves the same
    parameters and dependencies.

    When the handler fails, any AsyncSession among its arguments is rolled
    back before the error response is built.

    Wrapping an already wrapped handler returns it unchanged.
    """

    def decorate(fn: Handler) -> Handler:
        if getattr(fn, WRAPPED_MARKER, False):
            return fn

        op_name = operation or fn.__name__

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request = find_request(args, kwargs)
            method = request.method if request is not None else "UNKNOWN"
            path = request.url.path if request is not None else "unknown"

            started = time.perf_counter()
            try:
                response = await fn(*args, **kwargs)
            except StarletteHTTPException:
                raise
            except Exception as exc:
                # Flushed writes must not outlive a handled error; the session
                # dependency still commits after this wrapper returns.
                for session in find_sessions(args, kwargs):
                    await session.rollback()
                response = handle_api_error(exc, method=method, path=path)
            finally:
                duration_ms = _elapsed_ms(started)
                log.log_slow_operation(op_name, duration_ms)

            log.log_request(method, path, getattr(response, "status_code", 200), duration_ms)
            return response

        setattr(wrapper, WRAPPED_MARKER, True)
        return wrapper

    if handler is not None:
        return decorate(handler)
    return decorate


# ══════════════════════════════════════════════════════════════════════════
# Global Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers that share `handle_api_error`.

    Covers errors raised outside wrapped handlers: dependencies, request
    body/query validation, and routes that are not wrapped.
    """

    async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
        return handle_api_error(exc, method=request.method, path=request.url.path)

    for exc_type in (
        AppError,
        RequestValidationError,
        PydanticValidationError,
        IntegrityError,
        NoResultFound,
        Exception,
    ):
        app.add_exception_handler(exc_type, handle_exception)

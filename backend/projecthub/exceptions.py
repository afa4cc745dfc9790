"""
ProjectHub Backend: Application Error Taxonomy
==============================================

What:  The closed set of typed errors any code path may raise to produce a
       specific HTTP response.
How:   Each class fixes its HTTP status and machine-readable code; callers
       supply only a message and optional details. The request wrapper in
       `projecthub.error_handler` turns them into JSON error envelopes.
       Construction has no side effects; logging happens where the error is
       caught.

Exception Hierarchy:
    AppError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized
    ├── AuthorizationError    → 403 Forbidden
    ├── NotFoundError         → 404 Not Found
    ├── ConflictError         → 409 Conflict
    ├── RateLimitError        → 429 Too Many Requests
    └── InternalError         → 500 Internal Server Error

Client safety:
    `message` is returned to the client for every kind except InternalError,
    which always answers with GENERIC_ERROR_MESSAGE. Code that cannot
    classify a failure should let the original exception propagate; the
    wrapper treats it as an internal error.
"""

from typing import Any, Dict, List, Optional, Union

from projecthub.logger import describe_error

GENERIC_ERROR_MESSAGE = "Internal server error"

Details = Union[Dict[str, Any], List[Any]]


class AppError(Exception):
    """
    Base class for all typed application errors.

    Attributes:
        message:  Human-readable description, safe for clients (except InternalError)
        details:  Optional structured info, e.g. field-level validation messages
        status_code / code:  Fixed per subclass
    """

    status_code: int = 500
    code: str = "AppError"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[Details] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500

    @property
    def client_message(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status_code}, message={self.message!r})"


class ValidationError(AppError):
    """
    Client input failed validation (400).

    `field` names the offending input and is merged into `details`.
    """

    status_code = 400
    code = "ValidationError"
    default_message = "Validation failed"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Details] = None,
        field: Optional[str] = None,
    ):
        if field:
            if details is None:
                details = {"field": field}
            elif isinstance(details, dict):
                details = {**details, "field": field}
        super().__init__(message, details)
        self.field = field


class AuthenticationError(AppError):
    """Missing or invalid session (401)."""

    status_code = 401
    code = "AuthenticationError"
    default_message = "Authentication required"


class AuthorizationError(AppError):
    """Authenticated, but not allowed to perform the action (403)."""

    status_code = 403
    code = "AuthorizationError"
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    """The requested resource does not exist (404)."""

    status_code = 404
    code = "NotFoundError"
    default_message = "Resource not found"

    @classmethod
    def for_resource(cls, resource: str, resource_id: Optional[str] = None) -> "NotFoundError":
        details = {"resource": resource}
        if resource_id:
            details["resource_id"] = resource_id
        return cls(f"{resource} not found", details)


class ConflictError(AppError):
    """The request conflicts with existing data, e.g. a duplicate key (409)."""

    status_code = 409
    code = "ConflictError"
    default_message = "Resource already exists"


class RateLimitError(AppError):
    """Too many requests from this client (429)."""

    status_code = 429
    code = "RateLimitError"
    default_message = "Too many requests"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Details] = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.retry_after = retry_after


class InternalError(AppError):
    """
    A classified server-side failure (500).

    The message is logged, never returned.
    """

    status_code = 500
    code = "InternalError"
    default_message = GENERIC_ERROR_MESSAGE

    @property
    def client_message(self) -> str:
        return GENERIC_ERROR_MESSAGE


def get_status_code(error: BaseException) -> int:
    if isinstance(error, AppError):
        return error.status_code
    return 500


def get_client_message(error: BaseException) -> str:
    if isinstance(error, AppError):
        return error.client_message
    return GENERIC_ERROR_MESSAGE


def format_error_for_logging(error: BaseException) -> Dict[str, Any]:
    formatted = describe_error(error)
    if isinstance(error, AppError):
        formatted["status_code"] = error.status_code
        formatted["code"] = error.code
        if error.details is not None:
            formatted["details"] = error.details
    return formatted

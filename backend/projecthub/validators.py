"""
ProjectHub Backend: Input Validators
====================================

Small checks used by route handlers before touching the database. Every
helper raises `ValidationError` (400) with a client-safe message; none of
them return a value except `read_json_body`.
"""

import json
import re
from typing import Any, Dict, Iterable, Mapping

from starlette.requests import Request

from projecthub.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def validate_required_fields(data: Mapping[str, Any], required_fields: Iterable[str]) -> None:
    """Fields that are absent or falsy count as missing."""
    missing = [name for name in required_fields if not data.get(name)]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            {"missing_fields": missing},
        )


def validate_email(email: str) -> None:
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format", {"email": email})


def validate_password(password: str) -> None:
    """At least 8 characters with an uppercase letter, a lowercase letter and a digit."""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long", field="password"
        )
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain at least one uppercase letter", field="password")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain at least one lowercase letter", field="password")
    if not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain at least one number", field="password")


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    An empty body reads as `{}`; malformed JSON or a non-object payload is a
    ValidationError.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body

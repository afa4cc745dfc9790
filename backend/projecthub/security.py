"""
ProjectHub Backend: Session Tokens
==================================

What:  Issues and verifies the JWT that identifies the signed-in user.
How:   HS256 tokens signed with `settings.jwt_secret` (PyJWT). The token is
       read from the session cookie (`settings.session_cookie_name`) or from
       an `Authorization: Bearer` header.

Claims:
    sub / id   user id (either name is accepted when reading)
    email, role, name
    exp        expiry (epoch seconds)

Usage:
    @router.get("/notifications")
    @with_error_handler
    async def list_notifications(request: Request):
        user = await require_user(request)
        ...
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Request
from pydantic import BaseModel

from projecthub.config import settings
from projecthub.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(days=1)


class CurrentUser(BaseModel):
    """Identity carried by a verified session token."""

    id: str
    email: str
    role: str
    name: str = ""


def create_session_token(
    user_id: str,
    email: str,
    role: str,
    name: str = "",
    expires_in: timedelta = DEFAULT_SESSION_TTL,
) -> str:
    """Encode a signed session token for the given user."""
    payload = {
        "sub": user_id,
        "id": user_id,
        "email": email,
        "role": role,
        "name": name,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> CurrentUser:
    """
    Verify `token` and return its identity.

    Raises:
        AuthenticationError: bad signature, expired, or missing identity claims
    """
    try:
        payload: Dict[str, Any] = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Session expired") from exc
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected session token: %s", exc)
        raise AuthenticationError("Invalid session") from exc

    user_id = payload.get("sub") or payload.get("id")
    if not user_id or not payload.get("email") or not payload.get("role"):
        raise AuthenticationError("Invalid session")

    return CurrentUser(
        id=str(user_id),
        email=payload["email"],
        role=payload["role"],
        name=payload.get("name") or "",
    )


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token

    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_user(request: Request) -> Optional[CurrentUser]:
    """Identity of the caller, or None when no token was sent."""
    token = extract_token(request)
    if token is None:
        return None
    return decode_session_token(token)


async def require_user(request: Request) -> CurrentUser:
    """FastAPI dependency: the signed-in user, or AuthenticationError (401)."""
    user = await get_current_user(request)
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user

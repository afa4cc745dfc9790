"""
ProjectHub Backend: Password Reset Service
==========================================

What:  Issues password reset tokens for existing accounts.
How:   Looks the account up by (lower-cased) email, replaces any earlier
       tokens for it with a fresh random token, and builds the reset link.
       Sending the link is the mail collaborator's job; this service only
       logs that a reset was issued.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.config import settings
from projecthub.exceptions import NotFoundError
from projecthub.models.password_reset import PasswordReset
from projecthub.models.user import User
from projecthub.validators import validate_email

logger = logging.getLogger(__name__)


@dataclass
class IssuedReset:
    email: str
    token: str
    reset_url: str
    expires_at: datetime


class PasswordResetService:

    async def request_reset(
        self,
        db: AsyncSession,
        email: str,
        base_url: Optional[str] = None,
    ) -> IssuedReset:
        """
        Create a reset token for `email`.

        Raises:
            ValidationError: malformed email
            NotFoundError:   no account with this email
        """
        email = email.strip().lower()
        validate_email(email)

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("No account found with this email")

        await db.execute(delete(PasswordReset).where(PasswordReset.email == email))

        token = secrets.token_hex(32)
        expires_at = datetime.now(timezone.utc) + timedelta(
            seconds=settings.password_reset_ttl_seconds
        )
        db.add(PasswordReset(email=email, token=token, expires_at=expires_at))
        await db.flush()

        origin = (settings.app_url or base_url or "").rstrip("/")
        reset_url = f"{origin}/reset-password?token={token}"

        logger.info("Password reset issued for user %s", user.id)
        return IssuedReset(email=email, token=token, reset_url=reset_url, expires_at=expires_at)


password_reset_service = PasswordResetService()

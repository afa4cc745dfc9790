"""
ProjectHub Backend: Password Reset Model
========================================

One row per issued reset token. Tokens are single-use and expire after
`settings.password_reset_ttl_seconds`; issuing a new token for an email
removes the previous ones.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from projecthub.database import Base
from projecthub.models.base import new_id, utcnow


class PasswordReset(Base):
    __tablename__ = "password_resets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<PasswordReset(email='{self.email}', expires_at='{self.expires_at}')>"

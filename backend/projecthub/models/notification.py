"""
ProjectHub Backend: Notification Model
======================================

What:  ORM model for the `notifications` table.
How:   Listed newest first; `id` breaks ties between rows created in the same
       instant and doubles as the pagination cursor.

Query Patterns:
    - Page of a user's notifications:  WHERE user_id = :uid ORDER BY created_at DESC, id DESC
    - Unread badge:                    SELECT count(*) WHERE user_id = :uid AND is_read = false
    Both are served by idx_notifications_user_created.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from projecthub.database import Base
from projecthub.models.base import new_id, utcnow


class Notification(Base):
    """A notice addressed to one user, optionally tied to a project."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Projects live outside this service; kept as a plain reference
    project_id: Mapped[str | None] = mapped_column(String(36), nullable=True, default=None)

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # e.g. TASK_ASSIGNED, REPORT_SUBMITTED, BUDGET_APPROVED
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="GENERAL")

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, user_id={self.user_id}, "
            f"is_read={self.is_read})>"
        )

"""
ProjectHub Backend: User Model
==============================

What:  ORM model for the `users` table.
How:   String UUID primary key generated in Python, so the same model runs on
       PostgreSQL and on the SQLite databases used in tests.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from projecthub.database import Base
from projecthub.models.base import new_id, utcnow


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    PROJECT_MANAGER = "PROJECT_MANAGER"
    TEAM_MEMBER = "TEAM_MEMBER"


class UserStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class User(Base):
    """An account. Role and status are stored as their string values."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Lower-cased before insert; lookups compare lower-cased input
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UserRole.TEAM_MEMBER.value,
    )

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=UserStatus.ACTIVE.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

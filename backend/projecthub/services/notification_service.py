"""
ProjectHub Backend: Notification Service
========================================

What:  Reads and updates a user's notifications.
How:   Listing goes through the generic Repository with the option dicts
       produced by `projecthub.pagination`; results come back already wrapped
       in the `{data, pagination}` envelope. Every operation is timed and
       reported through `log.log_slow_operation`.

Ownership:
    A user only ever sees and modifies notifications addressed to them.
    Marking someone else's notification is an AuthorizationError (403).
"""

import logging
import time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.exceptions import AuthorizationError, NotFoundError, ValidationError
from projecthub.logger import log
from projecthub.models.notification import Notification
from projecthub.pagination import (
    create_cursor_pagination_result,
    create_pagination_result,
    get_cursor_options,
    get_offset_options,
)
from projecthub.schemas.common import CursorPage, Page
from projecthub.schemas.notification import NotificationOut
from projecthub.services.repository import Repository

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", "desc")]


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class NotificationService:
    """Stateless; one shared instance below."""

    def __init__(self) -> None:
        self.repo = Repository(Notification)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        page: int,
        limit: int,
        unread_only: bool = False,
    ) -> Page[NotificationOut]:
        """Offset page of the user's notifications, newest first."""
        started = time.perf_counter()

        where = {"user_id": user_id}
        if unread_only:
            where["is_read"] = False

        rows = await self.repo.find_many(
            db, where=where, order_by=NEWEST_FIRST, **get_offset_options(page, limit)
        )
        total = await self.repo.count(db, where=where)

        log.log_slow_operation("Fetch notifications", _elapsed_ms(started))
        return create_pagination_result(
            [NotificationOut.model_validate(row) for row in rows], total, page, limit
        )

    async def feed_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: Optional[str],
        limit: int,
    ) -> CursorPage[NotificationOut]:
        """Cursor page of the user's notifications, newest first."""
        started = time.perf_counter()

        rows = await self.repo.find_many(
            db,
            where={"user_id": user_id},
            order_by=NEWEST_FIRST,
            **get_cursor_options(cursor, limit),
        )

        log.log_slow_operation("Fetch notification feed", _elapsed_ms(started))
        return create_cursor_pagination_result(
            [NotificationOut.model_validate(row) for row in rows], limit
        )

    async def unread_count(self, db: AsyncSession, user_id: str) -> int:
        return await self.repo.count(db, where={"user_id": user_id, "is_read": False})

    async def mark_read(
        self,
        db: AsyncSession,
        user_id: str,
        notification_id: Optional[str],
    ) -> NotificationOut:
        """
        Mark one notification as read.

        Raises:
            ValidationError:     no id given
            NotFoundError:       no such notification
            AuthorizationError:  the notification belongs to another user
        """
        started = time.perf_counter()

        if not notification_id:
            raise ValidationError("Notification ID is required", field="id")

        notification = await self.repo.get(db, notification_id)
        if notification is None:
            raise NotFoundError.for_resource("Notification", notification_id)
        if notification.user_id != user_id:
            raise AuthorizationError("You can only update your own notifications")

        if not notification.is_read:
            notification.is_read = True
            await db.flush()
            logger.info("Notification %s marked as read", notification_id)

        log.log_slow_operation("Mark notification as read", _elapsed_ms(started))
        return NotificationOut.model_validate(notification)


notification_service = NotificationService()

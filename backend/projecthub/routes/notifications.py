"""
ProjectHub Backend: Notification Routes
=======================================

    GET  /api/notifications               offset page (?page, ?limit, ?unread=true)
    GET  /api/notifications/feed          cursor page (?cursor, ?limit)
    GET  /api/notifications/unread-count  {"count": n}
    POST /api/notifications               {"id": ...} marks one notification read

All endpoints require a session and only touch the caller's notifications.
Query parameters are parsed leniently: malformed paging values fall back to
the defaults instead of failing the request.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.database import get_db_session
from projecthub.error_handler import with_error_handler
from projecthub.pagination import parse_pagination_params
from projecthub.schemas.common import CursorPage, ErrorResponse, Page
from projecthub.schemas.notification import MarkReadRequest, NotificationOut, UnreadCountResponse
from projecthub.security import require_user
from projecthub.services.notification_service import notification_service
from projecthub.validators import read_json_body

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

AUTH_ERRORS = {401: {"model": ErrorResponse, "description": "No valid session"}}


@router.get(
    "",
    response_model=Page[NotificationOut],
    summary="List notifications",
    responses=AUTH_ERRORS,
)
@with_error_handler(operation="List notifications")
async def list_notifications(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Page[NotificationOut]:
    user = await require_user(request)
    params = parse_pagination_params(request.query_params)
    unread_only = request.query_params.get("unread", "").lower() == "true"

    return await notification_service.list_for_user(
        db, user.id, params.page, params.limit, unread_only=unread_only
    )


@router.get(
    "/feed",
    response_model=CursorPage[NotificationOut],
    summary="Notification feed (cursor pagination)",
    responses=AUTH_ERRORS,
)
@with_error_handler(operation="Notification feed")
async def notification_feed(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> CursorPage[NotificationOut]:
    user = await require_user(request)
    params = parse_pagination_params(request.query_params)

    return await notification_service.feed_for_user(db, user.id, params.cursor, params.limit)


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count unread notifications",
    responses=AUTH_ERRORS,
)
@with_error_handler
async def unread_count(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> UnreadCountResponse:
    user = await require_user(request)
    return UnreadCountResponse(count=await notification_service.unread_count(db, user.id))


@router.post(
    "",
    response_model=NotificationOut,
    summary="Mark a notification as read",
    responses={
        **AUTH_ERRORS,
        400: {"model": ErrorResponse, "description": "Missing notification id"},
        403: {"model": ErrorResponse, "description": "Notification belongs to another user"},
        404: {"model": ErrorResponse, "description": "Notification not found"},
    },
)
@with_error_handler(operation="Mark notification as read")
async def mark_notification_read(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> NotificationOut:
    user = await require_user(request)
    body = MarkReadRequest.model_validate(await read_json_body(request))

    return await notification_service.mark_read(db, user.id, body.id)

"""
ProjectHub Backend: Password Reset Route
========================================

    POST /api/forgot-password   {"email": ...}

Rate limited per client IP: 5 attempts per 15 minutes. A successful request
stores a reset token; delivering the link is handled outside this service.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.database import get_db_session
from projecthub.error_handler import with_error_handler
from projecthub.exceptions import ValidationError
from projecthub.middleware.rate_limit import rate_limit
from projecthub.schemas.auth import ForgotPasswordRequest, MessageResponse
from projecthub.schemas.common import ErrorResponse
from projecthub.services.password_reset_service import password_reset_service
from projecthub.validators import read_json_body

router = APIRouter(prefix="/api", tags=["Auth"])

RESET_ATTEMPTS = 5
RESET_WINDOW_MS = 15 * 60 * 1000


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Request a password reset",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed email"},
        404: {"model": ErrorResponse, "description": "No account with this email"},
        429: {"description": "Too many reset attempts from this client"},
    },
)
@rate_limit(
    max_requests=RESET_ATTEMPTS,
    window_ms=RESET_WINDOW_MS,
    message="Too many password reset attempts. Please try again later.",
)
@with_error_handler(operation="Forgot password")
async def forgot_password(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    body = ForgotPasswordRequest.model_validate(await read_json_body(request))
    if not body.email:
        raise ValidationError("Email is required", field="email")

    await password_reset_service.request_reset(
        db, body.email, base_url=str(request.base_url)
    )
    return MessageResponse(message="Password reset email sent successfully")

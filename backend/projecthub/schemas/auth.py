"""Request/response models for the password reset endpoint."""

from typing import Optional

from pydantic import BaseModel, Field


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Account email address")


class MessageResponse(BaseModel):
    message: str

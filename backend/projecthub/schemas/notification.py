"""
ProjectHub Backend: Notification Schemas
========================================

Request and response models for `/api/notifications`. Output field names
are camelCase to match the rest of the API.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from projecthub.schemas.common import CamelModel


class NotificationOut(CamelModel):
    """A notification as returned to its recipient."""

    id: str = Field(description="Notification identifier; also the feed cursor")
    user_id: str
    project_id: Optional[str] = None
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime = Field(description="Creation timestamp (UTC)")

    model_config = {**CamelModel.model_config, "from_attributes": True}


class MarkReadRequest(CamelModel):
    """Body of POST /api/notifications. `id` is checked by the handler."""

    id: Optional[str] = Field(default=None, description="Notification to mark as read")


class UnreadCountResponse(CamelModel):
    count: int = Field(ge=0)

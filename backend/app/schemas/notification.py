"""
Linkhub Backend: Notification Schemas
========================================
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class NotificationResponse(BaseModel):
    id: uuid.UUID
    type: str = Field(description="follow, like, comment or message")
    message: str = Field(description="Rendered text, e.g. 'Ada liked your post'")
    read: bool
    sender: UserSummary
    related_post_id: Optional[uuid.UUID] = None
    related_message_id: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int = Field(description="Number of notifications flipped to read")

"""
Linkhub Backend: Message Schemas
===================================
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class MessageCreate(BaseModel):
    receiver: uuid.UUID = Field(description="Id of the receiving user")
    content: str = Field(description="Message body; must not be blank")


class MessageResponse(BaseModel):
    id: uuid.UUID
    sender: UserSummary
    receiver: UserSummary
    content: str
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}

"""
Linkhub Backend: Post Schemas
================================

What:  Request and response models for posts, likes and comments.

Content validation:
    An empty post or comment is a business-rule violation reported as a 400
    `validation_error` by PostService. A missing field is still a 422 from
    FastAPI's schema validation.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(BaseModel):
    content: str = Field(description="Post body; must not be blank")
    image: str = Field(default="", description="Optional image URL")


class PostUpdate(BaseModel):
    """Blank or omitted fields keep their current value."""
    content: Optional[str] = None
    image: Optional[str] = None


class CommentCreate(BaseModel):
    text: str = Field(description="Comment body; must not be blank")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CommentResponse(BaseModel):
    id: int
    user: UserSummary
    text: str
    created_at: datetime = Field(description="Assigned by the server")

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """
    What:  A post with its author, likes and comments.

    likes holds the ids of users who liked the post, in like order;
    comments are in the order they were added.
    """
    id: uuid.UUID
    author: UserSummary
    content: str
    image: str
    likes: List[uuid.UUID]
    like_count: int
    comments: List[CommentResponse]
    created_at: datetime
    updated_at: datetime


class LikeToggleResponse(BaseModel):
    """
    What:  Result of POST /api/posts/{id}/like.

    liked tells the client which way the toggle went.
    """
    liked: bool = Field(description="True if the caller now likes the post")
    like_count: int
    post: PostResponse

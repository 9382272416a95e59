"""
Linkhub Backend: Notification SQLAlchemy Model
=================================================

What:  Notification records created as a side effect of follow, like,
       comment and message actions.
How:   The rendered text is stored in `message` at creation time, so later
       profile renames do not rewrite history.

Lifecycle:
    1. Created by NotificationService.emit (never for self-targeted actions)
    2. `read` flipped by the recipient (one or all)
    3. Never deleted; a deleted post leaves related_post_id NULL
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User, utcnow


class NotificationType(str, enum.Enum):
    FOLLOW = "follow"
    LIKE = "like"
    COMMENT = "comment"
    MESSAGE = "message"


class Notification(Base):
    """A notification addressed to `recipient_id`, caused by `sender_id`."""

    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # One of NotificationType; stored as plain text
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    message: Mapped[str] = mapped_column(String(500), nullable=False)

    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    related_post_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="SET NULL"),
        nullable=True,
    )
    related_message_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("messages.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    sender: Mapped[User] = relationship(User, foreign_keys=[sender_id], lazy="raise")

    __table_args__ = (
        CheckConstraint(
            "type IN ('follow', 'like', 'comment', 'message')",
            name="ck_notifications_type",
        ),
        CheckConstraint("recipient_id <> sender_id", name="ck_notifications_not_self"),
        Index("idx_notifications_recipient_created", "recipient_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, type='{self.type}', "
            f"recipient={self.recipient_id}, read={self.read})>"
        )

"""
Linkhub Backend: Message SQLAlchemy Model
============================================

What:  Direct messages between two users (the Content Store for messages).
How:   Messages are immutable apart from the `read` flag, which only the
       receiver can set. There is no delete path.

Query Patterns:
    - Inbox:         WHERE sender_id = :me OR receiver_id = :me ORDER BY created_at DESC
    - Conversation:  both directions between two users ORDER BY created_at ASC
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User, utcnow


class Message(Base):
    """A direct message from sender to receiver."""

    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    sender_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    sender: Mapped[User] = relationship(User, foreign_keys=[sender_id], lazy="raise")
    receiver: Mapped[User] = relationship(User, foreign_keys=[receiver_id], lazy="raise")

    __table_args__ = (
        Index("idx_messages_sender_created", "sender_id", "created_at"),
        Index("idx_messages_receiver_created", "receiver_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Message(id={self.id}, sender={self.sender_id}, "
            f"receiver={self.receiver_id}, read={self.read})>"
        )

"""
Linkhub Backend: Connection SQLAlchemy Model
===============================================

What:  One row per directed follow edge: follower → followee.
How:   A user's connection sequence is
           SELECT followee_id FROM connections
           WHERE follower_id = :user ORDER BY id
       The auto-increment `id` records follow order, so ordered previews
       (mutual connections) are deterministic.

Storage-level invariants:
    uq_connections_follower_followee:  a user cannot follow the same target twice
    ck_connections_not_self:           a user never appears in their own connections

Follow and unfollow are a single INSERT or DELETE against this table, so two
concurrent requests from the same actor cannot overwrite each other's change.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.user import utcnow


class Connection(Base):
    """A directed follow relationship, stored on the follower's side."""

    __tablename__ = "connections"

    # Insertion order == follow order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    followee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint(
            "follower_id", "followee_id", name="uq_connections_follower_followee"
        ),
        CheckConstraint("follower_id <> followee_id", name="ck_connections_not_self"),
        Index("idx_connections_follower_order", "follower_id", "id"),
        Index("idx_connections_followee", "followee_id"),
    )

    def __repr__(self) -> str:
        return f"<Connection({self.follower_id} -> {self.followee_id})>"

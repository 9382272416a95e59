"""
Linkhub Backend: Post, PostLike and Comment Models
=====================================================

What:  Posts with their likes and comments (the Content Store for posts).

Table Design:
    posts:       author, content, optional image URL
    post_likes:  one row per (post, user); uq_post_likes_post_user makes a
                 duplicate like impossible, so a like is an INSERT and an
                 unlike is a DELETE
    comments:    append-only; integer id gives comment order

Loading:
    Relationships are never lazy-loaded (async sessions cannot); PostService
    loads author, likes and comments with selectinload.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text as sql_text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User, utcnow


class Post(Base):
    """
    A post in the shared feed.

    Lifecycle:
        1. Created by POST /api/posts
        2. Content/image edited by its author; likes and comments by anyone
        3. Hard-deleted by its author (likes and comments go with it)
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    image: Mapped[str] = mapped_column(
        String(500), nullable=False, default="", server_default=sql_text("''")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    author: Mapped[User] = relationship(User, lazy="raise")

    likes: Mapped[List["PostLike"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PostLike.id",
        lazy="raise",
    )

    comments: Mapped[List["Comment"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Comment.id",
        lazy="raise",
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
        Index("idx_posts_author_id", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, author_id={self.author_id})>"


class PostLike(Base):
    """One user's like of one post."""

    __tablename__ = "post_likes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    post: Mapped[Post] = relationship(back_populates="likes", lazy="raise")

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),
    )


class Comment(Base):
    """A comment on a post; timestamp is assigned by the server."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    text: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    post: Mapped[Post] = relationship(back_populates="comments", lazy="raise")
    user: Mapped[User] = relationship(User, lazy="raise")

    __table_args__ = (
        Index("idx_comments_post_order", "post_id", "id"),
    )

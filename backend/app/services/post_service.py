"""
Linkhub Backend: Post Service
================================

What:  Posts and the interactions on them: create, list, edit, delete,
       like toggle and comments.
Who:   Called by the /api/posts route handlers.

Interaction Flow (like / comment):
    ┌──────────────┐    ┌──────────────────┐    ┌─────────────────────┐    ┌────────┐
    │ Load post    │───▶│ Mutate likes or  │───▶│ Notify author       │───▶│ Reload │
    │ + actor      │    │ comments, COMMIT │    │ (add only, not self)│    │ post   │
    └──────────────┘    └──────────────────┘    └─────────────────────┘    └────────┘

Like Toggle:
    DELETE the (post, user) like row. If nothing was deleted the user had not
    liked the post, so INSERT one. Calling toggle_like twice restores the
    original like set; only the INSERT branch notifies.

Ownership:
    Edit and delete match on (post id, author id). A post owned by someone
    else is reported as not found.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import Select, delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.database import commit_or_raise
from app.exceptions import DatabaseError, NotFoundError, ValidationError
from app.models.notification import NotificationType
from app.models.post import Comment, Post, PostLike
from app.schemas.common import StatusMessage
from app.schemas.post import (
    CommentResponse,
    LikeToggleResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from app.schemas.user import UserSummary
from app.services.notification_service import notification_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


def _post_query() -> Select:
    """SELECT posts with author, likes and comment authors eagerly loaded."""
    return select(Post).options(
        selectinload(Post.author),
        selectinload(Post.likes),
        selectinload(Post.comments).selectinload(Comment.user),
    )


def to_post_response(post: Post) -> PostResponse:
    return PostResponse(
        id=post.id,
        author=UserSummary.model_validate(post.author),
        content=post.content,
        image=post.image,
        likes=[like.user_id for like in post.likes],
        like_count=len(post.likes),
        comments=[CommentResponse.model_validate(comment) for comment in post.comments],
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


class PostService:
    """
    Business logic layer for posts.

    Responsibilities:
        - create_post(), list_posts(), get_post()
        - update_post(), delete_post()      (author only)
        - toggle_like(), add_comment()      (notify the author)
    """

    async def _load_post(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        author_id: Optional[uuid.UUID] = None,
    ) -> Post:
        """
        Load a post with its relationships, refreshing any stale copy held
        by the session.

        Raises:
            NotFoundError: no such post, or not owned by `author_id` (→ 404)
        """
        query = _post_query().where(Post.id == post_id)
        if author_id is not None:
            query = query.where(Post.author_id == author_id)
        result = await db.execute(query.execution_options(populate_existing=True))
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def create_post(
        self, db: AsyncSession, author_id: uuid.UUID, payload: PostCreate
    ) -> PostResponse:
        """
        Raises:
            ValidationError: content is blank (→ 400)
            NotFoundError: author does not exist (→ 404)
        """
        if not payload.content.strip():
            raise ValidationError(message="Content is required", field="content")

        await user_service.require_user(db, author_id)

        post = Post(author_id=author_id, content=payload.content, image=payload.image)
        db.add(post)
        await commit_or_raise(db, "create the post")
        logger.info("Post %s created by %s", post.id, author_id)

        return to_post_response(await self._load_post(db, post.id))

    async def list_posts(
        self, db: AsyncSession, limit: Optional[int] = None
    ) -> List[PostResponse]:
        """All posts, newest first."""
        query = (
            _post_query()
            .order_by(Post.created_at.desc())
            .limit(limit or settings.feed_limit)
        )
        result = await db.execute(query)
        return [to_post_response(post) for post in result.scalars().all()]

    async def get_post(self, db: AsyncSession, post_id: uuid.UUID) -> PostResponse:
        return to_post_response(await self._load_post(db, post_id))

    async def update_post(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        user_id: uuid.UUID,
        payload: PostUpdate,
    ) -> PostResponse:
        """
        Edit the caller's own post. Blank or omitted fields keep their
        current value.

        Raises:
            NotFoundError: no such post owned by the caller (→ 404)
        """
        post = await self._load_post(db, post_id, author_id=user_id)

        if payload.content and payload.content.strip():
            post.content = payload.content
        if payload.image:
            post.image = payload.image

        await commit_or_raise(db, "update the post")
        logger.info("Post %s updated", post_id)
        return to_post_response(await self._load_post(db, post_id))

    async def delete_post(
        self, db: AsyncSession, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> StatusMessage:
        """
        Delete the caller's own post together with its likes and comments.

        Raises:
            NotFoundError: no such post owned by the caller (→ 404)
        """
        post = await self._load_post(db, post_id, author_id=user_id)
        await db.delete(post)
        await commit_or_raise(db, "delete the post")
        logger.info("Post %s deleted by %s", post_id, user_id)
        return StatusMessage(message="Post deleted")

    # ── Interactions ──────────────────────────────────────────────────────

    async def toggle_like(
        self, db: AsyncSession, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> LikeToggleResponse:
        """
        Like the post if the caller has not liked it, otherwise unlike it.

        Notifies the author only when a like is added, and never when the
        author likes their own post.

        Raises:
            NotFoundError: post or caller does not exist (→ 404)
        """
        post = await self._load_post(db, post_id)
        actor = await user_service.require_user(db, user_id)
        author_id = post.author_id

        result = await db.execute(
            delete(PostLike).where(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
            )
        )
        liked = result.rowcount == 0
        added = False
        if liked:
            db.add(PostLike(post_id=post_id, user_id=user_id))
            try:
                await db.commit()
                added = True
            except IntegrityError:
                # A concurrent request from the same user already added it
                await db.rollback()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error("Database error liking post: %s", str(e), exc_info=True)
                raise DatabaseError(
                    message="Could not like the post. Please try again.",
                    context={"error_type": type(e).__name__},
                )
        else:
            await commit_or_raise(db, "unlike the post")
        logger.info("Post %s %s by %s", post_id, "liked" if liked else "unliked", user_id)

        if added and author_id != user_id:
            await notification_service.emit_best_effort(
                db,
                recipient_id=author_id,
                sender=actor,
                notification_type=NotificationType.LIKE,
                related_post_id=post_id,
            )

        post = await self._load_post(db, post_id)
        return LikeToggleResponse(
            liked=liked,
            like_count=len(post.likes),
            post=to_post_response(post),
        )

    async def add_comment(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        user_id: uuid.UUID,
        text: str,
    ) -> PostResponse:
        """
        Append a comment (timestamped by the server) and notify the author
        unless the author is commenting on their own post.

        Raises:
            ValidationError: text is blank (→ 400)
            NotFoundError: post or caller does not exist (→ 404)
        """
        if not text or not text.strip():
            raise ValidationError(message="Comment text is required", field="text")

        post = await self._load_post(db, post_id)
        actor = await user_service.require_user(db, user_id)
        author_id = post.author_id

        db.add(Comment(post_id=post_id, user_id=user_id, text=text))
        await commit_or_raise(db, "add the comment")
        logger.info("Comment added to post %s by %s", post_id, user_id)

        if author_id != user_id:
            await notification_service.emit_best_effort(
                db,
                recipient_id=author_id,
                sender=actor,
                notification_type=NotificationType.COMMENT,
                related_post_id=post_id,
            )

        return to_post_response(await self._load_post(db, post_id))


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()

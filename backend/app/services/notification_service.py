"""
Linkhub Backend: Notification Service (Notification Emitter)
===============================================================

What:  Creates notification records as a side effect of follow, like,
       comment and message actions, and serves the recipient's
       notification list.
Who:   emit_best_effort() is called by ConnectionService, PostService and
       MessageService after their primary change is committed; the list and
       read-flag operations back the /api/notifications routes.

Side-Effect Contract:
    ┌──────────────┐  commit  ┌──────────────────┐  commit  ┌──────────────┐
    │ Primary      │────────▶│ emit_best_effort │────────▶│ notification │
    │ change       │          │ (sender loaded)  │          │ row          │
    └──────────────┘          └──────────────────┘          └──────────────┘
                                       │ failure
                                       ▼
                              rollback + log ERROR, return False

    The primary change is already durable when emission starts, so a failed
    notification can only lose the notification. Callers report the
    outcome instead of failing the request.

Self-Targeting:
    Callers skip emission for self-targeted actions (liking or commenting on
    your own post, messaging yourself). emit() refuses them as well and
    returns None, so no path can notify a user about their own action.
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.database import commit_or_raise
from app.exceptions import NotFoundError
from app.middleware.request_id import request_id_var
from app.models.notification import Notification, NotificationType
from app.models.user import User
from app.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)

# Rendered once at creation time with the sender's display name
MESSAGE_TEMPLATES: Dict[NotificationType, str] = {
    NotificationType.FOLLOW: "{name} started following you",
    NotificationType.LIKE: "{name} liked your post",
    NotificationType.COMMENT: "{name} commented on your post",
    NotificationType.MESSAGE: "{name} sent you a message",
}


def render_message(notification_type: NotificationType, sender_name: str) -> str:
    return MESSAGE_TEMPLATES[notification_type].format(name=sender_name)


class NotificationService:
    """
    Business logic layer for notifications.

    Responsibilities:
        - emit():              persist one notification (raises on failure)
        - emit_best_effort():  emit() for callers whose change is committed
        - list_notifications(), unread_count(), mark_read(), mark_all_read()
    """

    async def emit(
        self,
        db: AsyncSession,
        recipient_id: uuid.UUID,
        sender: User,
        notification_type: NotificationType,
        related_post_id: Optional[uuid.UUID] = None,
        related_message_id: Optional[uuid.UUID] = None,
    ) -> Optional[Notification]:
        """
        Render and persist a notification from `sender` to `recipient_id`.

        The sender entity is passed in already loaded by the caller; its
        name is read directly, with no extra lookup.

        Returns:
            The committed Notification, or None for a self-targeted action.
        """
        if recipient_id == sender.id:
            return None

        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender.id,
            type=notification_type.value,
            message=render_message(notification_type, sender.name),
            related_post_id=related_post_id,
            related_message_id=related_message_id,
        )
        db.add(notification)
        await db.commit()

        logger.info(
            "Notification %s created: %s %s -> %s",
            notification.id,
            notification_type.value,
            sender.id,
            recipient_id,
        )
        return notification

    async def emit_best_effort(
        self,
        db: AsyncSession,
        recipient_id: uuid.UUID,
        sender: User,
        notification_type: NotificationType,
        related_post_id: Optional[uuid.UUID] = None,
        related_message_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """
        emit(), but a failure is rolled back and logged instead of raised.

        Only call this after the primary change has been committed: the
        rollback here discards everything uncommitted in the session.

        Returns:
            True if a notification was stored.
        """
        # A rollback expires every loaded instance, so read ids up front
        sender_id = sender.id
        try:
            notification = await self.emit(
                db,
                recipient_id=recipient_id,
                sender=sender,
                notification_type=notification_type,
                related_post_id=related_post_id,
                related_message_id=related_message_id,
            )
        except Exception:
            await db.rollback()
            logger.error(
                "[%s] Failed to create %s notification %s -> %s",
                request_id_var.get(""),
                notification_type.value,
                sender_id,
                recipient_id,
                exc_info=True,
            )
            return False
        return notification is not None

    async def list_notifications(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        unread_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[NotificationResponse]:
        """Notifications addressed to `user_id`, newest first."""
        query = (
            select(Notification)
            .options(selectinload(Notification.sender))
            .where(Notification.recipient_id == user_id)
        )
        if unread_only:
            query = query.where(Notification.read.is_(False))
        query = query.order_by(Notification.created_at.desc()).limit(
            limit or settings.notifications_limit
        )

        result = await db.execute(query)
        return [
            NotificationResponse.model_validate(notification)
            for notification in result.scalars().all()
        ]

    async def unread_count(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == user_id,
                Notification.read.is_(False),
            )
        )
        return result.scalar() or 0

    async def mark_read(
        self, db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID
    ) -> NotificationResponse:
        """
        Mark one of the caller's notifications as read.

        Raises:
            NotFoundError: No such notification addressed to the caller (→ 404)
        """
        result = await db.execute(
            select(Notification)
            .options(selectinload(Notification.sender))
            .where(
                Notification.id == notification_id,
                Notification.recipient_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise NotFoundError(resource="notification", resource_id=str(notification_id))

        notification.read = True
        await commit_or_raise(db, "mark the notification read")
        return NotificationResponse.model_validate(notification)

    async def mark_all_read(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        """Mark every unread notification of `user_id` read; returns how many."""
        result = await db.execute(
            select(Notification).where(
                Notification.recipient_id == user_id,
                Notification.read.is_(False),
            )
        )
        unread = list(result.scalars().all())
        for notification in unread:
            notification.read = True
        await commit_or_raise(db, "mark notifications read")

        logger.info("Marked %d notifications read for %s", len(unread), user_id)
        return len(unread)


# ── Singleton Instance ────────────────────────────────────────────────────
notification_service = NotificationService()

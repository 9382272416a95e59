"""
Linkhub Backend: Message Service
===================================

What:  Direct messaging: send, inbox, conversation, read receipts.
Who:   Called by the /api/messages route handlers.

Authorization:
    A user may message someone they follow, or themselves. Anything else is
    ForbiddenError, raised before anything is written, so a rejected send
    leaves no message and no notification behind.

Send Order:
    validate content → receiver exists → sender exists → in network?
    → INSERT message + COMMIT → notify receiver (best effort, not self)
"""

import logging
import uuid
from typing import List

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import commit_or_raise
from app.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.models.message import Message
from app.models.notification import NotificationType
from app.schemas.common import StatusMessage
from app.schemas.message import MessageResponse
from app.services.notification_service import notification_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


def _message_query():
    return select(Message).options(
        selectinload(Message.sender),
        selectinload(Message.receiver),
    )


class MessageService:
    """
    Business logic layer for direct messages.

    Responsibilities:
        - send_message():   network-checked send with notification
        - list_messages():  everything the user sent or received, newest first
        - conversation():   both directions with one other user, oldest first
        - mark_read():      receiver-only read flag
    """

    async def send_message(
        self,
        db: AsyncSession,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        content: str,
    ) -> MessageResponse:
        """
        Send `content` from `sender_id` to `receiver_id`.

        Raises:
            ValidationError: content is blank (→ 400)
            NotFoundError: receiver (or sender) does not exist (→ 404)
            ForbiddenError: receiver not in sender's connections and not the
                            sender themselves (→ 403)
        """
        if not content or not content.strip():
            raise ValidationError(message="Message content is required", field="content")

        await user_service.require_user(db, receiver_id, resource="receiver")
        sender = await user_service.require_user(db, sender_id)

        if sender_id != receiver_id and not await user_service.is_following(
            db, sender_id, receiver_id
        ):
            raise ForbiddenError(
                message="You can only message people in your network",
                context={"receiver_id": str(receiver_id)},
            )

        message = Message(sender_id=sender_id, receiver_id=receiver_id, content=content)
        db.add(message)
        await commit_or_raise(db, "send the message")
        message_id = message.id
        logger.info("Message %s sent %s -> %s", message_id, sender_id, receiver_id)

        if sender_id != receiver_id:
            await notification_service.emit_best_effort(
                db,
                recipient_id=receiver_id,
                sender=sender,
                notification_type=NotificationType.MESSAGE,
                related_message_id=message_id,
            )

        result = await db.execute(
            _message_query()
            .where(Message.id == message_id)
            .execution_options(populate_existing=True)
        )
        return MessageResponse.model_validate(result.scalar_one())

    async def list_messages(
        self, db: AsyncSession, user_id: uuid.UUID
    ) -> List[MessageResponse]:
        result = await db.execute(
            _message_query()
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.created_at.desc())
        )
        return [MessageResponse.model_validate(m) for m in result.scalars().all()]

    async def conversation(
        self, db: AsyncSession, user_id: uuid.UUID, other_id: uuid.UUID
    ) -> List[MessageResponse]:
        """Messages exchanged between the two users, oldest first."""
        result = await db.execute(
            _message_query()
            .where(
                or_(
                    and_(Message.sender_id == user_id, Message.receiver_id == other_id),
                    and_(Message.sender_id == other_id, Message.receiver_id == user_id),
                )
            )
            .order_by(Message.created_at.asc())
        )
        return [MessageResponse.model_validate(m) for m in result.scalars().all()]

    async def mark_read(
        self, db: AsyncSession, message_id: uuid.UUID, user_id: uuid.UUID
    ) -> StatusMessage:
        """
        Raises:
            NotFoundError: no such message received by the caller (→ 404)
        """
        result = await db.execute(
            select(Message).where(
                Message.id == message_id,
                Message.receiver_id == user_id,
            )
        )
        message = result.scalar_one_or_none()
        if message is None:
            raise NotFoundError(resource="message", resource_id=str(message_id))

        message.read = True
        await commit_or_raise(db, "mark the message read")
        return StatusMessage(message="Message marked as read")


# ── Singleton Instance ────────────────────────────────────────────────────
message_service = MessageService()

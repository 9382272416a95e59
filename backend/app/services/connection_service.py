"""
Linkhub Backend: Connection Service (Connection Mutation)
============================================================

What:  Follow, unfollow, and list a user's connections.
Who:   Called by the /api/connections route handlers.

Follow Flow:
    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐
    │ Reject self  │───▶│ Load actor & │───▶│ INSERT edge  │───▶│ Notify       │
    │ follow       │    │ target       │    │ + COMMIT     │    │ (best effort)│
    └──────────────┘    └──────────────┘    └──────────────┘    └──────────────┘

    The edge is committed before the notification is written. A failed
    notification is logged and reported as notification_sent=False; the
    follow stands.

Concurrency:
    Follow is an INSERT guarded by uq_connections_follower_followee and
    unfollow is a single DELETE, so concurrent requests from one actor never
    overwrite each other. Two racing follows of the same target: one wins,
    the other gets AlreadyExistsError.
"""

import logging
import uuid
from typing import List

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import commit_or_raise
from app.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    InvalidOperationError,
    NotFollowingError,
    NotFoundError,
)
from app.models.connection import Connection
from app.models.notification import NotificationType
from app.schemas.connection import FollowResponse
from app.schemas.common import StatusMessage
from app.schemas.user import ConnectionItem
from app.services.notification_service import notification_service
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class ConnectionService:
    """
    Business logic layer for connection mutations.

    Responsibilities:
        - follow():            add a directed edge and notify the target
        - unfollow():          remove a directed edge (no notification)
        - list_connections():  the user's connections in follow order
    """

    async def follow(
        self, db: AsyncSession, actor_id: uuid.UUID, target_id: uuid.UUID
    ) -> FollowResponse:
        """
        Make `actor_id` follow `target_id`.

        Raises:
            InvalidOperationError: actor == target; nothing is read or written (→ 400)
            NotFoundError: actor or target does not exist (→ 404)
            AlreadyExistsError: target already in actor's connections (→ 400)
            DatabaseError: the edge could not be committed (→ 500)
        """
        if actor_id == target_id:
            raise InvalidOperationError(
                message="Cannot follow yourself",
                context={"user_id": str(actor_id)},
            )

        target = await user_service.get_user(db, target_id)
        actor = await user_service.get_user(db, actor_id)
        if target is None or actor is None:
            missing = target_id if target is None else actor_id
            raise NotFoundError(resource="user", resource_id=str(missing))

        if await user_service.is_following(db, actor_id, target_id):
            raise AlreadyExistsError(
                message="Already following this user",
                context={"target_id": str(target_id)},
            )

        db.add(Connection(follower_id=actor_id, followee_id=target_id))
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race against an identical follow
            await db.rollback()
            raise AlreadyExistsError(
                message="Already following this user",
                context={"target_id": str(target_id)},
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error following user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not follow the user. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("User %s followed %s", actor_id, target_id)

        sent = await notification_service.emit_best_effort(
            db,
            recipient_id=target_id,
            sender=actor,
            notification_type=NotificationType.FOLLOW,
        )
        return FollowResponse(notification_sent=sent)

    async def unfollow(
        self, db: AsyncSession, actor_id: uuid.UUID, target_id: uuid.UUID
    ) -> StatusMessage:
        """
        Remove `target_id` from `actor_id`'s connections.

        Raises:
            NotFoundError: actor does not exist (→ 404)
            NotFollowingError: target not in actor's connections (→ 400)
        """
        await user_service.require_user(db, actor_id)

        result = await db.execute(
            delete(Connection).where(
                Connection.follower_id == actor_id,
                Connection.followee_id == target_id,
            )
        )
        if result.rowcount == 0:
            raise NotFollowingError(context={"target_id": str(target_id)})

        await commit_or_raise(db, "unfollow the user")
        logger.info("User %s unfollowed %s", actor_id, target_id)
        return StatusMessage(message="User unfollowed successfully")

    async def list_connections(
        self, db: AsyncSession, user_id: uuid.UUID
    ) -> List[ConnectionItem]:
        """
        The users `user_id` follows, in follow order.

        Raises:
            NotFoundError: user does not exist (→ 404)
        """
        await user_service.require_user(db, user_id)
        connections = await user_service.connection_set(db, user_id)
        users = await user_service.get_users_by_ids(db, connections)
        return [
            ConnectionItem.model_validate(users[uid])
            for uid in connections
            if uid in users
        ]


# ── Singleton Instance ────────────────────────────────────────────────────
connection_service = ConnectionService()

"""
Linkhub Backend: User Service (User Directory)
=================================================

What:  Reads and writes user profiles and exposes each user's ordered
       connection set.
Who:   Called by the users routes directly, and by every other service that
       needs to resolve a user id.

Directory Operations:
    get_user / require_user:  get-by-id (None vs NotFoundError)
    get_users_by_ids:         batch get-by-id for projections
    find_users:               find-matching(criteria, limit), natural order
    connection_set:           a user's connections as a ConnectionSet
    is_following:             single-edge membership check
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.database import commit_or_raise
from app.models.connection import Connection
from app.models.user import User
from app.schemas.user import UserCreate, UserProfile, UserUpdate
from app.services.connection_set import ConnectionSet

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic layer for the User Directory.

    Stateless: every method receives the request's AsyncSession.
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        return await db.get(User, user_id)

    async def require_user(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        resource: str = "user",
    ) -> User:
        """
        Get a user or fail.

        Raises:
            NotFoundError: No user with this id (→ 404)
        """
        user = await self.get_user(db, user_id)
        if user is None:
            raise NotFoundError(resource=resource, resource_id=str(user_id))
        return user

    async def get_users_by_ids(
        self, db: AsyncSession, user_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, User]:
        """Batch lookup; ids with no user are simply absent from the result."""
        ids = list(user_ids)
        if not ids:
            return {}
        result = await db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}

    async def find_users(self, db: AsyncSession, *criteria, limit: int) -> List[User]:
        """
        Users matching every criterion, in the directory's natural order
        (creation time, then id), at most `limit` of them.
        """
        query = (
            select(User)
            .where(*criteria)
            .order_by(User.created_at, User.id)
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    # ── Connections ───────────────────────────────────────────────────────

    async def connection_set(self, db: AsyncSession, user_id: uuid.UUID) -> ConnectionSet:
        """
        The ids `user_id` follows, in follow order.

        Query plan:
            SELECT followee_id FROM connections
            WHERE follower_id = :user ORDER BY id
            → idx_connections_follower_order
        """
        result = await db.execute(
            select(Connection.followee_id)
            .where(Connection.follower_id == user_id)
            .order_by(Connection.id)
        )
        return ConnectionSet(result.scalars().all())

    async def count_connections(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count(Connection.id)).where(Connection.follower_id == user_id)
        )
        return result.scalar() or 0

    async def is_following(
        self, db: AsyncSession, follower_id: uuid.UUID, followee_id: uuid.UUID
    ) -> bool:
        result = await db.execute(
            select(Connection.id)
            .where(
                Connection.follower_id == follower_id,
                Connection.followee_id == followee_id,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    # ── Profiles ──────────────────────────────────────────────────────────

    async def create_user(self, db: AsyncSession, payload: UserCreate) -> UserProfile:
        """
        Register a profile.

        Raises:
            ValidationError: Blank name or email (→ 400)
            AlreadyExistsError: Email already registered (→ 400)
            DatabaseError: Insert failed (→ 500)
        """
        name = payload.name.strip()
        email = payload.email.strip().lower()
        if not name:
            raise ValidationError(message="Name is required", field="name")
        if not email:
            raise ValidationError(message="Email is required", field="email")

        existing = await db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise AlreadyExistsError(message="A user with this email already exists")

        user = User(
            name=name,
            email=email,
            profile_picture=payload.profile_picture,
            headline=payload.headline,
            location=payload.location,
            about=payload.about,
            skills=list(payload.skills),
            experience=[entry.model_dump(mode="json") for entry in payload.experience],
            education=[entry.model_dump(mode="json") for entry in payload.education],
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise AlreadyExistsError(message="A user with this email already exists")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User created: %s", user.id)
        return self._to_profile(user, connections_count=0)

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> UserProfile:
        user = await self.require_user(db, user_id)
        count = await self.count_connections(db, user_id)
        return self._to_profile(user, connections_count=count)

    async def update_profile(
        self, db: AsyncSession, user_id: uuid.UUID, payload: UserUpdate
    ) -> UserProfile:
        """
        Apply the fields present in `payload`; absent fields are untouched.

        Raises:
            NotFoundError: User does not exist (→ 404)
            ValidationError: Name sent but blank (→ 400)
        """
        user = await self.require_user(db, user_id)
        changes = payload.model_dump(exclude_unset=True, mode="json")

        if "name" in changes:
            if changes["name"] is None or not changes["name"].strip():
                raise ValidationError(message="Name cannot be empty", field="name")
            changes["name"] = changes["name"].strip()

        for field, value in changes.items():
            if value is None:
                continue
            setattr(user, field, value)

        await commit_or_raise(db, "update the profile")
        logger.info("Profile updated for %s: %s", user_id, sorted(changes))

        count = await self.count_connections(db, user_id)
        return self._to_profile(user, connections_count=count)

    @staticmethod
    def _to_profile(user: User, connections_count: int) -> UserProfile:
        return UserProfile(
            id=user.id,
            name=user.name,
            email=user.email,
            profile_picture=user.profile_picture,
            headline=user.headline,
            location=user.location,
            about=user.about,
            skills=user.skills or [],
            experience=user.experience or [],
            education=user.education or [],
            connections_count=connections_count,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()

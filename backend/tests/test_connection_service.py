"""
Linkhub Backend: Connection Service Tests
============================================

What:  Follow / unfollow / list against a real (in-memory) database.

What we test:
    ✅ Follow appends to the actor's connections and notifies the target
    ✅ Self-follow, duplicate follow and unknown users are rejected without mutation
    ✅ Unfollow removes only the one edge and never notifies
    ✅ A failing notification does not undo the follow
    ✅ A failing commit surfaces as DatabaseError and leaves the edges as they were
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    InvalidOperationError,
    NotFollowingError,
    NotFoundError,
)
from app.models.notification import Notification
from app.services.connection_service import ConnectionService
from app.services.notification_service import notification_service
from app.services.user_service import user_service


async def _notification_count(db) -> int:
    result = await db.execute(select(func.count(Notification.id)))
    return result.scalar()


class TestFollow:

    def setup_method(self):
        self.service = ConnectionService()

    @pytest.mark.asyncio
    async def test_follow_adds_connection_and_notifies(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        result = await self.service.follow(db_session, alice.id, bob.id)

        assert result.notification_sent is True
        connections = await user_service.connection_set(db_session, alice.id)
        assert list(connections) == [bob.id]

        notes = (await db_session.execute(select(Notification))).scalars().all()
        assert len(notes) == 1
        assert notes[0].recipient_id == bob.id
        assert notes[0].sender_id == alice.id
        assert notes[0].type == "follow"
        assert notes[0].message == "Alice started following you"

    @pytest.mark.asyncio
    async def test_follow_is_one_directional(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        await self.service.follow(db_session, alice.id, bob.id)

        assert len(await user_service.connection_set(db_session, bob.id)) == 0

    @pytest.mark.asyncio
    async def test_follow_order_is_preserved(self, db_session, make_user):
        alice = await make_user("Alice")
        others = [await make_user(f"U{i}") for i in range(4)]

        for user in reversed(others):
            await self.service.follow(db_session, alice.id, user.id)

        connections = await user_service.connection_set(db_session, alice.id)
        assert list(connections) == [u.id for u in reversed(others)]

    @pytest.mark.asyncio
    async def test_self_follow_rejected_without_mutation(self, db_session, make_user):
        alice = await make_user("Alice")

        with pytest.raises(InvalidOperationError):
            await self.service.follow(db_session, alice.id, alice.id)

        assert len(await user_service.connection_set(db_session, alice.id)) == 0
        assert await _notification_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_duplicate_follow_rejected(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        await self.service.follow(db_session, alice.id, bob.id)

        with pytest.raises(AlreadyExistsError):
            await self.service.follow(db_session, alice.id, bob.id)

        assert len(await user_service.connection_set(db_session, alice.id)) == 1
        assert await _notification_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_follow_unknown_target(self, db_session, make_user):
        alice = await make_user("Alice")

        with pytest.raises(NotFoundError):
            await self.service.follow(db_session, alice.id, uuid4())

    @pytest.mark.asyncio
    async def test_follow_unknown_actor(self, db_session, make_user):
        bob = await make_user("Bob")

        with pytest.raises(NotFoundError):
            await self.service.follow(db_session, uuid4(), bob.id)

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_follow(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        # The failed emit rolls the session back, expiring loaded instances
        alice_id, bob_id = alice.id, bob.id

        with patch.object(
            notification_service,
            "emit",
            AsyncMock(side_effect=SQLAlchemyError("notifications table locked")),
        ):
            result = await self.service.follow(db_session, alice_id, bob_id)

        assert result.notification_sent is False
        assert bob_id in await user_service.connection_set(db_session, alice_id)
        assert await _notification_count(db_session) == 0


class TestUnfollow:

    def setup_method(self):
        self.service = ConnectionService()

    @pytest.mark.asyncio
    async def test_unfollow_removes_only_that_edge(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        await self.service.follow(db_session, alice.id, bob.id)
        await self.service.follow(db_session, alice.id, carol.id)
        await self.service.follow(db_session, bob.id, carol.id)

        result = await self.service.unfollow(db_session, alice.id, bob.id)

        assert result.message == "User unfollowed successfully"
        assert list(await user_service.connection_set(db_session, alice.id)) == [carol.id]
        assert list(await user_service.connection_set(db_session, bob.id)) == [carol.id]

    @pytest.mark.asyncio
    async def test_unfollow_does_not_notify(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        await self.service.follow(db_session, alice.id, bob.id)

        await self.service.unfollow(db_session, alice.id, bob.id)

        assert await _notification_count(db_session) == 1

    @pytest.mark.asyncio
    async def test_unfollow_non_connection(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        with pytest.raises(NotFollowingError):
            await self.service.unfollow(db_session, alice.id, bob.id)

    @pytest.mark.asyncio
    async def test_unfollow_unknown_actor(self, db_session, make_user):
        bob = await make_user("Bob")

        with pytest.raises(NotFoundError):
            await self.service.unfollow(db_session, uuid4(), bob.id)


class TestListConnections:

    @pytest.mark.asyncio
    async def test_lists_profiles_in_follow_order(self, db_session, make_user):
        service = ConnectionService()
        alice = await make_user("Alice")
        bob = await make_user("Bob", headline="Engineer")
        carol = await make_user("Carol")
        await service.follow(db_session, alice.id, carol.id)
        await service.follow(db_session, alice.id, bob.id)

        items = await service.list_connections(db_session, alice.id)

        assert [item.name for item in items] == ["Carol", "Bob"]
        assert items[1].headline == "Engineer"


class TestCommitFailures:

    def setup_method(self):
        self.service = ConnectionService()

    @pytest.mark.asyncio
    async def test_follow_commit_failure(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        alice_id, bob_id = alice.id, bob.id

        failing = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("disk full")))
        with patch.object(db_session, "commit", failing):
            with pytest.raises(DatabaseError):
                await self.service.follow(db_session, alice_id, bob_id)

        assert len(await user_service.connection_set(db_session, alice_id)) == 0
        assert await _notification_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_unfollow_commit_failure(self, db_session, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        alice_id, bob_id = alice.id, bob.id
        await self.service.follow(db_session, alice_id, bob_id)

        failing = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("disk full")))
        with patch.object(db_session, "commit", failing):
            with pytest.raises(DatabaseError):
                await self.service.unfollow(db_session, alice_id, bob_id)

        assert bob_id in await user_service.connection_set(db_session, alice_id)

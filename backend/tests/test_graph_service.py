"""
Linkhub Backend: Graph Query Tests
=====================================

What:  Mutual connections, network statistics and suggestions.
How:   Builds small follow graphs through ConnectionService, then queries.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app.config import settings
from app.exceptions import DatabaseError, NotFoundError
from app.services.connection_service import connection_service
from app.services.graph_service import GraphService
from app.services.user_service import user_service


async def _follow(db, follower, *followees):
    for followee in followees:
        await connection_service.follow(db, follower.id, followee.id)


class TestMutualConnections:

    def setup_method(self):
        self.service = GraphService()

    @pytest.mark.asyncio
    async def test_single_mutual(self, db_session, make_user):
        a, b, c, d = [await make_user(n) for n in "ABCD"]
        await _follow(db_session, a, b, c)
        await _follow(db_session, b, c, d)

        result = await self.service.mutual_connections(db_session, a.id, b.id)

        assert result.count == 1
        assert [u.id for u in result.connections] == [c.id]
        assert result.connections[0].name == "C"

    @pytest.mark.asyncio
    async def test_preview_capped_in_first_users_order(self, db_session, make_user):
        a = await make_user("A")
        b = await make_user("B")
        shared = [await make_user(f"S{i}") for i in range(7)]
        await _follow(db_session, a, *shared)
        await _follow(db_session, b, *reversed(shared))

        result = await self.service.mutual_connections(db_session, a.id, b.id)

        assert result.count == 7
        assert len(result.connections) == settings.mutual_preview_limit
        assert [u.id for u in result.connections] == [
            u.id for u in shared[: settings.mutual_preview_limit]
        ]

    @pytest.mark.asyncio
    async def test_follow_only_changes_the_actors_side(self, db_session, make_user):
        a, b, c = [await make_user(n) for n in "ABC"]
        await _follow(db_session, a, c)

        before = await self.service.mutual_connections(db_session, a.id, b.id)
        await _follow(db_session, a, b)
        after = await self.service.mutual_connections(db_session, a.id, b.id)

        # B's connections did not change, so neither did the mutual count
        assert before.count == after.count == 0

    @pytest.mark.asyncio
    async def test_follow_changes_mutual_when_target_is_shared(self, db_session, make_user):
        a, b, x = [await make_user(n) for n in "ABX"]
        await _follow(db_session, x, b)

        before = await self.service.mutual_connections(db_session, a.id, x.id)
        await _follow(db_session, a, b)
        after = await self.service.mutual_connections(db_session, a.id, x.id)

        assert before.count == 0
        assert after.count == 1
        assert [u.id for u in after.connections] == [b.id]

    @pytest.mark.asyncio
    async def test_no_mutuals(self, db_session, make_user):
        a, b = await make_user("A"), await make_user("B")

        result = await self.service.mutual_connections(db_session, a.id, b.id)

        assert result.count == 0
        assert result.connections == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session, make_user):
        a = await make_user("A")

        with pytest.raises(NotFoundError):
            await self.service.mutual_connections(db_session, a.id, uuid4())


class TestNetworkStats:

    def setup_method(self):
        self.service = GraphService()

    @pytest.mark.asyncio
    async def test_counts_distinct_second_degree(self, db_session, make_user):
        u, b, c, x, y = [await make_user(n) for n in ["U", "B", "C", "X", "Y"]]
        await _follow(db_session, u, b, c)
        await _follow(db_session, b, x, y)
        await _follow(db_session, c, x)

        stats = await self.service.network_stats(db_session, u.id)

        assert stats.connections == 2
        assert stats.network_size == 2

    @pytest.mark.asyncio
    async def test_excludes_self_and_direct_connections(self, db_session, make_user):
        u, b, c, x = [await make_user(n) for n in ["U", "B", "C", "X"]]
        await _follow(db_session, u, b, c)
        await _follow(db_session, b, u, c, x)
        await _follow(db_session, c, b)

        stats = await self.service.network_stats(db_session, u.id)

        assert stats.connections == 2
        assert stats.network_size == 1

    @pytest.mark.asyncio
    async def test_isolated_user(self, db_session, make_user):
        u = await make_user("U")

        stats = await self.service.network_stats(db_session, u.id)

        assert stats.connections == 0
        assert stats.network_size == 0

    @pytest.mark.asyncio
    async def test_lookup_failure_aborts(self, db_session, make_user):
        u, b = await make_user("U"), await make_user("B")
        await _follow(db_session, u, b)
        direct = await user_service.connection_set(db_session, u.id)

        failing = AsyncMock(
            side_effect=[direct, OperationalError("SELECT", {}, Exception("gone"))]
        )
        with patch.object(user_service, "connection_set", failing):
            with pytest.raises(DatabaseError):
                await self.service.network_stats(db_session, u.id)


class TestSuggestions:

    def setup_method(self):
        self.service = GraphService()

    @pytest.mark.asyncio
    async def test_excludes_self_and_followed(self, db_session, make_user):
        me = await make_user("Me")
        followed = await make_user("Followed")
        stranger = await make_user("Stranger", location="Berlin", skills=["python"])
        await _follow(db_session, me, followed)

        items = await self.service.suggestions(db_session, me.id)

        assert [item.id for item in items] == [stranger.id]
        assert items[0].location == "Berlin"
        assert items[0].skills == ["python"]

    @pytest.mark.asyncio
    async def test_capped(self, db_session, make_user):
        me = await make_user("Me")
        for i in range(settings.suggestions_limit + 3):
            await make_user(f"U{i}")

        items = await self.service.suggestions(db_session, me.id)

        assert len(items) == settings.suggestions_limit
        assert me.id not in {item.id for item in items}

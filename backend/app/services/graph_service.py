"""
Linkhub Backend: Graph Query Service
=======================================

What:  Read-only queries over the connection graph: mutual connections,
       network statistics and connection suggestions.
Who:   Called by the /api/connections route handlers.
How:   Every query reads the User Directory through UserService; nothing is
       cached, each call recomputes from the current connection rows.

Definitions (A → B means "A follows B"):
    connections(U)     = { V : U → V }, in follow order
    mutual(A, B)       = connections(A) ∩ connections(B), in A's order
    network(U)         = ⋃ connections(V) for V in connections(U)
                         minus {U} minus connections(U)

Cost:
    mutual_connections:  2 connection queries + 1 batch user query
    network_stats:       1 + d connection queries (d = direct connections)
    suggestions:         1 query with a NOT IN subquery
"""

import logging
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import DatabaseError
from app.models.connection import Connection
from app.models.user import User
from app.schemas.connection import MutualConnectionsResponse, NetworkStatsResponse
from app.schemas.user import SuggestionItem, UserSummary
from app.services.connection_set import ConnectionSet
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class GraphService:
    """Graph queries over the User Directory."""

    async def mutual_connections(
        self,
        db: AsyncSession,
        user_a: uuid.UUID,
        user_b: uuid.UUID,
    ) -> MutualConnectionsResponse:
        """
        Users present in both `user_a`'s and `user_b`'s connections.

        The preview follows `user_a`'s follow order, so the same graph always
        yields the same preview.

        Example:
            A follows [B, C]; B follows [C, D]
            → mutual_connections(A, B) == {count: 1, connections: [C]}

        Raises:
            NotFoundError: either user does not exist (→ 404)
        """
        await user_service.require_user(db, user_a)
        await user_service.require_user(db, user_b)

        a_connections = await user_service.connection_set(db, user_a)
        b_connections = await user_service.connection_set(db, user_b)
        mutual = a_connections.intersection(b_connections)

        preview_ids = mutual.first(settings.mutual_preview_limit)
        users = await user_service.get_users_by_ids(db, preview_ids)

        return MutualConnectionsResponse(
            count=len(mutual),
            connections=[
                UserSummary.model_validate(users[uid])
                for uid in preview_ids
                if uid in users
            ],
        )

    async def network_stats(
        self, db: AsyncSession, user_id: uuid.UUID
    ) -> NetworkStatsResponse:
        """
        Direct connection count and number of distinct friends-of-friends.

        Fail-fast: if any direct connection's list cannot be loaded, the whole
        computation aborts with DatabaseError; no partial size is returned.

        Raises:
            NotFoundError: user does not exist (→ 404)
            DatabaseError: a connection list lookup failed (→ 500)
        """
        await user_service.require_user(db, user_id)
        direct = await user_service.connection_set(db, user_id)

        reachable = ConnectionSet()
        for connection_id in direct:
            try:
                reachable.update(await user_service.connection_set(db, connection_id))
            except SQLAlchemyError as e:
                logger.error(
                    "Network stats for %s aborted: connections of %s failed to load: %s",
                    user_id,
                    connection_id,
                    str(e),
                )
                raise DatabaseError(
                    message="Could not compute network statistics. Please try again.",
                    context={"connection_id": str(connection_id)},
                )

        network = reachable.difference([user_id], direct)
        return NetworkStatsResponse(connections=len(direct), network_size=len(network))

    async def suggestions(
        self, db: AsyncSession, user_id: uuid.UUID
    ) -> List[SuggestionItem]:
        """
        Users `user_id` does not follow yet (never `user_id` itself).

        No ranking: results come in the directory's natural order, capped at
        `settings.suggestions_limit`.

        Raises:
            NotFoundError: user does not exist (→ 404)
        """
        await user_service.require_user(db, user_id)

        followed = select(Connection.followee_id).where(Connection.follower_id == user_id)
        users = await user_service.find_users(
            db,
            User.id != user_id,
            User.id.not_in(followed),
            limit=settings.suggestions_limit,
        )
        return [SuggestionItem.model_validate(user) for user in users]


# ── Singleton Instance ────────────────────────────────────────────────────
graph_service = GraphService()

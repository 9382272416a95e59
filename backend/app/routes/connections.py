"""
Linkhub Backend: Connection Route Handlers
=============================================

What:  Follow/unfollow plus the graph queries (mutual, stats, suggestions).
How:   Mutations go to ConnectionService, read-only graph queries to
       GraphService. Every route acts on behalf of the identity header user.
Who:   Called by the frontend Network page and profile sidebar.

Routes:
    GET  /api/connections                 caller's connections, follow order
    GET  /api/connections/stats           {connections, network_size}
    GET  /api/connections/suggestions     users the caller does not follow
    POST /api/connections/{id}/follow
    POST /api/connections/{id}/unfollow
    GET  /api/connections/{id}/mutual     {count, connections (first 5)}
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.identity import get_current_user_id
from app.schemas.common import ErrorResponse, StatusMessage
from app.schemas.connection import (
    FollowResponse,
    MutualConnectionsResponse,
    NetworkStatsResponse,
)
from app.schemas.user import ConnectionItem, SuggestionItem
from app.services.connection_service import connection_service
from app.services.graph_service import graph_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/connections", tags=["Connections"])


@router.get(
    "",
    response_model=List[ConnectionItem],
    summary="List the caller's connections",
)
async def list_connections(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[ConnectionItem]:
    return await connection_service.list_connections(db=db, user_id=user_id)


@router.get(
    "/stats",
    response_model=NetworkStatsResponse,
    responses={
        404: {"description": "User not found", "model": ErrorResponse},
        500: {"description": "A connection list could not be loaded", "model": ErrorResponse},
    },
    summary="Network statistics",
    description=(
        "Number of direct connections and number of distinct second-degree "
        "connections (excluding the caller and their direct connections)."
    ),
)
async def network_stats(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NetworkStatsResponse:
    return await graph_service.network_stats(db=db, user_id=user_id)


@router.get(
    "/suggestions",
    response_model=List[SuggestionItem],
    summary="Connection suggestions",
)
async def suggestions(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[SuggestionItem]:
    return await graph_service.suggestions(db=db, user_id=user_id)


@router.post(
    "/{target_id}/follow",
    response_model=FollowResponse,
    responses={
        400: {"description": "Self-follow or already following", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Follow a user",
)
async def follow(
    target_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> FollowResponse:
    """
    Follow `target_id`.

    `notification_sent` is false when the follow succeeded but the target's
    notification could not be written.
    """
    return await connection_service.follow(db=db, actor_id=user_id, target_id=target_id)


@router.post(
    "/{target_id}/unfollow",
    response_model=StatusMessage,
    responses={
        400: {"description": "Not following this user", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Unfollow a user",
)
async def unfollow(
    target_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> StatusMessage:
    return await connection_service.unfollow(db=db, actor_id=user_id, target_id=target_id)


@router.get(
    "/{target_id}/mutual",
    response_model=MutualConnectionsResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Mutual connections with a user",
)
async def mutual_connections(
    target_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MutualConnectionsResponse:
    return await graph_service.mutual_connections(db=db, user_a=user_id, user_b=target_id)

"""
Linkhub Backend: Notification Route Handlers
===============================================

What:  The caller's notification feed and read state.
Who:   Called by the frontend notification bell (polls unread-count).
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.identity import get_current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from app.services.notification_service import notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get(
    "",
    response_model=List[NotificationResponse],
    summary="List the caller's notifications, newest first",
)
async def list_notifications(
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    limit: Optional[int] = Query(
        default=None, ge=1, le=200, description="Maximum items returned (defaults to NOTIFICATIONS_LIMIT)"
    ),
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[NotificationResponse]:
    return await notification_service.list_notifications(
        db=db, user_id=user_id, unread_only=unread_only, limit=limit
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Number of unread notifications",
)
async def unread_count(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UnreadCountResponse:
    count = await notification_service.unread_count(db=db, user_id=user_id)
    return UnreadCountResponse(count=count)


@router.put(
    "/read-all",
    response_model=MarkAllReadResponse,
    summary="Mark every notification read",
)
async def mark_all_read(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MarkAllReadResponse:
    updated = await notification_service.mark_all_read(db=db, user_id=user_id)
    return MarkAllReadResponse(updated=updated)


@router.put(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    responses={404: {"description": "No such notification for the caller", "model": ErrorResponse}},
    summary="Mark one notification read",
)
async def mark_read(
    notification_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> NotificationResponse:
    return await notification_service.mark_read(
        db=db, notification_id=notification_id, user_id=user_id
    )

"""
Linkhub Backend: Message Route Handlers
==========================================

What:  Direct messages between connected users.
Who:   Called by the frontend Messaging page.

Routes:
    GET  /api/messages                          inbox + outbox, newest first
    POST /api/messages                          send (403 outside network)
    GET  /api/messages/conversation/{user_id}   thread, oldest first
    PUT  /api/messages/{id}/read                receiver only
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.identity import get_current_user_id
from app.schemas.common import ErrorResponse, StatusMessage
from app.schemas.message import MessageCreate, MessageResponse
from app.services.message_service import message_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["Messages"])


@router.get("", response_model=List[MessageResponse], summary="List the caller's messages")
async def list_messages(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[MessageResponse]:
    return await message_service.list_messages(db=db, user_id=user_id)


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Blank content", "model": ErrorResponse},
        403: {"description": "Receiver is not in the caller's network", "model": ErrorResponse},
        404: {"description": "Receiver not found", "model": ErrorResponse},
    },
    summary="Send a message",
)
async def send_message(
    payload: MessageCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Send a direct message.

    The receiver must be one of the caller's connections; messaging yourself
    is always allowed.
    """
    return await message_service.send_message(
        db=db,
        sender_id=user_id,
        receiver_id=payload.receiver,
        content=payload.content,
    )


@router.get(
    "/conversation/{other_id}",
    response_model=List[MessageResponse],
    summary="Conversation with one user",
)
async def conversation(
    other_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[MessageResponse]:
    return await message_service.conversation(db=db, user_id=user_id, other_id=other_id)


@router.put(
    "/{message_id}/read",
    response_model=StatusMessage,
    responses={404: {"description": "No such message received by the caller", "model": ErrorResponse}},
    summary="Mark a message read",
)
async def mark_read(
    message_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> StatusMessage:
    return await message_service.mark_read(db=db, message_id=message_id, user_id=user_id)

"""
Linkhub Backend: User Route Handlers
=======================================

What:  Handles user registration and profile reads/edits.
How:   Extracts the payload and caller identity, delegates to UserService.
Who:   Called by the frontend onboarding and profile pages.

Routes:
    POST /api/users        register (no identity header needed)
    GET  /api/users/me     caller's own profile
    GET  /api/users/{id}   any user's profile
    PUT  /api/users/me     edit caller's profile
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.identity import get_current_user_id
from app.schemas.common import ErrorResponse
from app.schemas.user import UserCreate, UserProfile, UserUpdate
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post(
    "",
    response_model=UserProfile,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing name/email or email already registered", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a user",
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    """
    Register a new user.

    The returned `id` is what the client sends back in the identity header
    on every later call.
    """
    return await user_service.create_user(db=db, payload=payload)


@router.get(
    "/me",
    response_model=UserProfile,
    responses={
        401: {"description": "Missing identity header", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get the caller's profile",
)
async def get_me(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db=db, user_id=user_id)


@router.put(
    "/me",
    response_model=UserProfile,
    responses={
        400: {"description": "Blank name", "model": ErrorResponse},
        401: {"description": "Missing identity header", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Edit the caller's profile",
    description="Only fields present in the body are changed.",
)
async def update_me(
    payload: UserUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.update_profile(db=db, user_id=user_id, payload=payload)


@router.get(
    "/{target_id}",
    response_model=UserProfile,
    responses={
        401: {"description": "Missing identity header", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get a user's profile",
)
async def get_user(
    target_id: UUID,
    _: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db=db, user_id=target_id)

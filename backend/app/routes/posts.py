"""
Linkhub Backend: Post Route Handlers
=======================================

What:  Feed, post authoring, likes and comments.
Who:   Called by the frontend Feed and PostCard components.

Caching Strategy:
    GET /api/posts returns `Cache-Control: no-cache`; like counts and
    comments change constantly, so clients must revalidate.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.identity import get_current_user_id
from app.schemas.common import ErrorResponse, StatusMessage
from app.schemas.post import (
    CommentCreate,
    LikeToggleResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from app.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get(
    "",
    response_model=List[PostResponse],
    summary="List posts, newest first",
)
async def list_posts(
    response: Response,
    _: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> List[PostResponse]:
    response.headers["Cache-Control"] = "no-cache"
    return await post_service.list_posts(db=db)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Blank content", "model": ErrorResponse},
        404: {"description": "Author not found", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    payload: PostCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.create_post(db=db, author_id=user_id, payload=payload)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={404: {"description": "No such post owned by the caller", "model": ErrorResponse}},
    summary="Edit one of the caller's posts",
)
async def update_post(
    post_id: UUID,
    payload: PostUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.update_post(
        db=db, post_id=post_id, user_id=user_id, payload=payload
    )


@router.delete(
    "/{post_id}",
    response_model=StatusMessage,
    responses={404: {"description": "No such post owned by the caller", "model": ErrorResponse}},
    summary="Delete one of the caller's posts",
)
async def delete_post(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> StatusMessage:
    return await post_service.delete_post(db=db, post_id=post_id, user_id=user_id)


@router.post(
    "/{post_id}/like",
    response_model=LikeToggleResponse,
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Like or unlike a post",
)
async def toggle_like(
    post_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> LikeToggleResponse:
    """
    Toggle the caller's like on a post.

    `liked` in the response tells the client which way the toggle went.
    """
    return await post_service.toggle_like(db=db, post_id=post_id, user_id=user_id)


@router.post(
    "/{post_id}/comment",
    response_model=PostResponse,
    responses={
        400: {"description": "Blank comment text", "model": ErrorResponse},
        404: {"description": "Post not found", "model": ErrorResponse},
    },
    summary="Comment on a post",
)
async def add_comment(
    post_id: UUID,
    payload: CommentCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PostResponse:
    return await post_service.add_comment(
        db=db, post_id=post_id, user_id=user_id, text=payload.text
    )

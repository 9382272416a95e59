"""
Linkhub Backend: Caller Identity Dependency
==============================================

What:  Extracts the authenticated user's id from the request.
How:   Authentication happens upstream (gateway / auth service), which
       forwards the user's UUID in the `settings.identity_header` header.
       This dependency only parses it; whether the user exists is checked
       by the service that needs the user.
Who:   Injected into every /api route except POST /api/users.

Example:
    @router.get("/connections")
    async def list_connections(user_id: uuid.UUID = Depends(get_current_user_id)):
        ...
"""

import uuid

from fastapi import Request

from app.config import settings
from app.exceptions import AuthenticationError


async def get_current_user_id(request: Request) -> uuid.UUID:
    """
    Raises:
        AuthenticationError: header missing or not a UUID (→ 401)
    """
    raw = request.headers.get(settings.identity_header, "").strip()
    if not raw:
        raise AuthenticationError(
            message="Authentication required",
            context={"header": settings.identity_header},
        )
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise AuthenticationError(
            message="Invalid user identity",
            context={"header": settings.identity_header},
        )

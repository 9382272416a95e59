"""
Linkhub Backend: Connection & Graph Schemas
==============================================

What:  Response models for follow/unfollow and the graph queries
       (mutual connections, network statistics).
"""

from typing import List

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class FollowResponse(BaseModel):
    """
    What:  Result of POST /api/connections/{id}/follow.

    notification_sent is False when the connection was stored but the
    follow notification could not be written. The follow itself still
    succeeded.
    """
    message: str = Field(default="User followed successfully")
    notification_sent: bool = Field(
        description="Whether the followed user was notified"
    )


class MutualConnectionsResponse(BaseModel):
    """
    What:  Result of GET /api/connections/{id}/mutual.

    count is the exact size of the intersection; connections is a preview
    of at most five entries, in the caller's follow order.
    """
    count: int = Field(description="Number of users both parties follow")
    connections: List[UserSummary] = Field(
        description="Preview of mutual connections (caller's follow order)"
    )


class NetworkStatsResponse(BaseModel):
    """
    What:  Result of GET /api/connections/stats.

    network_size counts users at exactly two hops: followed by someone the
    caller follows, excluding the caller and the caller's direct connections.
    """
    connections: int = Field(description="Number of direct connections")
    network_size: int = Field(description="Distinct friends-of-friends")

# Models package init
"""
Linkhub Backend: ORM Models
==============================

Importing this package registers every table with `Base.metadata`, which
Alembic autogenerate and the test suite's `create_all` both rely on.

Model Inventory:
    - User:          Profiles (the User Directory)
    - Connection:    Directed follow edges, ordered by follow time
    - Post:          Posts, with PostLike and Comment children
    - Message:       Direct messages
    - Notification:  Side-effect records of follow/like/comment/message
"""

from app.models.user import User
from app.models.connection import Connection
from app.models.post import Comment, Post, PostLike
from app.models.message import Message
from app.models.notification import Notification, NotificationType

__all__ = [
    "User",
    "Connection",
    "Post",
    "PostLike",
    "Comment",
    "Message",
    "Notification",
    "NotificationType",
]

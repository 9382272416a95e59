"""
Linkhub Backend: User SQLAlchemy Model
=========================================

What:  ORM model representing the `users` table (the User Directory).
Who:   Used by UserService for profile CRUD, by GraphService for projections,
       and by Alembic for schema management.

Table Design:
    - UUID primary key, generated in Python so the id is known before flush
    - email: unique, stored lowercased by UserService
    - skills / experience / education: JSON lists, read and written whole
    - A user's connections are NOT stored here; see models/connection.py

Password and session data are deliberately absent: authentication is handled
in front of this service.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A member of the network.

    Lifecycle:
        1. Created by POST /api/users
        2. Profile fields updated in place by PUT /api/users/me
        3. Never deleted in the current API surface
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Lowercased login email",
    )

    # ── Profile ───────────────────────────────────────────────────────────
    profile_picture: Mapped[str] = mapped_column(
        String(500), nullable=False, default="", server_default=text("''")
    )
    headline: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=text("''")
    )
    location: Mapped[str] = mapped_column(
        String(255), nullable=False, default="", server_default=text("''")
    )
    about: Mapped[str] = mapped_column(
        Text, nullable=False, default="", server_default=text("''")
    )
    skills: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    education: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}')>"

"""
Linkhub Backend: Application Package Initializer
==================================================

What:  Marks the `app` directory as a Python package.
Who:   Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Graph queries, mutations, notifications
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes extract the caller identity and request data, services own every
    rule about connections, posts, messages and notifications.
"""

__version__ = "1.0.0"

"""
CarVault Backend — Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Why:  Enables module imports like `from app.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered the same way for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, multipart parsing
    ├─────────────────────────────────────┤
    │   Security (Authorization Gate)     │  ← Bearer token → CurrentUser
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Car lifecycle, image merge, users
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the database directly, and services never see HTTP
    objects. The caller's identity always arrives as an explicit argument.
"""

__version__ = "1.0.0"

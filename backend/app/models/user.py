"""
CarVault Backend — User SQLAlchemy Model
=========================================

What:  ORM model representing the `users` table.
Why:   Persists login credentials and the identity every car is owned by.
Who:   Used by UserService (register/login/lookup) and referenced by Car.owner_id.

Table Design Rationale:
    - UUID primary key: ids appear inside access tokens; non-sequential ids
      cannot be guessed
    - email: unique, stored lower-cased so login is case-insensitive
    - hashed_password: bcrypt hash produced by passlib, never the plain text
    - The core never mutates a user after registration
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """A registered account that can own cars."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier, normalized to lower case",
    )

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display name shown in the UI",
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's password",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

"""
CarVault Backend — User Service (Identity Store)
=================================================

What:  Registration, credential checks and user lookup.
Why:   Cars are owned by users; tokens are only issued to users whose
       password has been verified here.
Who:   Called by the auth route handlers.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, DatabaseError, NotFoundError, ValidationError
from app.models.user import User
from app.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Business logic layer for user accounts."""

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> User:
        """
        Create a new account.

        Raises:
            ValidationError: the email is already registered
            DatabaseError: insert failed for another reason
        """
        email = email.strip().lower()
        if await self.get_by_email(db, email) is not None:
            raise ValidationError(message="Email already registered", field="email")

        user = User(username=username, email=email, hashed_password=hash_password(password))
        try:
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise ValidationError(message="Email already registered", field="email")
        except SQLAlchemyError as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not create the account. Please try again.")

        logger.info("User registered: %s", user.id)
        return user

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User:
        """
        Check a login attempt.

        Raises:
            AuthenticationError: unknown email or wrong password (same message)
        """
        user = await self.get_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.info("Failed login attempt")
            raise AuthenticationError(message="Invalid credentials")
        return user

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        """
        Raises:
            NotFoundError: the user no longer exists
        """
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()

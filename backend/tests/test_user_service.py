"""
CarVault Backend — User Service Tests
======================================

What we test:
    ✅ Registration stores a normalized email and a bcrypt hash
    ✅ Duplicate email is a ValidationError
    ✅ Login with unknown email or wrong password gives the same error
    ✅ Lookup of a missing user raises NotFoundError
"""

import uuid

import pytest

from app.exceptions import AuthenticationError, NotFoundError, ValidationError
from app.services.user_service import UserService


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_register_normalizes_email_and_hashes_password(self, db_session):
        user = await self.service.register(db_session, "Dana", " Dana@Example.COM ", "s3cret!")

        assert user.email == "dana@example.com"
        assert user.hashed_password != "s3cret!"
        assert (await self.service.get_user(db_session, user.id)).id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db_session):
        await self.service.register(db_session, "Dana", "dana@example.com", "s3cret!")
        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(db_session, "Other", "DANA@example.com", "another")
        assert exc_info.value.field == "email"

    @pytest.mark.asyncio
    async def test_authenticate(self, db_session):
        registered = await self.service.register(db_session, "Dana", "dana@example.com", "s3cret!")
        user = await self.service.authenticate(db_session, "dana@example.com", "s3cret!")
        assert user.id == registered.id

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, db_session):
        await self.service.register(db_session, "Dana", "dana@example.com", "s3cret!")

        with pytest.raises(AuthenticationError) as wrong_password:
            await self.service.authenticate(db_session, "dana@example.com", "nope")
        with pytest.raises(AuthenticationError) as unknown_email:
            await self.service.authenticate(db_session, "nobody@example.com", "s3cret!")

        assert wrong_password.value.message == unknown_email.value.message

    @pytest.mark.asyncio
    async def test_get_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_user(db_session, uuid.uuid4())

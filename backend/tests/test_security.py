"""
CarVault Backend — Security Tests
==================================

What we test:
    ✅ Password hashes verify and never equal the plain text
    ✅ Tokens round-trip the user id
    ✅ Expired, forged and malformed tokens are rejected
    ✅ The dependency rejects missing credentials
"""

import uuid
from datetime import timedelta

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt
from starlette.requests import Request

from app.config import settings
from app.exceptions import AuthenticationError
from app.security import (
    CurrentUser,
    create_access_token,
    decode_access_token,
    get_current_user,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_verifies(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert verify_password("hunter22", hashed)

    def test_wrong_password_fails(self):
        assert not verify_password("wrong", hash_password("hunter22"))


class TestTokens:

    def test_round_trip(self):
        user_id = uuid.uuid4()
        assert decode_access_token(create_access_token(user_id)) == CurrentUser(id=user_id)

    def test_expired_token_rejected(self):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-30))
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "some-other-secret", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.jwt")

    @pytest.mark.parametrize("claims", [{"sub": "admin"}, {}])
    def test_subject_must_be_a_user_id(self, claims):
        token = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            decode_access_token(token)


class TestGetCurrentUser:

    @pytest.mark.asyncio
    async def test_missing_credentials_rejected(self):
        with pytest.raises(AuthenticationError):
            await get_current_user(Request({"type": "http"}), None)

    @pytest.mark.asyncio
    async def test_valid_bearer_token(self):
        user_id = uuid.uuid4()
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=create_access_token(user_id)
        )
        request = Request({"type": "http"})
        assert (await get_current_user(request, credentials)).id == user_id
        assert request.state.user_id == str(user_id)

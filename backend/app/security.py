"""
CarVault Backend — Authentication & Authorization Gate
=======================================================

What:  Password hashing, access-token issuance/verification, and the FastAPI
       dependency that resolves the caller's identity for every car route.
Why:   Every car operation must know WHO is calling before it runs; ownership
       checks in CarService depend on it.
How:   - passlib CryptContext (bcrypt) for password hashes
       - python-jose for HS256 JWTs carrying the user id in `sub`
       - fastapi.security.HTTPBearer to read `Authorization: Bearer <token>`
Who:   Routes depend on `get_current_user`; UserService calls the hash/token
       helpers.

Identity Context:
    The resolved identity is returned as a small immutable `CurrentUser`
    object and passed explicitly into service calls. Nothing is stored on
    module state or in a ContextVar, so two concurrent requests can never see
    each other's identity.

    ┌──────────────┐    ┌─────────────────┐    ┌──────────────┐
    │ Bearer token │───▶│ decode + verify │───▶│ CurrentUser  │───▶ CarService
    └──────────────┘    │ (sig, exp, sub) │    └──────────────┘
                        └─────────────────┘
                               │ any failure
                               ▼
                       AuthenticationError → 401
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False: a missing header must become our AuthenticationError
# (401 + JSON body) instead of FastAPI's bare 403
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller, as resolved from the access token."""
    id: uuid.UUID


# ── Passwords ─────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# ── Tokens ────────────────────────────────────────────────────────────────

def create_access_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed access token for `user_id`.

    Claims:
        sub: the user id (string form of the UUID)
        iat: issue time
        exp: expiry, `access_token_expire_minutes` from now unless overridden
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    claims = {"sub": str(user_id), "iat": now, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> CurrentUser:
    """
    Verify a token and return the identity it carries.

    Raises:
        AuthenticationError: bad signature, malformed token, expired token,
                             or a subject that is not a user id.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        # jose raises ExpiredSignatureError (a JWTError) for expired tokens
        logger.info("Rejected access token: %s", type(e).__name__)
        raise AuthenticationError(message="Invalid or expired token")

    subject = payload.get("sub")
    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        logger.info("Rejected access token with invalid subject")
        raise AuthenticationError(message="Invalid or expired token")

    return CurrentUser(id=user_id)


# ── FastAPI Dependency ────────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Authorization gate for protected routes.

    Usage:
        @router.get("/cars")
        async def list_cars(current_user: CurrentUser = Depends(get_current_user)):
            ...

    The resolved id is also put on `request.state.user_id` so the access log
    can attribute the request.

    Raises:
        AuthenticationError: no bearer credentials or the token fails verification.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(message="Not authenticated")
    current_user = decode_access_token(credentials.credentials)
    request.state.user_id = str(current_user.id)
    return current_user

"""
CarVault Backend — Auth Request/Response Schemas
=================================================

What:  Pydantic models for registration, login and the current-user endpoint.
Why:   Request bodies are validated by FastAPI before reaching UserService
       (schema failures are FastAPI's standard 422 responses).
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

BCRYPT_MAX_BYTES = 72


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6, description="At most 72 bytes once UTF-8 encoded")

    @field_validator("password")
    @classmethod
    def limit_password_bytes(cls, v: str) -> str:
        # bcrypt only hashes the first 72 bytes; longer input would be truncated silently
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Light sanity check; the address is normalized to lower case."""
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or not domain:
            raise ValueError("Invalid email address")
        return v

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username must not be blank")
        return v


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """
    What:  Returned by register and login.
    token: Bearer token to send as `Authorization: Bearer <token>`.
    """
    token: str = Field(description="Signed access token")
    token_type: str = Field(default="bearer")
    user: UserResponse

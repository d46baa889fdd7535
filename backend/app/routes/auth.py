"""
CarVault Backend — Auth Route Handlers
=======================================

What:  Register, log in, and fetch the current user.
Why:   Issues the bearer tokens every /api/cars route requires.

Route Summary:
    POST /api/auth/register   create account, returns {token, user}
    POST /api/auth/login      check credentials, returns {token, user}
    GET  /api/auth/me         the user behind the presented token
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError, NotFoundError
from app.schemas.common import ErrorResponse
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from app.security import CurrentUser, create_access_token, get_current_user
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={400: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await user_service.register(
        db=db,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return AuthResponse(
        token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    user = await user_service.authenticate(db=db, email=body.email, password=body.password)
    logger.info("User %s logged in", user.id)
    return AuthResponse(
        token=create_access_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Get the authenticated user",
)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    """
    A valid token whose user has since been removed is treated as an
    invalid token, not as a 404.
    """
    try:
        user = await user_service.get_user(db=db, user_id=current_user.id)
    except NotFoundError:
        raise AuthenticationError(message="User no longer exists")
    return UserResponse.model_validate(user)

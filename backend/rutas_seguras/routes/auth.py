"""
Rutas Seguras Backend — Auth Route Handlers
===========================================

What:  /api/auth: register, login, profile, password change, logout.
Why:   The entry point for every session. Login and register are public;
       the rest need a valid bearer token.
How:   Validates bodies with Pydantic, delegates to AuthService, wraps the
       result in the standard success envelope.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.database import get_db_session
from rutas_seguras.config import Settings
from rutas_seguras.dependencies import get_current_user, get_settings
from rutas_seguras.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    ProfileUpdateRequest,
    RegisterRequest,
)
from rutas_seguras.schemas.common import ApiResponse, ErrorResponse
from rutas_seguras.security import TokenClaims
from rutas_seguras.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[AuthResult],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    payload: RegisterRequest,
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthResult]:
    """
    Register a new user and return a token so the client is signed in at once.

    The response never contains a password or password hash.
    """
    result = await auth_service.register(db, config, payload)
    return ApiResponse[AuthResult](message="User registered successfully", data=result)


@router.post(
    "/login",
    response_model=ApiResponse[AuthResult],
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Sign in with email and password",
)
async def login(
    payload: LoginRequest,
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthResult]:
    result = await auth_service.login(db, config, payload)
    return ApiResponse[AuthResult](message="Login successful", data=result)


@router.get(
    "/me",
    response_model=ApiResponse[ProfileResponse],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Account no longer exists", "model": ErrorResponse},
    },
    summary="Current user's profile",
)
async def get_me(
    user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProfileResponse]:
    profile = await auth_service.get_profile(db, user.id)
    return ApiResponse[ProfileResponse](data=ProfileResponse(user=profile))


@router.api_route(
    "/me",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[ProfileResponse],
    responses={400: {"description": "Invalid input", "model": ErrorResponse}},
    summary="Update own name and phone",
)
async def update_me(
    payload: ProfileUpdateRequest,
    user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProfileResponse]:
    profile = await auth_service.update_profile(db, user.id, payload)
    return ApiResponse[ProfileResponse](
        message="Profile updated successfully", data=ProfileResponse(user=profile)
    )


@router.post(
    "/change-password",
    response_model=ApiResponse[None],
    responses={401: {"description": "Current password is incorrect", "model": ErrorResponse}},
    summary="Change own password",
)
async def change_password(
    payload: ChangePasswordRequest,
    user: TokenClaims = Depends(get_current_user),
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await auth_service.change_password(db, config, user.id, payload)
    return ApiResponse[None](message="Password changed successfully")


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Sign out",
)
async def logout(user: TokenClaims = Depends(get_current_user)) -> ApiResponse[None]:
    """
    Tokens are stateless; the client drops its copy. This endpoint exists so
    the sign-out shows up in the server logs.
    """
    await auth_service.logout(user)
    return ApiResponse[None](message="Logged out successfully")

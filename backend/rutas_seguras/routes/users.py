"""
Rutas Seguras Backend — User Administration Route Handlers
==========================================================

What:  /api/users: admin CRUD over accounts, plus the driver lookup any
       signed-in user can read.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.database import get_db_session
from rutas_seguras.config import Settings
from rutas_seguras.dependencies import (
    get_current_user,
    get_page_request,
    get_settings,
    require_admin,
)
from rutas_seguras.schemas.common import ApiResponse, ErrorResponse
from rutas_seguras.schemas.user import (
    Role,
    UserCollection,
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from rutas_seguras.security import TokenClaims
from rutas_seguras.services.pagination import PageRequest
from rutas_seguras.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

ADMIN_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Admin role required", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ApiResponse[UserListResponse],
    responses=ADMIN_ERRORS,
    summary="List users (admin)",
)
async def list_users(
    page: PageRequest = Depends(get_page_request),
    role: Optional[Role] = Query(default=None, description="Only users with this role"),
    include_inactive: bool = Query(default=False, description="Include soft-deleted users"),
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserListResponse]:
    result = await user_service.list_users(db, page=page, role=role, include_inactive=include_inactive)
    return ApiResponse[UserListResponse](data=result)


@router.get(
    "/drivers",
    response_model=ApiResponse[UserCollection],
    summary="Active drivers",
)
async def list_drivers(
    _: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserCollection]:
    return ApiResponse[UserCollection](data=await user_service.list_drivers(db))


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserResponse],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Get a user (admin)",
)
async def get_user(
    user_id: UUID,
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    return ApiResponse[UserResponse](data=await user_service.get_user(db, user_id))


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[UserResponse],
    responses={**ADMIN_ERRORS, 409: {"description": "Email already registered", "model": ErrorResponse}},
    summary="Create a user (admin)",
)
async def create_user(
    payload: UserCreateRequest,
    _: TokenClaims = Depends(require_admin),
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    user = await user_service.create_user(db, config, payload)
    return ApiResponse[UserResponse](message="User created successfully", data=user)


@router.api_route(
    "/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[UserResponse],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Update a user (admin)",
)
async def update_user(
    user_id: UUID,
    payload: UserUpdateRequest,
    _: TokenClaims = Depends(require_admin),
    config: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    user = await user_service.update_user(db, config, user_id, payload)
    return ApiResponse[UserResponse](message="User updated successfully", data=user)


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown user", "model": ErrorResponse}},
    summary="Deactivate a user (admin)",
)
async def delete_user(
    user_id: UUID,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await user_service.delete_user(db, user_id, acting_user_id=admin.id)
    return ApiResponse[None](message="User deleted successfully")

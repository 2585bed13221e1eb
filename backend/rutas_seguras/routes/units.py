"""
Rutas Seguras Backend — Fleet Unit Route Handlers
=================================================

What:  /api/units: any signed-in user can read the fleet; only admins change it.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.database import get_db_session
from rutas_seguras.dependencies import get_current_user, get_page_request, require_admin
from rutas_seguras.schemas.common import ApiResponse, ErrorResponse
from rutas_seguras.schemas.unit import (
    UnitCreateRequest,
    UnitListResponse,
    UnitResponse,
    UnitStatus,
    UnitUpdateRequest,
)
from rutas_seguras.security import TokenClaims
from rutas_seguras.services.pagination import PageRequest
from rutas_seguras.services.unit_service import unit_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/units", tags=["Units"])

ADMIN_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Admin role required", "model": ErrorResponse},
}


@router.get("", response_model=ApiResponse[UnitListResponse], summary="List units")
async def list_units(
    page: PageRequest = Depends(get_page_request),
    status: Optional[UnitStatus] = Query(default=None, description="Only units in this status"),
    _: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UnitListResponse]:
    result = await unit_service.list_units(db, page=page, status=status)
    return ApiResponse[UnitListResponse](data=result)


@router.get(
    "/{unit_id}",
    response_model=ApiResponse[UnitResponse],
    responses={404: {"description": "Unknown unit", "model": ErrorResponse}},
    summary="Get a unit",
)
async def get_unit(
    unit_id: UUID,
    _: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UnitResponse]:
    return ApiResponse[UnitResponse](data=await unit_service.get_unit(db, unit_id))


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[UnitResponse],
    responses={**ADMIN_ERRORS, 409: {"description": "Plate already registered", "model": ErrorResponse}},
    summary="Register a unit (admin)",
)
async def create_unit(
    payload: UnitCreateRequest,
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UnitResponse]:
    unit = await unit_service.create_unit(db, payload)
    return ApiResponse[UnitResponse](message="Unit created successfully", data=unit)


@router.api_route(
    "/{unit_id}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[UnitResponse],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown unit", "model": ErrorResponse}},
    summary="Update a unit (admin)",
)
async def update_unit(
    unit_id: UUID,
    payload: UnitUpdateRequest,
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UnitResponse]:
    unit = await unit_service.update_unit(db, unit_id, payload)
    return ApiResponse[UnitResponse](message="Unit updated successfully", data=unit)


@router.delete(
    "/{unit_id}",
    response_model=ApiResponse[None],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown unit", "model": ErrorResponse}},
    summary="Deactivate a unit (admin)",
)
async def delete_unit(
    unit_id: UUID,
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await unit_service.delete_unit(db, unit_id)
    return ApiResponse[None](message="Unit deleted successfully")

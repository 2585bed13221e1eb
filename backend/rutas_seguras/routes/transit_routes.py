"""
Rutas Seguras Backend — Transit Route Handlers
==============================================

What:  /api/routes: public search, popularity and suggestions, the driver's
       own assignments, and admin CRUD.
Who:   The public landing page (search, popular, suggestions) and the
       signed-in dashboard (detail, list, assignments, CRUD).

Path order matters: the fixed paths (/search, /popular, /suggestions/...,
/assigned) are declared before /{route_id} so they are not parsed as ids.

Caching Strategy:
    Nothing here is cached. Search results change with every admin edit and
    every search bumps popularity counters.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.database import get_db_session
from rutas_seguras.dependencies import (
    get_current_user,
    get_page_request,
    require_admin,
    require_driver,
)
from rutas_seguras.schemas.common import ApiResponse, ErrorResponse
from rutas_seguras.schemas.route import (
    RouteCollection,
    RouteCreateRequest,
    RouteListResponse,
    RouteResponse,
    RouteSearchResponse,
    RouteStatus,
    RouteUpdateRequest,
    SuggestionsResponse,
)
from rutas_seguras.security import TokenClaims
from rutas_seguras.services.pagination import PageRequest
from rutas_seguras.services.route_service import route_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["Routes"])

ADMIN_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Admin role required", "model": ErrorResponse},
}


# ══════════════════════════════════════════════════════════════════════════
# Public reads
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/search",
    response_model=ApiResponse[RouteSearchResponse],
    responses={400: {"description": "Missing or too short search term", "model": ErrorResponse}},
    summary="Search routes by origin or destination",
    description=(
        "Case-insensitive substring match: a route is returned when its origin "
        "contains `origin` or its destination contains `destination`. Only active "
        "routes, newest first, paginated."
    ),
)
async def search_routes(
    origin: str = Query(min_length=2, max_length=255),
    destination: str = Query(min_length=2, max_length=255),
    page: PageRequest = Depends(get_page_request),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteSearchResponse]:
    """
    Example:
        GET /api/routes/search?origin=Centro&destination=Norte&page=1
    """
    result = await route_service.search(db, origin=origin, destination=destination, page=page)
    return ApiResponse[RouteSearchResponse](data=result)


@router.get(
    "/popular",
    response_model=ApiResponse[RouteCollection],
    summary="Most searched routes",
)
async def popular_routes(
    limit: int = Query(default=10, description="How many routes; clamped into [1, 50]"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteCollection]:
    return ApiResponse[RouteCollection](data=await route_service.popular(db, limit=limit))


@router.get(
    "/suggestions/origins",
    response_model=ApiResponse[SuggestionsResponse],
    summary="Distinct origins for autocomplete",
)
async def origin_suggestions(
    q: Optional[str] = Query(default=None, max_length=255, description="Substring filter"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[SuggestionsResponse]:
    return ApiResponse[SuggestionsResponse](
        data=await route_service.suggestions(db, "origins", q=q)
    )


@router.get(
    "/suggestions/destinations",
    response_model=ApiResponse[SuggestionsResponse],
    summary="Distinct destinations for autocomplete",
)
async def destination_suggestions(
    q: Optional[str] = Query(default=None, max_length=255, description="Substring filter"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[SuggestionsResponse]:
    return ApiResponse[SuggestionsResponse](
        data=await route_service.suggestions(db, "destinations", q=q)
    )


# ══════════════════════════════════════════════════════════════════════════
# Authenticated reads
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "/assigned",
    response_model=ApiResponse[RouteCollection],
    responses={403: {"description": "Driver or admin role required", "model": ErrorResponse}},
    summary="Routes assigned to the calling driver",
)
async def assigned_routes(
    user: TokenClaims = Depends(require_driver),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteCollection]:
    return ApiResponse[RouteCollection](data=await route_service.assigned(db, user.id))


@router.get(
    "",
    response_model=ApiResponse[RouteListResponse],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="List routes",
)
async def list_routes(
    page: PageRequest = Depends(get_page_request),
    status: Optional[RouteStatus] = Query(default=None, description="Only routes in this status"),
    _: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteListResponse]:
    result = await route_service.list_routes(db, page=page, status=status)
    return ApiResponse[RouteListResponse](data=result)


@router.get(
    "/{route_id}",
    response_model=ApiResponse[RouteResponse],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Unknown route", "model": ErrorResponse},
    },
    summary="Get a route",
)
async def get_route(
    route_id: UUID,
    _: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteResponse]:
    return ApiResponse[RouteResponse](data=await route_service.get_route(db, route_id))


# ══════════════════════════════════════════════════════════════════════════
# Admin writes
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[RouteResponse],
    responses={**ADMIN_ERRORS, 400: {"description": "Invalid input", "model": ErrorResponse}},
    summary="Create a route (admin)",
)
async def create_route(
    payload: RouteCreateRequest,
    admin: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteResponse]:
    route = await route_service.create_route(db, payload, created_by_id=admin.id)
    return ApiResponse[RouteResponse](message="Route created successfully", data=route)


@router.api_route(
    "/{route_id}",
    methods=["PUT", "PATCH"],
    response_model=ApiResponse[RouteResponse],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown route", "model": ErrorResponse}},
    summary="Update a route (admin)",
)
async def update_route(
    route_id: UUID,
    payload: RouteUpdateRequest,
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[RouteResponse]:
    route = await route_service.update_route(db, route_id, payload)
    return ApiResponse[RouteResponse](message="Route updated successfully", data=route)


@router.delete(
    "/{route_id}",
    response_model=ApiResponse[None],
    responses={**ADMIN_ERRORS, 404: {"description": "Unknown route", "model": ErrorResponse}},
    summary="Deactivate a route (admin)",
)
async def delete_route(
    route_id: UUID,
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await route_service.delete_route(db, route_id)
    return ApiResponse[None](message="Route deleted successfully")

"""
Rutas Seguras Backend — Contact Route Handlers
==============================================

What:  POST /api/contacts (public contact form) and GET /api/contacts (admin inbox).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rutas_seguras.database import get_db_session
from rutas_seguras.dependencies import get_page_request, require_admin
from rutas_seguras.schemas.common import ApiResponse, ErrorResponse
from rutas_seguras.schemas.contact import (
    ContactCreateRequest,
    ContactListResponse,
    ContactResponse,
)
from rutas_seguras.security import TokenClaims
from rutas_seguras.services.pagination import PageRequest
from rutas_seguras.services.contact_service import contact_service

router = APIRouter(prefix="/api/contacts", tags=["Contacts"])


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[ContactResponse],
    responses={400: {"description": "Invalid input", "model": ErrorResponse}},
    summary="Send a contact message",
)
async def create_contact(
    payload: ContactCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ContactResponse]:
    contact = await contact_service.create_contact(db, payload)
    return ApiResponse[ContactResponse](message="Message sent successfully", data=contact)


@router.get(
    "",
    response_model=ApiResponse[ContactListResponse],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Admin role required", "model": ErrorResponse},
    },
    summary="List contact messages (admin)",
)
async def list_contacts(
    page: PageRequest = Depends(get_page_request),
    _: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ContactListResponse]:
    return ApiResponse[ContactListResponse](data=await contact_service.list_contacts(db, page=page))

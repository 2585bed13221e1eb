"""
Rutas Seguras Backend — Route Schemas
=====================================

What:  Request/response models for transit routes: CRUD bodies, the search
       result page, popularity and suggestion payloads.
Who:   /api/routes handlers and RouteService.

Partial updates:
    `RouteUpdateRequest` is applied with `model_dump(exclude_unset=True)`, so a
    field left out of the body is untouched, while an explicit null on an
    optional field (assigned_unit_id, assigned_driver_id, duration, image_url)
    clears it.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from rutas_seguras.schemas.common import Pagination
from rutas_seguras.schemas.user import reject_null, strip_text

RouteStatus = Literal["activo", "en curso", "finalizado", "inactivo"]


class ScheduleEntry(BaseModel):
    day: str = Field(min_length=1, max_length=20, description="e.g. 'lunes'")
    time: str = Field(min_length=1, max_length=20, description="e.g. '07:30'")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class RouteResponse(BaseModel):
    id: uuid.UUID
    title: str
    origin: str
    destination: str
    stops: List[str] = Field(default_factory=list)
    schedule: List[ScheduleEntry] = Field(default_factory=list)
    distance_km: int
    duration: Optional[str] = None
    status: str
    assigned_unit_id: Optional[uuid.UUID] = None
    assigned_driver_id: Optional[uuid.UUID] = None
    image_url: Optional[str] = None
    created_by_id: Optional[uuid.UUID] = None
    search_count: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RouteCollection(BaseModel):
    routes: List[RouteResponse]


class RouteListResponse(RouteCollection):
    pagination: Pagination


class SearchQuery(BaseModel):
    origin: str
    destination: str


class RouteSearchResponse(RouteListResponse):
    """
    What:  Result page of GET /api/routes/search.

    Example:
        {
            "routes": [...],
            "pagination": {"current_page": 1, "total_pages": 1,
                           "total_items": 2, "items_per_page": 20},
            "query": {"origin": "Centro", "destination": "Norte"}
        }
    """
    query: SearchQuery


class SuggestionsResponse(BaseModel):
    suggestions: List[str]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RouteCreateRequest(BaseModel):
    title: str = Field(min_length=2, max_length=150)
    origin: str = Field(min_length=2, max_length=255)
    destination: str = Field(min_length=2, max_length=255)
    stops: List[str] = Field(default_factory=list, max_length=100)
    schedule: List[ScheduleEntry] = Field(default_factory=list, max_length=100)
    distance_km: int = Field(ge=0, le=100_000)
    duration: Optional[str] = Field(default=None, max_length=50)
    status: RouteStatus = "activo"
    assigned_unit_id: Optional[uuid.UUID] = None
    assigned_driver_id: Optional[uuid.UUID] = None
    image_url: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("title", "origin", "destination", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        return strip_text(v)


class RouteUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=150)
    origin: Optional[str] = Field(default=None, min_length=2, max_length=255)
    destination: Optional[str] = Field(default=None, min_length=2, max_length=255)
    stops: Optional[List[str]] = Field(default=None, max_length=100)
    schedule: Optional[List[ScheduleEntry]] = Field(default=None, max_length=100)
    distance_km: Optional[int] = Field(default=None, ge=0, le=100_000)
    duration: Optional[str] = Field(default=None, max_length=50)
    status: Optional[RouteStatus] = None
    assigned_unit_id: Optional[uuid.UUID] = None
    assigned_driver_id: Optional[uuid.UUID] = None
    image_url: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("title", "origin", "destination", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        return strip_text(v)

    @field_validator("title", "origin", "destination", "stops", "schedule", "distance_km", "status")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)

"""
Rutas Seguras Backend — Unit Schemas
====================================

What:  Request/response models for fleet vehicles (/api/units).
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from rutas_seguras.schemas.common import Pagination
from rutas_seguras.schemas.user import reject_null, strip_text

UnitStatus = Literal["disponible", "en ruta", "mantenimiento", "inactivo"]

MIN_YEAR = 1950
MAX_YEAR = 2100


class UnitResponse(BaseModel):
    id: uuid.UUID
    plate: str
    brand: str
    model: str
    year: int
    capacity: int
    status: str
    image_url: Optional[str] = None
    current_route_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UnitListResponse(BaseModel):
    units: List[UnitResponse]
    pagination: Pagination


class UnitCreateRequest(BaseModel):
    plate: str = Field(min_length=3, max_length=20)
    brand: str = Field(min_length=1, max_length=60)
    model: str = Field(min_length=1, max_length=60)
    year: int = Field(ge=MIN_YEAR, le=MAX_YEAR)
    capacity: int = Field(ge=1, le=500)
    status: UnitStatus = "disponible"
    image_url: Optional[str] = Field(default=None, max_length=2048)
    current_route_id: Optional[uuid.UUID] = None

    @field_validator("plate", "brand", "model", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        return strip_text(v)


class UnitUpdateRequest(BaseModel):
    plate: Optional[str] = Field(default=None, min_length=3, max_length=20)
    brand: Optional[str] = Field(default=None, min_length=1, max_length=60)
    model: Optional[str] = Field(default=None, min_length=1, max_length=60)
    year: Optional[int] = Field(default=None, ge=MIN_YEAR, le=MAX_YEAR)
    capacity: Optional[int] = Field(default=None, ge=1, le=500)
    status: Optional[UnitStatus] = None
    image_url: Optional[str] = Field(default=None, max_length=2048)
    current_route_id: Optional[uuid.UUID] = None

    @field_validator("plate", "brand", "model", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        return strip_text(v)

    @field_validator("plate", "brand", "model", "year", "capacity", "status")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)

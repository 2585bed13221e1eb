"""
Rutas Seguras Backend — Contact Schemas
=======================================

What:  Request/response models for the public contact form and the admin inbox.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from rutas_seguras.schemas.common import Pagination
from rutas_seguras.schemas.user import check_phone, strip_text


class ContactCreateRequest(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr = Field(max_length=255)
    phone: Optional[str] = Field(default=None, max_length=30)
    message: str = Field(min_length=1, max_length=5000)

    @field_validator("name", "message", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        return strip_text(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return check_phone(v)


class ContactResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ContactListResponse(BaseModel):
    contacts: List[ContactResponse]
    pagination: Pagination

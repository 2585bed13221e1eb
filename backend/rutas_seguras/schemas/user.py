"""
Rutas Seguras Backend — User Schemas
====================================

What:  Request/response models for user accounts, plus the field rules shared
       with the auth schemas (name, phone, password).
Who:   /api/users handlers (admin CRUD) and /api/auth handlers.

Security:
    `UserResponse` has no password field at all, so a hash can never be
    serialized by accident, whatever the ORM row holds.
"""

import re
import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from rutas_seguras.schemas.common import Pagination
from rutas_seguras.security import BCRYPT_MAX_PASSWORD_BYTES

Role = Literal["admin", "conductor", "cliente"]

PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]{7,}$")

# bcrypt ignores everything past 72 bytes, so longer passwords are refused
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = BCRYPT_MAX_PASSWORD_BYTES


# ══════════════════════════════════════════════════════════════════════════
# Shared field rules
# ══════════════════════════════════════════════════════════════════════════


def strip_text(v):
    return v.strip() if isinstance(v, str) else v


def check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        return None
    if not PHONE_PATTERN.match(v):
        raise ValueError("Phone may only contain digits, spaces and + - ( ), at least 7 characters")
    return v


def check_password(v: str) -> str:
    if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return v


def reject_null(v):
    if v is None:
        raise ValueError("This field may not be null")
    return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """Public representation of a user. Never includes the password hash."""
    id: uuid.UUID
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserCollection(BaseModel):
    users: List[UserResponse]


class UserListResponse(UserCollection):
    pagination: Pagination


# ══════════════════════════════════════════════════════════════════════════
# Request Models (admin)
# ══════════════════════════════════════════════════════════════════════════


class UserCreateRequest(BaseModel):
    """
    What:  Body of POST /api/users.
    Same rules as self-registration, plus the admin may set `active`.
    """
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=30)
    role: Role = Field(default="cliente")
    active: bool = Field(default=True)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return strip_text(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return check_phone(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password(v)


class UserUpdateRequest(BaseModel):
    """
    What:  Body of PUT/PATCH /api/users/{id}. Every field is optional.

    Only fields present in the body are applied (`exclude_unset`). `phone`
    may be set to null to clear it; the other fields may not be null.
    """
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, min_length=PASSWORD_MIN_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=30)
    role: Optional[Role] = None
    active: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return strip_text(v)

    @field_validator("name", "email", "role", "active")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return check_phone(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> str:
        return check_password(reject_null(v))

"""
Rutas Seguras Backend — Authentication Schemas
==============================================

What:  Request/response models for /api/auth (register, login, profile,
       password change).
Who:   Auth route handlers and AuthService.

Login deliberately accepts any non-empty string as the email. A malformed
address simply fails to match a user and gets the same 401 as every other
bad login.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from rutas_seguras.schemas.user import (
    PASSWORD_MIN_LENGTH,
    Role,
    UserResponse,
    check_password,
    check_phone,
    reject_null,
    strip_text,
)


class RegisterRequest(BaseModel):
    """
    What:  Body of POST /api/auth/register.

    Example:
        {"name": "Ana", "email": "ana@x.com", "password": "Secure1"}
    """
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    phone: Optional[str] = Field(default=None, max_length=30)
    role: Role = Field(default="cliente")

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


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)


class ProfileUpdateRequest(BaseModel):
    """
    What:  Body of PUT/PATCH /api/auth/me.
    Only name and phone are self-editable; role, email and active are admin-only.
    """
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return strip_text(v)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return reject_null(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return check_phone(v)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=1024)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthResult(BaseModel):
    """Returned by register and login: the public user plus a bearer token."""
    user: UserResponse
    token: str = Field(description="HS256 bearer token")


class ProfileResponse(BaseModel):
    user: UserResponse

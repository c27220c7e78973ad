"""
Ulyngo Backend — Auth Schemas
===============================

Request and response bodies for /api/auth, plus the caller identity that
the bearer-token dependency hands to protected routes.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.user import ROLE_ADMIN


BCRYPT_MAX_BYTES = 72


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=BCRYPT_MAX_BYTES)
    whatsapp: Optional[str] = Field(default=None, max_length=30)
    last_active_at: Optional[datetime] = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return v


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserSummary(BaseModel):
    id: uuid.UUID
    username: str
    role: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class CurrentUser(BaseModel):
    """Identity decoded from a verified bearer token. No database lookup."""

    id: uuid.UUID
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

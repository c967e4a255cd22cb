"""
Pydantic v2 schemas for the authentication endpoints.

Covers the registration payload, the JWT token response, and the public
user representation returned by ``GET /api/auth/me``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    """Payload accepted by ``POST /api/auth/register``.

    The location triple is checked against the location registry by the
    auth service, not here.
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=255)
    province: str = Field(..., min_length=1, max_length=255)
    district: str = Field(..., min_length=1, max_length=255)
    hospital: str = Field(..., min_length=1, max_length=255)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Jeanne Uwase",
                "email": "jeanne@butaro.rw",
                "password": "secret123",
                "province": "Northern",
                "district": "Burera",
                "hospital": "BUTARO HOSPITAL",
            }
        }
    )


class TokenResponse(BaseModel):
    """Response body returned after a successful authentication.

    Attributes:
        access_token: Signed JWT to send as ``Authorization: Bearer <token>``.
        token_type: Always ``"bearer"`` per OAuth2 convention.
    """

    access_token: str = Field(..., description="Signed JWT session token")
    token_type: str = Field(default="bearer", description="OAuth2 token type")


class UserResponse(BaseModel):
    """Public representation of a user; ``password_hash`` is never exposed."""

    id: int
    name: str
    email: str
    province: str
    district: str
    hospital: str
    email_verified: bool
    is_active: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

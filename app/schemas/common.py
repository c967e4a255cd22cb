"""
Shared Pydantic v2 schemas reused across multiple modules.

Provides the money type, pagination, and message/error envelopes so that
each domain module can compose them without duplicating field definitions.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

# Monetary amounts are Decimal in Python and plain JSON numbers on the wire.
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


class PaginationParams(BaseModel):
    """Pagination parameters for list endpoints.

    Attributes:
        page: 1-based page number.
        page_size: Number of rows per page (capped at 200 to protect DB).
    """

    page: int = Field(default=1, ge=1, description="1-based page number.")
    page_size: int = Field(default=20, ge=1, le=200, description="Rows per page (max 200).")


class MessageResponse(BaseModel):
    """Generic message envelope for operations that do not return a resource."""

    message: str = Field(..., description="Short summary of the operation result.")
    detail: str | None = Field(default=None, description="Extra context, if any.")


class ValidationErrorResponse(BaseModel):
    """Body returned with HTTP 422 when business validation fails.

    Attributes:
        message: Always ``"Validation failed"``.
        errors: Field name → list of human-readable messages.
    """

    message: str = "Validation failed"
    errors: dict[str, list[str]] = Field(default_factory=dict)

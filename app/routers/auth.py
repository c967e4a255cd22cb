"""
Authentication router for the RIWA planning API.

Mounts under ``/api/auth`` (prefix set in ``main.py``).

Endpoints:
    POST /register — Create an account together with its onboarding location.
    POST /login    — Authenticate with e-mail + password, receive JWT.
    POST /refresh  — Exchange a valid token for a new one (extend session).
    GET  /me       — Return the currently authenticated user's profile.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.auth import RegisterRequest, TokenResponse, UserResponse
from app.services.auth_service import authenticate_user, get_current_user, register_user
from app.services.location_registry import LocationRegistry, get_location_registry
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _token_for(user: User) -> TokenResponse:
    token = create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "hospital": user.hospital,
        }
    )
    return TokenResponse(access_token=token)


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
    responses={
        201: {"description": "Account created."},
        409: {"description": "E-mail already registered."},
        422: {"description": "Invalid body or inconsistent location."},
    },
)
def register(
    payload: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    registry: Annotated[LocationRegistry, Depends(get_location_registry)],
) -> UserResponse:
    """Create a user whose province/district/hospital come from the registry."""
    user = register_user(db, payload, registry)
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description=(
        "Authenticates with the OAuth2 password form (``username`` carries the "
        "e-mail) and returns a JWT valid for ``JWT_EXPIRATION_MINUTES``."
    ),
    responses={
        200: {"description": "Authenticated; the JWT is included."},
        401: {"description": "Wrong credentials or inactive account."},
    },
)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Authenticate a user and issue a JWT access token.

    Raises:
        HTTPException 401: If credentials are invalid or the account is inactive.
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if user is None:
        logger.warning("Failed login attempt for email='%s'", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Successful login for email='%s'", user.email)
    return _token_for(user)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh token",
    responses={
        200: {"description": "New token issued."},
        401: {"description": "Token invalid or expired."},
    },
)
def refresh_token(
    current_user: Annotated[User, Depends(get_current_user)],
) -> TokenResponse:
    """Issue a fresh token for a caller whose current token is still valid."""
    logger.info("Token refreshed for email='%s'", current_user.email)
    return _token_for(current_user)


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
    responses={401: {"description": "Token missing or invalid."}},
)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)

"""
Authentication business logic for the RIWA planning backend.

Provides:
- ``register_user`` — create an account after checking the e-mail is free
  and the onboarding location exists in the registry.
- ``authenticate_user`` — credential verification against the DB.
- ``get_current_user`` — FastAPI dependency that extracts and validates
  the Bearer JWT from the ``Authorization`` header.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.auth import RegisterRequest
from app.services.location_registry import LocationRegistry
from app.services.plan_validation import ensure_valid, validate_location
from app.utils.security import hash_password, verify_password, verify_token

logger = logging.getLogger(__name__)

# ``tokenUrl`` must match the login endpoint path (relative to root).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _email_taken() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="An account with this email already exists",
    )


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_user(db: Session, payload: RegisterRequest, registry: LocationRegistry) -> User:
    """Create a user account.

    Raises:
        HTTPException 422: If the province/district/hospital triple is not
                           consistent with the location registry.
        HTTPException 409: If the e-mail is already registered.
    """
    ensure_valid(validate_location(registry, payload.province, payload.district, payload.hospital))

    email = payload.email.lower()
    if db.query(User.id).filter(User.email == email).first() is not None:
        logger.warning("Registration rejected, email already used: '%s'", email)
        raise _email_taken()

    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        province=payload.province,
        district=payload.district,
        hospital=payload.hospital,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration with the same e-mail
        db.rollback()
        raise _email_taken()
    db.refresh(user)

    logger.info("User registered: id=%d email='%s' hospital='%s'", user.id, user.email, user.hospital)
    return user


# ---------------------------------------------------------------------------
# Core authentication function
# ---------------------------------------------------------------------------


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Verify e-mail/password credentials against the database.

    Returns ``None`` (instead of raising) for unknown users, inactive
    accounts and wrong passwords alike, so callers control the HTTP error.
    """
    user: User | None = (
        db.query(User)
        .filter(User.email == email.lower(), User.is_active.is_(True))
        .first()
    )

    if user is None:
        logger.debug("authenticate_user: unknown or inactive user '%s'", email)
        return None

    if not verify_password(password, user.password_hash):
        logger.debug("authenticate_user: wrong password for user '%s'", email)
        return None

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    return user


# ---------------------------------------------------------------------------
# FastAPI dependency: current authenticated user
# ---------------------------------------------------------------------------


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Resolve the caller's identity from the Bearer token.

    Raises:
        HTTPException 401: If the token is missing, invalid, or expired,
                           or the referenced user is gone or inactive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = verify_token(token)
    except ValueError:
        raise credentials_exception

    # ``sub`` carries the user's primary key as a string.
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    user: User | None = (
        db.query(User)
        .filter(User.id == user_id, User.is_active.is_(True))
        .first()
    )
    if user is None:
        raise credentials_exception

    return user

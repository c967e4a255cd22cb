"""
Security utilities for the RIWA planning authentication flow.

Provides JWT session-token creation/verification via python-jose and
bcrypt password hashing. Secrets and lifetimes come from the settings
singleton; nothing here talks to the database.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.config import get_settings

logger = logging.getLogger(__name__)

_BCRYPT_ROUNDS = 12


# ---------------------------------------------------------------------------
# Password helpers
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash stored for the account
        return False


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------


def create_access_token(data: dict[str, Any]) -> str:
    """Create a signed session token.

    The payload is a copy of *data* plus ``iat`` and ``exp`` claims; the
    lifetime comes from ``JWT_EXPIRATION_MINUTES``. Callers set ``sub`` to
    the user's id and may add ``email`` / ``name`` for display purposes.

    Example::

        token = create_access_token({"sub": str(user.id), "email": user.email})
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = data.copy()
    payload["iat"] = now
    payload["exp"] = now + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)

    return jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode and verify a session token.

    Raises:
        ValueError: If the token is invalid, expired, or cannot be decoded.
                    The ``get_current_user`` dependency maps this to 401.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.debug("JWT verification failed: %s", exc)
        raise ValueError("Invalid or expired token") from exc

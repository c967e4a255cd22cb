"""User model — registered facility staff and their onboarding location."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class User(Base):
    """Application user bound to one hospital.

    The province/district/hospital triple is captured at registration
    (onboarding) and scopes which plans the user sees by default.

    Attributes:
        id: Primary key.
        name: Display name.
        email: Unique login e-mail.
        password_hash: Bcrypt hash (never store plain text).
        province: Onboarding province.
        district: Onboarding district.
        hospital: Onboarding hospital.
        email_verified: Whether the e-mail address was confirmed.
        is_active: Soft-delete flag; inactive users cannot log in.
        last_login: Timestamp of the last successful login.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "app_user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    province = Column(String(255), nullable=False)
    district = Column(String(255), nullable=False)
    hospital = Column(String(255), nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

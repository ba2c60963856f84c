"""
User model for authentication and authorization.
This module defines the SQLAlchemy model for users who can access FieldWorkBook.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.models.base import Base


class UserRole(str, PyEnum):
    """Roles a user account can hold. Fixed at creation time."""

    ADMIN = "admin"
    PARTNER = "partner"
    FIELD_STAFF = "field_staff"


class User(Base):
    """
    User model representing system users.

    Admins and partners manage teams and approve top-up requests; field
    staff are bound to a single team and log expenses against it.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(100), nullable=False, default="")
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.FIELD_STAFF.value)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        """String representation of the User model."""
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"

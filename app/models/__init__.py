"""
Models package initialization.

This module imports all models to ensure they are registered with SQLAlchemy.
"""

from app.models.base import Base

from app.models.user import User, UserRole
from app.models.team import Team
from app.models.expense import Expense
from app.models.amount_request import AmountRequest, RequestStatus
from app.models.audit import AuditLog
from app.models.session import UserSession


__all__ = [
    "Base",
    "User",
    "UserRole",
    "Team",
    "Expense",
    "AmountRequest",
    "RequestStatus",
    "AuditLog",
    "UserSession",
]

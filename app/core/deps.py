"""
Dependencies for FastAPI endpoints.

This module turns the authenticated user into the explicit request context
the services work with, and extracts client details for auditing.
"""

from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, Query, Request
from app.core.auth import get_current_active_user
from app.core.rbac import Permission, Role, require_permission
from app.models.user import User
from app.utils.pagination import PaginationParams


@dataclass(frozen=True)
class RequestContext:
    """Who is acting: passed explicitly into every service call."""

    user_id: int
    role: Role
    team_id: Optional[int] = None

    @property
    def is_field_staff(self) -> bool:
        return self.role == Role.FIELD_STAFF

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def for_user(cls, user: User) -> "RequestContext":
        return cls(user_id=user.id, role=Role(user.role), team_id=user.team_id)


@dataclass(frozen=True)
class ClientInfo:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


async def get_request_context(
    current_user: User = Depends(get_current_active_user)
) -> RequestContext:
    """Build the request context for the authenticated user."""
    return RequestContext.for_user(current_user)


def require_context(permission: Permission):
    """Build the request context, but only for roles granted ``permission``."""
    async def context_dependency(
        current_user: User = Depends(require_permission(permission))
    ) -> RequestContext:
        return RequestContext.for_user(current_user)

    return context_dependency


async def get_request_client(request: Request) -> ClientInfo:
    """Extract client information from request."""
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Page size"),
    search: Optional[str] = Query(None, description="Search term"),
    sort_by: str = Query("timestamp", description="Field to sort by"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$", description="Sort order")
) -> PaginationParams:
    """
    Get pagination parameters from request query.

    Returns:
        PaginationParams object with extracted values
    """
    return PaginationParams(
        page=page,
        size=size,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order
    )

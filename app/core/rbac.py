# rbac.py
"""
Role-based access control with a small role hierarchy
and team-scoped resource checks.
"""
from enum import Enum
from typing import Set, Dict, Optional
from fastapi import HTTPException, status, Depends
from app.models.user import User
from app.core.auth import get_current_active_user
from app.core.logging import logger


class Role(Enum):
    """User roles."""
    ADMIN = "admin"
    PARTNER = "partner"
    FIELD_STAFF = "field_staff"


class Permission(Enum):
    """System permissions with resource-action structure."""
    # Teams
    READ_TEAM = "read_team"
    MANAGE_TEAMS = "manage_teams"

    # Accounts
    MANAGE_FIELD_STAFF = "manage_field_staff"
    READ_PARTNERS = "read_partners"
    MANAGE_PARTNERS = "manage_partners"

    # Ledger activity
    READ_EXPENSES = "read_expenses"
    READ_AMOUNT_REQUESTS = "read_amount_requests"
    PROCESS_AMOUNT_REQUESTS = "process_amount_requests"
    DOWNLOAD_ATTACHMENTS = "download_attachments"

    # Reporting and upkeep
    READ_DASHBOARD = "read_dashboard"
    READ_REPORTS = "read_reports"
    RUN_MAINTENANCE = "run_maintenance"
    READ_AUDIT = "read_audit"


# Higher roles inherit permissions of the roles listed here
ROLE_HIERARCHY: Dict[Role, Set[Role]] = {
    Role.ADMIN: {Role.PARTNER},
    Role.PARTNER: set(),
    Role.FIELD_STAFF: set(),
}

ROLE_PERMISSIONS: Dict[Role, Set[Permission]] = {
    Role.ADMIN: {
        Permission.MANAGE_PARTNERS,
        Permission.READ_AUDIT,
    },
    Role.PARTNER: {
        Permission.READ_TEAM, Permission.MANAGE_TEAMS,
        Permission.MANAGE_FIELD_STAFF, Permission.READ_PARTNERS,
        Permission.READ_EXPENSES, Permission.READ_AMOUNT_REQUESTS,
        Permission.PROCESS_AMOUNT_REQUESTS, Permission.DOWNLOAD_ATTACHMENTS,
        Permission.READ_DASHBOARD, Permission.READ_REPORTS,
        Permission.RUN_MAINTENANCE,
    },
    # Expense and request submission is checked by the services, which
    # accept field staff only.
    Role.FIELD_STAFF: {
        Permission.READ_TEAM,
        Permission.READ_PARTNERS,
        Permission.READ_EXPENSES,
        Permission.READ_AMOUNT_REQUESTS,
        Permission.DOWNLOAD_ATTACHMENTS,
    },
}


def get_effective_permissions(role: Role) -> Set[Permission]:
    """
    Get effective permissions for a role, including inherited permissions.

    Args:
        role: User role

    Returns:
        Set of permissions
    """
    permissions = set(ROLE_PERMISSIONS.get(role, set()))
    for inherited_role in ROLE_HIERARCHY.get(role, set()):
        permissions.update(get_effective_permissions(inherited_role))
    return permissions


def has_permission(user_role: Role, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in get_effective_permissions(user_role)


class ResourcePolicy:
    """Resource-based access control policies."""

    @staticmethod
    def can_access_team(user_role: Role, user_team_id: Optional[int], target_team_id: Optional[int]) -> bool:
        """
        Check if a user can read or act on a team's data.

        Admins and partners see every team; field staff only the team they
        are bound to.

        Args:
            user_role: User role
            user_team_id: The user's team binding
            target_team_id: Team being accessed

        Returns:
            True if access is allowed
        """
        if user_role in (Role.ADMIN, Role.PARTNER):
            return True
        return user_team_id is not None and user_team_id == target_team_id


def require_permission(permission: Permission):
    """
    Create a dependency to check if user has required permission.

    Args:
        permission: Required permission

    Returns:
        Dependency function
    """
    async def permission_dependency(current_user: User = Depends(get_current_active_user)) -> User:
        user_role = Role(current_user.role)
        if not has_permission(user_role, permission):
            logger.warning(
                f"Permission denied: User {current_user.username} ({user_role.value}) "
                f"attempted to access {permission.value}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return current_user

    return permission_dependency


# Permission dependencies used by the routers
can_manage_teams = require_permission(Permission.MANAGE_TEAMS)
can_manage_field_staff = require_permission(Permission.MANAGE_FIELD_STAFF)
can_manage_partners = require_permission(Permission.MANAGE_PARTNERS)
can_process_amount_requests = require_permission(Permission.PROCESS_AMOUNT_REQUESTS)
can_read_dashboard = require_permission(Permission.READ_DASHBOARD)
can_read_reports = require_permission(Permission.READ_REPORTS)
can_run_maintenance = require_permission(Permission.RUN_MAINTENANCE)
can_read_audit = require_permission(Permission.READ_AUDIT)

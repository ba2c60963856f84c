"""
Audit log endpoints, admin only.
"""
from typing import Optional
from datetime import datetime
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, or_, cast, String
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.deps import get_pagination_params
from app.core.exceptions import NotFoundError
from app.core.logging import logger
from app.core.rbac import can_read_audit
from app.db.session import get_db
from app.models.audit import AuditLog
from app.models.user import User
from app.schemas.audit import AuditLogResponse
from app.utils.pagination import PaginationParams, PaginatedResponse, paginate_query

router = APIRouter()


def _to_response(row) -> AuditLogResponse:
    audit_log, username = row
    return AuditLogResponse.model_validate(audit_log).model_copy(
        update={"username": username or "Unknown"}
    )


@router.get("", response_model=PaginatedResponse[AuditLogResponse])
async def get_audit_logs(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_read_audit),
    pagination: PaginationParams = Depends(get_pagination_params),
    action: Optional[str] = Query(None, description="Filter by action (CREATE, APPROVE, DELETE, ...)"),
    resource_type: Optional[str] = Query(None, description="Filter by resource type"),
    user_id: Optional[int] = Query(None, description="Filter by acting user ID"),
    start_date: Optional[datetime] = Query(None, description="Start date filter (ISO format)"),
    end_date: Optional[datetime] = Query(None, description="End date filter (ISO format)"),
):
    """
    Retrieve audit logs with filtering, search, and pagination.
    """
    logger.info(
        f"User {current_user.id} requesting audit logs | "
        f"Filters: action={action}, resource_type={resource_type}, user_id={user_id}, "
        f"start_date={start_date}, end_date={end_date}, search={pagination.search}"
    )

    stmt = select(AuditLog, User.username).outerjoin(User, AuditLog.user_id == User.id)
    if action:
        stmt = stmt.where(AuditLog.action == action)
    if resource_type:
        stmt = stmt.where(AuditLog.resource_type == resource_type)
    if user_id:
        stmt = stmt.where(AuditLog.user_id == user_id)
    if start_date:
        stmt = stmt.where(AuditLog.timestamp >= start_date)
    if end_date:
        stmt = stmt.where(AuditLog.timestamp <= end_date)
    if pagination.search:
        search_term = f"%{pagination.search}%"
        stmt = stmt.where(
            or_(
                AuditLog.resource_id.ilike(search_term),
                cast(AuditLog.details, String).ilike(search_term),
            )
        )

    return await paginate_query(db, stmt, pagination, model=AuditLog, transform=_to_response)


@router.get("/{log_id}", response_model=AuditLogResponse)
async def get_audit_log(
    log_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_read_audit),
):
    """Retrieve a specific audit log by ID."""
    row = (await db.execute(
        select(AuditLog, User.username)
        .outerjoin(User, AuditLog.user_id == User.id)
        .where(AuditLog.id == log_id)
    )).first()
    if row is None:
        raise NotFoundError("Audit log not found")
    return _to_response(row)

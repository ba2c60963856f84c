"""
Audit logging utilities.

This module provides the helper services use to record who changed what.
Audit rows are added to the caller's session and committed together with
the change they describe.
"""

from typing import Any, Dict, Optional
from datetime import datetime, date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.logging import logger
from app.models.audit import AuditLog


def serialize_for_json(obj: Any) -> Any:
    """
    Convert an object to a JSON-serializable format.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation of the object
    """
    if obj is None:
        return None
    if isinstance(obj, (int, float, str, bool)):
        return obj
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {str(k): serialize_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [serialize_for_json(item) for item in obj]
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    return str(obj)


async def log_action_async(
    db: AsyncSession,
    action: str,
    resource_type: str,
    resource_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> Optional[AuditLog]:
    """
    Add an audit log entry to the current transaction.

    Nothing is committed here; the entry is flushed with the caller's
    change and disappears with it on rollback.

    Args:
        db: Async database session
        action: Action performed
        resource_type: Type of resource affected
        resource_id: ID of the resource
        details: Additional details
        user_id: ID of the acting user
        ip_address: Client IP
        user_agent: User agent header

    Returns:
        The pending audit log, or None when audit logging is disabled
    """
    if not settings.enable_audit_logs:
        return None

    logger.debug(f"Recording audit log: {action} on {resource_type} by user {user_id}")

    audit_log = AuditLog(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        details=serialize_for_json(details) if details else None,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
    )
    db.add(audit_log)
    await db.flush()
    return audit_log

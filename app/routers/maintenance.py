"""
Data repair endpoints for rows written by older versions.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.logging import logger
from app.core.rbac import can_run_maintenance
from app.db.session import get_db
from app.models.user import User
from app.schemas.amount_request import MaintenanceResult
from app.services.amount_request import AmountRequestService
from app.services.report import ReportService

router = APIRouter()


@router.put("/fix-null-requests", response_model=MaintenanceResult)
async def fix_null_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_run_maintenance),
) -> MaintenanceResult:
    """Mark amount requests without a status as pending."""
    logger.info(f"Null status repair requested by: {current_user.username}")
    updated = await AmountRequestService.normalize_legacy_statuses(db)
    return MaintenanceResult(updated=updated)


@router.put("/fix-null-dates", response_model=MaintenanceResult)
async def fix_null_dates(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_run_maintenance),
) -> MaintenanceResult:
    """Stamp missing or epoch creation dates with the current time."""
    logger.info(f"Creation date repair requested by: {current_user.username}")
    updated = await ReportService.fix_null_dates(db)
    return MaintenanceResult(updated=updated)

"""
Dashboard API endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.logging import logger
from app.core.rbac import can_read_dashboard
from app.db.session import get_db
from app.models.user import User as UserModel
from app.schemas.report import LedgerStats
from app.services.ledger import LedgerService

router = APIRouter()


@router.get("/stats", response_model=LedgerStats)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(can_read_dashboard),
) -> LedgerStats:
    """
    Get ledger totals for the dashboard.

    Returns:
        Team count, total budget, used and remaining amounts and
        the number of pending requests
    """
    logger.info(f"Getting dashboard stats for {current_user.username}")
    return await LedgerService.aggregate(db)

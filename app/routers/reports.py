"""
Report API endpoints.
This module provides the partner comparison report and its CSV export.
"""
from typing import Optional
from datetime import date
from io import StringIO
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import ValidationError
from app.core.logging import logger
from app.core.rbac import can_read_reports
from app.db.session import get_db
from app.models.user import User
from app.schemas.report import PartnerReport
from app.services.report import ReportService

router = APIRouter()


async def _build_report(
    db: AsyncSession,
    partner1_id: Optional[int],
    partner2_id: Optional[int],
    from_date: Optional[date],
    to_date: Optional[date],
    team_id: Optional[int],
) -> PartnerReport:
    if partner1_id is None or partner2_id is None:
        raise ValidationError("Both partner1_id and partner2_id are required")
    return await ReportService.partner_report(
        db, partner1_id, partner2_id, from_date=from_date, to_date=to_date, team_id=team_id
    )


@router.get("", response_model=PartnerReport)
async def get_partner_report(
    partner1_id: Optional[int] = Query(None, description="First partner's user ID"),
    partner2_id: Optional[int] = Query(None, description="Second partner's user ID"),
    from_date: Optional[date] = Query(None, description="First day to include (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, description="Last day to include (YYYY-MM-DD)"),
    team_id: Optional[int] = Query(None, description="Restrict to one team"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_read_reports),
) -> PartnerReport:
    """
    Compare the budgets assigned and requests approved by two partners.

    Returns:
        Report rows newest first with per-partner totals
    """
    logger.info(f"Partner report requested by: {current_user.username}")
    return await _build_report(db, partner1_id, partner2_id, from_date, to_date, team_id)


@router.get("/export/csv")
async def export_partner_report_csv(
    partner1_id: Optional[int] = Query(None),
    partner2_id: Optional[int] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    team_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_read_reports),
) -> StreamingResponse:
    """Export the partner report as CSV."""
    report = await _build_report(db, partner1_id, partner2_id, from_date, to_date, team_id)
    output = StringIO(ReportService.partner_report_csv(report))
    filename = f"partner_report_{partner1_id}_vs_{partner2_id}.csv"
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )

"""
Pydantic schemas for the dashboard and the partner comparison report.
"""

from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from pydantic import BaseModel


class LedgerStats(BaseModel):
    """Totals across every team's ledger."""

    team_count: int
    total_initial: Decimal
    total_used: Decimal
    total_remaining: Decimal
    pending_request_count: int


class PartnerReportRow(BaseModel):
    date: Optional[datetime] = None
    description: str
    partner1_amount: Decimal
    partner2_amount: Decimal
    difference: Decimal
    type: str
    team_name: str
    category: str
    requested_by: Optional[str] = None


class PartnerReportTotals(BaseModel):
    partner1_total: Decimal
    partner2_total: Decimal
    total_difference: Decimal


class PartnerReportFilters(BaseModel):
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    team_id: Optional[int] = None


class PartnerReport(BaseModel):
    """Side-by-side allocations made by two partners."""

    partner1_name: str
    partner2_name: str
    data: List[PartnerReportRow]
    totals: PartnerReportTotals
    filters: PartnerReportFilters

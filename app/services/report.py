"""
Service layer for reports.

The partner report compares how much two partners have put into teams,
either as opening budgets or by approving amount requests.
"""

import csv
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from io import StringIO
from typing import List, Optional

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import logger
from app.models.amount_request import AmountRequest, RequestStatus
from app.models.expense import Expense
from app.models.team import Team
from app.models.user import User
from app.schemas.report import (
    PartnerReport,
    PartnerReportFilters,
    PartnerReportRow,
    PartnerReportTotals,
)
from app.utils.money import ZERO, money_sum, to_money

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

CSV_HEADER = [
    "Date", "Description", "Team", "Category", "Requested By",
    "Partner 1 Amount", "Partner 2 Amount", "Difference",
]


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _row(
    when: Optional[datetime],
    description: str,
    amount,
    by_user: Optional[int],
    partner1_id: int,
    partner2_id: int,
    kind: str,
    team_name: Optional[str],
    category: str,
    requested_by: Optional[str] = None,
) -> PartnerReportRow:
    value = to_money(amount)
    partner1_amount = value if by_user == partner1_id else ZERO
    partner2_amount = value if by_user == partner2_id else ZERO
    return PartnerReportRow(
        date=when,
        description=description,
        partner1_amount=partner1_amount,
        partner2_amount=partner2_amount,
        difference=abs(partner1_amount - partner2_amount),
        type=kind,
        team_name=team_name or "Unknown",
        category=category,
        requested_by=requested_by,
    )


def _opening_amount(team: Team, approved_total) -> Decimal:
    # Teams created before opening_amount existed: take back the top-ups
    if team.opening_amount is not None:
        return to_money(team.opening_amount)
    return to_money(team.initial_amount) - to_money(approved_total)


class ReportService:
    """Service class for report operations."""

    @staticmethod
    async def partner_report(
        db: AsyncSession,
        partner1_id: int,
        partner2_id: int,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        team_id: Optional[int] = None,
    ) -> PartnerReport:
        """
        Build the side-by-side allocation report for two partners.

        Args:
            db: Database session
            partner1_id: First partner's user ID
            partner2_id: Second partner's user ID
            from_date: First day to include
            to_date: Last day to include
            team_id: Restrict to one team

        Returns:
            Rows newest first plus per-partner totals; ``total_difference``
            is partner 1 minus partner 2
        """
        logger.info(
            f"Generating partner report for {partner1_id} vs {partner2_id} "
            f"({from_date} to {to_date}, team {team_id})"
        )
        partner_ids = [partner1_id, partner2_id]

        names = dict((await db.execute(
            select(User.id, User.full_name).where(User.id.in_(partner_ids))
        )).all())

        approved = (
            select(
                AmountRequest.team_id,
                func.sum(AmountRequest.requested_amount).label("approved_total"),
            )
            .where(AmountRequest.status == RequestStatus.APPROVED.value)
            .group_by(AmountRequest.team_id)
            .subquery()
        )
        teams_stmt = (
            select(Team, approved.c.approved_total)
            .outerjoin(approved, approved.c.team_id == Team.id)
            .where(Team.created_by.in_(partner_ids))
        )
        requests_stmt = (
            select(AmountRequest, Team.name, User.full_name)
            .outerjoin(Team, Team.id == AmountRequest.team_id)
            .outerjoin(User, User.id == AmountRequest.user_id)
            .where(
                AmountRequest.processed_by.in_(partner_ids),
                AmountRequest.status == RequestStatus.APPROVED.value,
            )
        )
        if from_date is not None:
            teams_stmt = teams_stmt.where(Team.created_at >= _day_start(from_date))
            requests_stmt = requests_stmt.where(AmountRequest.processed_at >= _day_start(from_date))
        if to_date is not None:
            end = _day_start(to_date + timedelta(days=1))
            teams_stmt = teams_stmt.where(Team.created_at < end)
            requests_stmt = requests_stmt.where(AmountRequest.processed_at < end)
        if team_id is not None:
            teams_stmt = teams_stmt.where(Team.id == team_id)
            requests_stmt = requests_stmt.where(AmountRequest.team_id == team_id)

        rows: List[PartnerReportRow] = []
        for team, approved_total in (await db.execute(teams_stmt)).all():
            rows.append(_row(
                team.created_at,
                f"Initial Amount Assigned to Team: {team.name}",
                _opening_amount(team, approved_total),
                team.created_by,
                partner1_id,
                partner2_id,
                "team_creation",
                team.name,
                "Team Budget Allocation",
            ))

        for request, team_name, requested_by in (await db.execute(requests_stmt)).all():
            rows.append(_row(
                request.processed_at or request.created_at,
                f"Approved Request: {request.reason}",
                request.requested_amount,
                request.processed_by,
                partner1_id,
                partner2_id,
                "request_approval",
                team_name,
                "Additional Amount Approval",
                requested_by=requested_by or "Unknown",
            ))

        rows.sort(key=lambda row: (row.date is not None, row.date), reverse=True)

        partner1_total = money_sum(row.partner1_amount for row in rows)
        partner2_total = money_sum(row.partner2_amount for row in rows)

        return PartnerReport(
            partner1_name=names.get(partner1_id) or "Partner 1",
            partner2_name=names.get(partner2_id) or "Partner 2",
            data=rows,
            totals=PartnerReportTotals(
                partner1_total=partner1_total,
                partner2_total=partner2_total,
                total_difference=partner1_total - partner2_total,
            ),
            filters=PartnerReportFilters(from_date=from_date, to_date=to_date, team_id=team_id),
        )

    @staticmethod
    def partner_report_csv(report: PartnerReport) -> str:
        """Render a partner report as CSV text with a totals line."""
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(["Partner 1", report.partner1_name, "Partner 2", report.partner2_name])
        writer.writerow(CSV_HEADER)
        for row in report.data:
            writer.writerow([
                row.date.strftime("%Y-%m-%d") if row.date else "",
                row.description,
                row.team_name,
                row.category,
                row.requested_by or "",
                f"{row.partner1_amount:.2f}",
                f"{row.partner2_amount:.2f}",
                f"{row.difference:.2f}",
            ])
        totals = report.totals
        writer.writerow([
            "", "TOTAL", "", "", "",
            f"{totals.partner1_total:.2f}",
            f"{totals.partner2_total:.2f}",
            f"{totals.total_difference:.2f}",
        ])
        return output.getvalue()

    @staticmethod
    async def fix_null_dates(db: AsyncSession) -> int:
        """
        Stamp missing or epoch ``created_at`` values with the current time.

        Returns:
            Number of rows updated across users, teams, expenses and requests
        """
        updated = 0
        for model in (Expense, Team, AmountRequest, User):
            result = await db.execute(
                update(model)
                .where(or_(model.created_at.is_(None), model.created_at == EPOCH))
                .values(created_at=func.now()),
                execution_options={"synchronize_session": False},
            )
            updated += result.rowcount or 0
        await db.commit()
        logger.info(f"Fixed {updated} rows with missing creation dates")
        return updated

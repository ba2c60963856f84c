"""
Service layer for team balances.

Every balance change is one guarded UPDATE, so the sufficiency check and the
write happen atomically in the database. Nothing here commits: callers run
these inside their own transaction and commit once.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import RequestContext
from app.core.exceptions import (
    ForbiddenError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from app.core.logging import logger
from app.core.rbac import ResourcePolicy
from app.models.amount_request import AmountRequest, RequestStatus
from app.models.team import Team
from app.schemas.report import LedgerStats
from app.utils.money import MAX_AMOUNT, ZERO, to_money


def _positive_amount(amount: Any) -> Decimal:
    value = to_money(amount)
    if value <= ZERO:
        raise ValidationError("Amount must be greater than zero")
    return value


class LedgerService:
    """Service class for team budget operations."""

    @staticmethod
    async def _reload(db: AsyncSession, team_id: int) -> Team:
        result = await db.execute(
            select(Team)
            .where(Team.id == team_id)
            .execution_options(populate_existing=True)
        )
        team = result.scalars().first()
        if team is None:
            raise NotFoundError("Team not found")
        return team

    @staticmethod
    async def debit(
        db: AsyncSession,
        ctx: RequestContext,
        team_id: int,
        amount: Any
    ) -> Team:
        """
        Move ``amount`` from a team's remaining balance to its used balance.

        Args:
            db: Database session; the caller owns the transaction
            ctx: Acting user
            team_id: Team to charge
            amount: Positive amount, quantised to cents

        Returns:
            The team with its new balances

        Raises:
            ValidationError: If the amount is not positive
            ForbiddenError: If field staff charge a team they are not bound to
            NotFoundError: If the team does not exist
            InsufficientFundsError: If the remaining balance is too small
        """
        value = _positive_amount(amount)

        if not ResourcePolicy.can_access_team(ctx.role, ctx.team_id, team_id):
            logger.warning(f"User {ctx.user_id} tried to debit team {team_id} outside their binding")
            raise ForbiddenError("Access denied to this team")

        # Rounding keeps REAL-backed storage (SQLite) on the cent grid
        result = await db.execute(
            update(Team)
            .where(
                Team.id == team_id,
                func.round(Team.remaining_amount - value, 2) >= 0,
            )
            .values(
                used_amount=func.round(Team.used_amount + value, 2),
                remaining_amount=func.round(Team.remaining_amount - value, 2),
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            team = await LedgerService._reload(db, team_id)
            logger.warning(
                f"Insufficient balance on team {team_id}: "
                f"requested {value}, remaining {team.remaining_amount}"
            )
            raise InsufficientFundsError()

        team = await LedgerService._reload(db, team_id)
        logger.info(f"Debited {value} from team {team_id}; remaining {team.remaining_amount}")
        return team

    @staticmethod
    async def credit(db: AsyncSession, team_id: int, amount: Any) -> Team:
        """
        Add ``amount`` to a team's initial and remaining balances.

        ``used_amount`` is left alone.

        Raises:
            ValidationError: If the amount is not positive or would push a
                balance past what the columns hold
            NotFoundError: If the team does not exist
        """
        value = _positive_amount(amount)

        result = await db.execute(
            update(Team)
            .where(
                Team.id == team_id,
                func.round(Team.initial_amount + value, 2) <= MAX_AMOUNT,
                func.round(Team.remaining_amount + value, 2) <= MAX_AMOUNT,
            )
            .values(
                initial_amount=func.round(Team.initial_amount + value, 2),
                remaining_amount=func.round(Team.remaining_amount + value, 2),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            team = await LedgerService._reload(db, team_id)
            logger.warning(
                f"Credit of {value} to team {team_id} would exceed {MAX_AMOUNT}; "
                f"initial {team.initial_amount}"
            )
            raise ValidationError(f"Team balance cannot exceed {MAX_AMOUNT}")

        team = await LedgerService._reload(db, team_id)
        logger.info(f"Credited {value} to team {team_id}; initial {team.initial_amount}")
        return team

    @staticmethod
    async def aggregate(db: AsyncSession) -> LedgerStats:
        """
        Summarise every team's ledger.

        Returns:
            Team count, balance totals and the number of pending requests
        """
        logger.debug("Aggregating ledger totals")
        totals = (await db.execute(
            select(
                func.count(Team.id),
                func.sum(Team.initial_amount),
                func.sum(Team.used_amount),
                func.sum(Team.remaining_amount),
            )
        )).one()
        pending = (await db.execute(
            select(func.count(AmountRequest.id))
            .where(AmountRequest.status == RequestStatus.PENDING.value)
        )).scalar()

        return LedgerStats(
            team_count=totals[0] or 0,
            total_initial=to_money(totals[1]),
            total_used=to_money(totals[2]),
            total_remaining=to_money(totals[3]),
            pending_request_count=pending or 0,
        )

    @staticmethod
    def check_invariant(team: Team) -> bool:
        """True when remaining equals initial minus used, to the cent."""
        return to_money(team.remaining_amount) == (
            to_money(team.initial_amount) - to_money(team.used_amount)
        )

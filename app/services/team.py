"""
Service layer for team operations.

This module contains the business logic for creating, listing and removing
teams. Balance changes after creation go through ``LedgerService``.
"""

from typing import List, Optional

from sqlalchemy import select, delete, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import ClientInfo, RequestContext
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.logging import logger
from app.core.rbac import ResourcePolicy
from app.db.audit import log_action_async
from app.models.amount_request import AmountRequest
from app.models.expense import Expense
from app.models.session import UserSession
from app.models.team import Team
from app.models.user import User, UserRole
from app.schemas.team import TeamCreate, TeamOverview
from app.services.ledger import LedgerService
from app.utils.money import ZERO, to_money

BULK = {"synchronize_session": False}


class TeamService:
    """Service class for team operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        ctx: RequestContext,
        team_in: TeamCreate,
        client: Optional[ClientInfo] = None,
    ) -> Team:
        """
        Create a team with its opening budget.

        Args:
            db: Database session
            ctx: Acting admin or partner, recorded as the creator
            team_in: Team creation data
            client: Client details for the audit log

        Returns:
            Created team with nothing spent yet
        """
        initial = to_money(team_in.initial_amount)
        if initial < ZERO:
            raise ValidationError("Initial amount cannot be negative")

        client = client or ClientInfo()
        logger.info(f"Creating team '{team_in.name}' with {initial} for user {ctx.user_id}")
        try:
            team = Team(
                name=team_in.name,
                location=team_in.location,
                description=team_in.description or "",
                initial_amount=initial,
                opening_amount=initial,
                used_amount=ZERO,
                remaining_amount=initial,
                created_by=ctx.user_id,
            )
            db.add(team)
            await db.flush()
            await log_action_async(
                db,
                action="CREATE",
                resource_type="TEAM",
                resource_id=team.id,
                details={"name": team.name, "initial_amount": initial},
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(team)
        logger.info(f"Created team with ID: {team.id}")
        return team

    @staticmethod
    async def get(db: AsyncSession, ctx: RequestContext, team_id: int) -> Team:
        """
        Get a team the caller may see.

        Raises:
            ForbiddenError: If field staff ask for a team other than their own
            NotFoundError: If the team does not exist
        """
        if not ResourcePolicy.can_access_team(ctx.role, ctx.team_id, team_id):
            raise ForbiddenError("Access denied to this team")
        team = (await db.execute(select(Team).where(Team.id == team_id))).scalars().first()
        if team is None:
            raise NotFoundError("Team not found")
        return team

    @staticmethod
    async def list_overview(db: AsyncSession) -> List[TeamOverview]:
        """List teams newest first with their field staff head count."""
        member_counts = (
            select(User.team_id, func.count(User.id).label("member_count"))
            .where(User.role == UserRole.FIELD_STAFF.value)
            .group_by(User.team_id)
            .subquery()
        )
        rows = (await db.execute(
            select(Team, member_counts.c.member_count)
            .outerjoin(member_counts, member_counts.c.team_id == Team.id)
            .order_by(Team.created_at.desc(), Team.id.desc())
        )).all()

        overview = []
        for team, member_count in rows:
            item = TeamOverview.model_validate(team)
            overview.append(item.model_copy(update={
                "member_count": member_count or 0,
                "balanced": LedgerService.check_invariant(team),
            }))
        return overview

    @staticmethod
    async def members(db: AsyncSession, team_id: int) -> List[User]:
        result = await db.execute(
            select(User)
            .where(User.team_id == team_id, User.role == UserRole.FIELD_STAFF.value)
            .order_by(User.full_name)
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(
        db: AsyncSession,
        ctx: RequestContext,
        team_id: int,
        client: Optional[ClientInfo] = None,
    ) -> None:
        """
        Delete a team that has never been charged.

        Its field staff (with their sessions) and its amount requests go
        with it. Other accounts pointing at the team are unbound.

        Raises:
            NotFoundError: If the team does not exist
            ValidationError: If the team has expenses
        """
        client = client or ClientInfo()
        try:
            team = (await db.execute(select(Team).where(Team.id == team_id))).scalars().first()
            if team is None:
                raise NotFoundError("Team not found")

            expense_count = (await db.execute(
                select(func.count(Expense.id)).where(Expense.team_id == team_id)
            )).scalar()
            if expense_count:
                raise ValidationError(
                    "Cannot delete team with existing expenses. Please remove all expenses first."
                )

            member_ids = select(User.id).where(
                User.team_id == team_id, User.role == UserRole.FIELD_STAFF.value
            )
            await db.execute(
                delete(AmountRequest).where(AmountRequest.team_id == team_id), execution_options=BULK
            )
            await db.execute(
                delete(UserSession).where(UserSession.user_id.in_(member_ids)), execution_options=BULK
            )
            removed = await db.execute(
                delete(User).where(User.team_id == team_id, User.role == UserRole.FIELD_STAFF.value),
                execution_options=BULK,
            )
            await db.execute(
                update(User).where(User.team_id == team_id).values(team_id=None), execution_options=BULK
            )
            await db.execute(delete(Team).where(Team.id == team_id), execution_options=BULK)

            await log_action_async(
                db,
                action="DELETE",
                resource_type="TEAM",
                resource_id=team_id,
                details={"name": team.name, "members_removed": removed.rowcount},
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Deleted team {team_id} and {removed.rowcount} members")

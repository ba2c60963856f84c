"""
Service layer for amount requests.

Field staff ask for additional funds; an admin or partner approves or
rejects each request exactly once. Approval and the resulting credit to the
team commit together.
"""

from typing import Any, List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.deps import ClientInfo, RequestContext
from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.core.logging import logger
from app.core.rbac import Role
from app.db.audit import log_action_async
from app.models.amount_request import AmountRequest, RequestStatus
from app.models.team import Team
from app.models.user import User
from app.schemas.amount_request import AmountRequestListItem
from app.services.ledger import LedgerService
from app.utils.money import ZERO, to_money


class AmountRequestService:
    """Service class for the amount request workflow."""

    @staticmethod
    async def submit(
        db: AsyncSession,
        ctx: RequestContext,
        requested_amount: Any,
        reason: str,
        client: Optional[ClientInfo] = None,
    ) -> AmountRequest:
        """
        Submit a request for additional funds for the caller's team.

        Args:
            db: Database session
            ctx: Acting user, who must be field staff bound to a team
            requested_amount: Positive amount
            reason: Free text justification
            client: Client details for the audit log

        Returns:
            The new request, always ``pending``

        Raises:
            ForbiddenError: If the user is not field staff
            ValidationError: If the user has no team or the amount is not positive
        """
        if not ctx.is_field_staff:
            raise ForbiddenError("Only field staff can request amounts")
        if ctx.team_id is None:
            raise ValidationError("You are not assigned to any team")
        value = to_money(requested_amount)
        if value <= ZERO:
            raise ValidationError("Requested amount must be greater than zero")

        client = client or ClientInfo()
        try:
            request = AmountRequest(
                team_id=ctx.team_id,
                user_id=ctx.user_id,
                requested_amount=value,
                reason=reason or "",
                status=RequestStatus.PENDING.value,
            )
            db.add(request)
            await db.flush()
            await log_action_async(
                db,
                action="CREATE",
                resource_type="AMOUNT_REQUEST",
                resource_id=request.id,
                details={"team_id": ctx.team_id, "requested_amount": value},
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(request)
        logger.info(f"Amount request {request.id} for {value} submitted by user {ctx.user_id}")
        return request

    @staticmethod
    async def _transition(
        db: AsyncSession,
        ctx: RequestContext,
        request_id: int,
        new_status: RequestStatus,
    ) -> AmountRequest:
        """Move a pending request to ``new_status`` or explain why it cannot."""
        if ctx.role not in (Role.ADMIN, Role.PARTNER):
            raise ForbiddenError("Only admins and partners can process requests")

        result = await db.execute(
            update(AmountRequest)
            .where(
                AmountRequest.id == request_id,
                AmountRequest.status == RequestStatus.PENDING.value,
            )
            .values(
                status=new_status.value,
                processed_at=func.now(),
                processed_by=ctx.user_id,
            )
            .execution_options(synchronize_session=False)
        )

        request = (await db.execute(
            select(AmountRequest)
            .where(AmountRequest.id == request_id)
            .execution_options(populate_existing=True)
        )).scalars().first()

        if request is None:
            raise NotFoundError("Amount request not found")
        if result.rowcount == 0:
            logger.warning(
                f"Request {request_id} is {request.status}; cannot mark it {new_status.value}"
            )
            raise InvalidStateError()
        return request

    @staticmethod
    async def approve(
        db: AsyncSession,
        ctx: RequestContext,
        request_id: int,
        client: Optional[ClientInfo] = None,
    ) -> AmountRequest:
        """
        Approve a pending request and credit its team.

        Raises:
            NotFoundError: If the request does not exist
            InvalidStateError: If the request is no longer pending
        """
        client = client or ClientInfo()
        try:
            request = await AmountRequestService._transition(
                db, ctx, request_id, RequestStatus.APPROVED
            )
            team = await LedgerService.credit(db, request.team_id, request.requested_amount)
            await log_action_async(
                db,
                action="APPROVE",
                resource_type="AMOUNT_REQUEST",
                resource_id=request.id,
                details={
                    "team_id": request.team_id,
                    "requested_amount": request.requested_amount,
                    "remaining_amount": team.remaining_amount,
                },
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(request)
        logger.info(f"Amount request {request_id} approved by user {ctx.user_id}")
        return request

    @staticmethod
    async def reject(
        db: AsyncSession,
        ctx: RequestContext,
        request_id: int,
        client: Optional[ClientInfo] = None,
    ) -> AmountRequest:
        """Reject a pending request. Balances are not touched."""
        client = client or ClientInfo()
        try:
            request = await AmountRequestService._transition(
                db, ctx, request_id, RequestStatus.REJECTED
            )
            await log_action_async(
                db,
                action="REJECT",
                resource_type="AMOUNT_REQUEST",
                resource_id=request.id,
                details={"team_id": request.team_id, "requested_amount": request.requested_amount},
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(request)
        logger.info(f"Amount request {request_id} rejected by user {ctx.user_id}")
        return request

    @staticmethod
    async def normalize_legacy_statuses(db: AsyncSession) -> int:
        """
        Set requests without a status to ``pending``.

        Returns:
            Number of rows updated
        """
        result = await db.execute(
            update(AmountRequest)
            .where(AmountRequest.status.is_(None))
            .values(status=RequestStatus.PENDING.value)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        if result.rowcount:
            logger.info(f"Normalized {result.rowcount} amount requests without a status")
        return result.rowcount or 0

    @staticmethod
    async def list_for(db: AsyncSession, ctx: RequestContext) -> List[AmountRequestListItem]:
        """List requests newest first; field staff see their own team only."""
        requester = aliased(User)
        processor = aliased(User)
        stmt = (
            select(AmountRequest, requester.full_name, Team.name, processor.full_name)
            .outerjoin(requester, requester.id == AmountRequest.user_id)
            .outerjoin(Team, Team.id == AmountRequest.team_id)
            .outerjoin(processor, processor.id == AmountRequest.processed_by)
            .order_by(AmountRequest.created_at.desc(), AmountRequest.id.desc())
        )
        if ctx.is_field_staff:
            stmt = stmt.where(AmountRequest.team_id == ctx.team_id)

        rows = (await db.execute(stmt)).all()
        items = []
        for request, user_name, team_name, processed_by_name in rows:
            item = AmountRequestListItem.model_validate(request)
            items.append(item.model_copy(update={
                "user_name": user_name or "Unknown",
                "team_name": team_name or "Unknown",
                "processed_by_name": (processed_by_name or "Unknown") if request.processed_by else None,
            }))
        return items

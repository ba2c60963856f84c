"""
Service layer for expense operations.

This module contains the business logic for recording expenses against a
team's budget and serving their receipts.
"""

from pathlib import Path
from typing import Any, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.core.deps import ClientInfo, RequestContext
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.logging import logger
from app.core.rbac import ResourcePolicy
from app.db.audit import log_action_async
from app.models.expense import Expense
from app.models.team import Team
from app.models.user import User
from app.schemas.expense import ExpenseListItem
from app.services.attachments import AttachmentStore, StoredAttachment
from app.services.ledger import LedgerService
from app.utils.money import to_money


class ExpenseService:
    """Service class for expense operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        ctx: RequestContext,
        description: str,
        amount: Any,
        category: Optional[str] = None,
        attachment: Optional[UploadFile] = None,
        client: Optional[ClientInfo] = None,
        store: Optional[AttachmentStore] = None,
    ) -> Expense:
        """
        Record an expense and charge it to the submitter's team.

        The attachment is written first. The debit, the expense row and its
        audit entry then commit together; if any step fails the transaction
        is rolled back and the stored file removed.

        Args:
            db: Database session
            ctx: Acting user, who must be field staff bound to a team
            description: What the money was spent on
            amount: Positive amount
            category: Expense category, ``general`` when blank
            attachment: Optional receipt upload
            client: Client details for the audit log
            store: Attachment store, the configured one by default

        Returns:
            Created expense

        Raises:
            ForbiddenError: If the user is not field staff
            ValidationError: If the user has no team or the input is invalid
            InsufficientFundsError: If the team balance is too small
        """
        if not ctx.is_field_staff:
            raise ForbiddenError("Only field staff can add expenses")
        if ctx.team_id is None:
            raise ValidationError("You are not assigned to any team")
        description = (description or "").strip()
        if not description:
            raise ValidationError("Description is required")
        value = to_money(amount)

        client = client or ClientInfo()
        stored: Optional[StoredAttachment] = None
        if attachment is not None and attachment.filename:
            store = store or AttachmentStore()
            stored = await store.save(attachment)

        try:
            await LedgerService.debit(db, ctx, ctx.team_id, value)

            expense = Expense(
                team_id=ctx.team_id,
                user_id=ctx.user_id,
                description=description,
                amount=value,
                category=(category or "").strip() or "general",
                attachment_path=stored.stored_name if stored else None,
                attachment_name=stored.original_name if stored else None,
            )
            db.add(expense)
            await db.flush()

            await log_action_async(
                db,
                action="CREATE",
                resource_type="EXPENSE",
                resource_id=expense.id,
                details={
                    "team_id": ctx.team_id,
                    "amount": value,
                    "category": expense.category,
                    "attachment": expense.attachment_path,
                },
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            if stored is not None:
                store.delete(stored.stored_name)
            raise

        await db.refresh(expense)
        logger.info(f"Created expense {expense.id} of {value} for team {ctx.team_id}")
        return expense

    @staticmethod
    async def list_for(db: AsyncSession, ctx: RequestContext) -> List[ExpenseListItem]:
        """
        List expenses newest first with submitter and team names.

        Field staff only see their own team's expenses.
        """
        logger.debug(f"Listing expenses for user {ctx.user_id} ({ctx.role.value})")
        submitter = aliased(User)
        stmt = (
            select(Expense, submitter.full_name, Team.name)
            .outerjoin(submitter, submitter.id == Expense.user_id)
            .outerjoin(Team, Team.id == Expense.team_id)
            .order_by(Expense.created_at.desc(), Expense.id.desc())
        )
        if ctx.is_field_staff:
            stmt = stmt.where(Expense.team_id == ctx.team_id)

        rows = (await db.execute(stmt)).all()
        return [
            ExpenseListItem.model_validate(expense).model_copy(
                update={"user_name": user_name or "Unknown", "team_name": team_name or "Unknown"}
            )
            for expense, user_name, team_name in rows
        ]

    @staticmethod
    async def get_attachment(
        db: AsyncSession,
        ctx: RequestContext,
        filename: str,
        store: Optional[AttachmentStore] = None,
    ) -> Tuple[Path, str]:
        """
        Find a stored receipt the user may download.

        Returns:
            The file path and the name to serve it under

        Raises:
            NotFoundError: If no expense references the file or it is gone from disk
            ForbiddenError: If field staff ask for another team's receipt
        """
        store = store or AttachmentStore()
        path = store.path_for(filename)

        expense = (await db.execute(
            select(Expense).where(Expense.attachment_path == filename)
        )).scalars().first()
        if expense is None:
            raise NotFoundError("File not found")
        if not ResourcePolicy.can_access_team(ctx.role, ctx.team_id, expense.team_id):
            logger.warning(f"User {ctx.user_id} denied attachment {filename} of team {expense.team_id}")
            raise ForbiddenError("Access denied")
        if not path.is_file():
            raise NotFoundError("File not found on server")

        return path, expense.attachment_name or filename

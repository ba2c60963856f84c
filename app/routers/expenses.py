"""
Expense API endpoints.
This module provides endpoints for recording expenses with optional
receipts and for downloading those receipts.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.deps import ClientInfo, RequestContext, get_request_client, get_request_context, require_context
from app.core.logging import logger
from app.core.rbac import Permission, require_permission
from app.db.session import get_db
from app.models.user import User
from app.schemas.expense import Expense, ExpenseListItem
from app.services.expense import ExpenseService

router = APIRouter()
download_router = APIRouter()


@router.get("", response_model=List[ExpenseListItem])
async def list_expenses(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_context(Permission.READ_EXPENSES)),
) -> List[ExpenseListItem]:
    """List expenses newest first; field staff see their own team only."""
    return await ExpenseService.list_for(db, ctx)


@router.post("", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def create_expense(
    description: str = Form(...),
    amount: str = Form(...),
    category: Optional[str] = Form(None),
    attachment: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
    client: ClientInfo = Depends(get_request_client),
) -> Expense:
    """
    Record an expense against the caller's team.

    Args:
        description: What the money was spent on
        amount: Amount as a decimal string
        category: Optional category, ``general`` when omitted
        attachment: Optional image or PDF receipt
        db: Database session
        ctx: Acting field staff member
        client: Client IP and user agent

    Returns:
        Created expense
    """
    logger.info(f"Expense of {amount} submitted by user {ctx.user_id}")
    return await ExpenseService.create(
        db,
        ctx,
        description=description,
        amount=amount,
        category=category,
        attachment=attachment,
        client=client,
    )


@download_router.get("/{filename}")
async def download_attachment(
    filename: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.DOWNLOAD_ATTACHMENTS)),
) -> FileResponse:
    """Download an expense receipt under its original file name."""
    path, download_name = await ExpenseService.get_attachment(
        db, RequestContext.for_user(current_user), filename
    )
    return FileResponse(path, filename=download_name)

"""
Amount request endpoints.
This module provides endpoints for submitting, listing and deciding
requests for additional team funds.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.deps import ClientInfo, RequestContext, get_request_client, get_request_context, require_context
from app.core.logging import logger
from app.core.rbac import Permission, can_process_amount_requests
from app.db.session import get_db
from app.models.user import User
from app.schemas.amount_request import AmountRequest, AmountRequestCreate, AmountRequestListItem
from app.services.amount_request import AmountRequestService

router = APIRouter()


@router.get("", response_model=List[AmountRequestListItem])
async def list_amount_requests(
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_context(Permission.READ_AMOUNT_REQUESTS)),
) -> List[AmountRequestListItem]:
    return await AmountRequestService.list_for(db, ctx)


@router.post("", response_model=AmountRequest, status_code=status.HTTP_201_CREATED)
async def submit_amount_request(
    request_in: AmountRequestCreate,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
    client: ClientInfo = Depends(get_request_client),
) -> AmountRequest:
    """
    Ask for additional funds for the caller's team.

    Returns:
        The pending request
    """
    return await AmountRequestService.submit(
        db, ctx, request_in.requested_amount, request_in.reason, client
    )


@router.put("/{request_id}/approve", response_model=AmountRequest)
async def approve_amount_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_process_amount_requests),
    client: ClientInfo = Depends(get_request_client),
) -> AmountRequest:
    """
    Approve a pending request and credit its team.

    A request that was already decided answers 409.
    """
    logger.info(f"Approval of request {request_id} by: {current_user.username}")
    return await AmountRequestService.approve(
        db, RequestContext.for_user(current_user), request_id, client
    )


@router.put("/{request_id}/reject", response_model=AmountRequest)
async def reject_amount_request(
    request_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_process_amount_requests),
    client: ClientInfo = Depends(get_request_client),
) -> AmountRequest:
    logger.info(f"Rejection of request {request_id} by: {current_user.username}")
    return await AmountRequestService.reject(
        db, RequestContext.for_user(current_user), request_id, client
    )

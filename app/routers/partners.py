"""
Partner account endpoints.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.deps import ClientInfo, RequestContext, get_request_client
from app.core.logging import logger
from app.core.rbac import Permission, can_manage_partners, require_permission
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import Created, Partner, PartnerCreate, Success
from app.services.user import UserService

router = APIRouter()


@router.get("", response_model=List[Partner])
async def list_partners(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.READ_PARTNERS)),
) -> List[Partner]:
    """List partner accounts ordered by full name."""
    return await UserService.list_partners(db)


@router.post("", response_model=Created, status_code=status.HTTP_201_CREATED)
async def create_partner(
    partner_in: PartnerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_partners),
    client: ClientInfo = Depends(get_request_client),
) -> Created:
    logger.info(f"Partner creation requested by: {current_user.username}")
    partner = await UserService.create_partner(
        db, RequestContext.for_user(current_user), partner_in, client
    )
    return Created(id=partner.id)


@router.delete("/{partner_id}", response_model=Success)
async def delete_partner(
    partner_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_partners),
    client: ClientInfo = Depends(get_request_client),
) -> Success:
    """Delete a partner account that has no expenses. Admin only."""
    await UserService.delete_partner(db, RequestContext.for_user(current_user), partner_id, client)
    return Success()

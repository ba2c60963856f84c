"""
User management endpoints for field staff accounts.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.deps import ClientInfo, RequestContext, get_request_client
from app.core.logging import logger
from app.core.rbac import can_manage_field_staff
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import Created, FieldStaffCreate, Success
from app.services.user import UserService

router = APIRouter()


@router.post("", response_model=Created, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: FieldStaffCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_field_staff),
    client: ClientInfo = Depends(get_request_client),
) -> Created:
    """
    Create a field staff account bound to a team.

    Args:
        user_in: Username, password, full name, email and team
        db: Database session
        current_user: Admin or partner creating the account
        client: Client IP and user agent

    Returns:
        The new user's ID
    """
    logger.info(f"Field staff creation requested by: {current_user.username}")
    user = await UserService.create_field_staff(
        db, RequestContext.for_user(current_user), user_in, client
    )
    return Created(id=user.id)


@router.delete("/{user_id}", response_model=Success)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_field_staff),
    client: ClientInfo = Depends(get_request_client),
) -> Success:
    """Delete a field staff account that has no expenses."""
    await UserService.delete_field_staff(db, RequestContext.for_user(current_user), user_id, client)
    return Success()

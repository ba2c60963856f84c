"""
Team API endpoints.
This module provides endpoints for creating, viewing and removing teams.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.logging import logger
from app.core.deps import ClientInfo, RequestContext, get_request_client, require_context
from app.core.rbac import Permission, can_manage_teams
from app.db.session import get_db
from app.models.user import User
from app.schemas.team import Team, TeamCreate, TeamOverview
from app.schemas.user import Success, TeamMember
from app.services.team import TeamService

router = APIRouter()


@router.get("", response_model=List[TeamOverview])
async def list_teams(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_teams),
) -> List[TeamOverview]:
    """List all teams newest first with their member counts."""
    return await TeamService.list_overview(db)


@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_in: TeamCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_teams),
    client: ClientInfo = Depends(get_request_client),
) -> Team:
    """
    Create a new team.

    Args:
        team_in: Name, location, opening budget and description
        db: Database session
        current_user: Admin or partner creating the team
        client: Client IP and user agent

    Returns:
        Created team
    """
    logger.info(f"Team creation requested by: {current_user.username}")
    return await TeamService.create(db, RequestContext.for_user(current_user), team_in, client)


@router.get("/{team_id}", response_model=Team)
async def get_team(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    ctx: RequestContext = Depends(require_context(Permission.READ_TEAM)),
) -> Team:
    """Get a team. Field staff can only read their own."""
    return await TeamService.get(db, ctx, team_id)


@router.get("/{team_id}/members", response_model=List[TeamMember])
async def get_team_members(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_teams),
) -> List[TeamMember]:
    return await TeamService.members(db, team_id)


@router.delete("/{team_id}", response_model=Success)
async def delete_team(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(can_manage_teams),
    client: ClientInfo = Depends(get_request_client),
) -> Success:
    """
    Delete a team together with its field staff and amount requests.

    Refused while the team has expenses.
    """
    logger.info(f"Team {team_id} deletion requested by: {current_user.username}")
    await TeamService.delete(db, RequestContext.for_user(current_user), team_id, client)
    return Success()

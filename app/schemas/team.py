"""
Pydantic schemas for teams.
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class TeamBase(BaseModel):
    """Base schema for team data."""

    name: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = ""


class TeamCreate(TeamBase):
    """Schema for creating a new team with its opening budget."""

    initial_amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class Team(TeamBase):
    """Schema for team response data."""

    id: int
    initial_amount: Decimal
    used_amount: Decimal
    remaining_amount: Decimal
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TeamOverview(Team):
    """A team as listed for admins and partners."""

    member_count: int = 0
    balanced: bool = True

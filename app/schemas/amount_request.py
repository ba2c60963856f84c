"""
Pydantic schemas for amount requests.

This module defines the request and response schemas for the top-up
request workflow.
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AmountRequestCreate(BaseModel):
    """Schema for submitting a request for additional funds."""

    requested_amount: Decimal = Field(..., max_digits=10, decimal_places=2)
    reason: str = Field("", max_length=2000)


class AmountRequest(BaseModel):
    """Schema for amount request response data."""

    id: int
    team_id: int
    user_id: int
    requested_amount: Decimal
    reason: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class AmountRequestListItem(AmountRequest):
    """A request enriched with the names a reviewer needs."""

    user_name: str = "Unknown"
    team_name: str = "Unknown"
    processed_by_name: Optional[str] = None


class MaintenanceResult(BaseModel):
    success: bool = True
    updated: int = 0

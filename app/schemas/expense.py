"""
Pydantic schemas for expenses.
"""

from typing import Optional
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class Expense(BaseModel):
    """Schema for expense response data."""

    id: int
    team_id: int
    user_id: int
    description: str
    amount: Decimal
    category: str
    attachment_path: Optional[str] = None
    attachment_name: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ExpenseListItem(Expense):
    user_name: str = "Unknown"
    team_name: str = "Unknown"

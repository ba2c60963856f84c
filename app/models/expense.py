"""
Expense model for FieldWorkBook.

This module defines the SQLAlchemy model for expenses, the append-only
record of money spent by field staff against their team's budget.
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.sql import func
from app.models.base import Base


class Expense(Base):
    """
    Expense model representing a single spend.

    Expenses are never updated once written. ``attachment_path`` is the
    stored file name inside the upload directory and ``attachment_name``
    the file name the client uploaded.
    """

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String(50), nullable=False, default="general")
    attachment_path = Column(String(255), nullable=True, index=True)
    attachment_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        """String representation of the Expense model."""
        return (
            f"<Expense(id={self.id}, "
            f"team_id={self.team_id}, "
            f"amount={self.amount})>"
        )

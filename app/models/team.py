"""
Team model for FieldWorkBook.

This module defines the SQLAlchemy model for teams, the budget-holding
units that field staff are assigned to.
"""

from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Text
from sqlalchemy.sql import func
from app.models.base import Base


class Team(Base):
    """
    Team model holding a running balance.

    ``remaining_amount`` is meant to equal ``initial_amount - used_amount``
    at rest. Only the ledger service writes the three monetary columns.
    """

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    location = Column(String(255), nullable=False)
    initial_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    used_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    remaining_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    # Budget at creation; initial_amount grows with approved requests
    opening_amount = Column(Numeric(10, 2), nullable=True)
    # users.team_id points back here, so this side is created via ALTER
    created_by = Column(
        Integer,
        ForeignKey("users.id", use_alter=True, name="fk_teams_created_by_users", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    description = Column(Text, nullable=True, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        """String representation of the Team model."""
        return (
            f"<Team(id={self.id}, "
            f"name='{self.name}', "
            f"initial_amount={self.initial_amount}, "
            f"remaining_amount={self.remaining_amount})>"
        )

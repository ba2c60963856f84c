"""
Amount request model for FieldWorkBook.

This module defines the SQLAlchemy model for requests for additional
funds raised by field staff and decided by admins or partners.
"""

from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Text
from sqlalchemy.sql import func
from app.models.base import Base


class RequestStatus(str, PyEnum):
    """Lifecycle states of an amount request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AmountRequest(Base):
    """
    Amount request model.

    Requests start ``pending`` and move once to ``approved`` or
    ``rejected``. The column stays nullable because rows written before
    the status existed carry NULL until ``normalize_legacy_statuses`` runs.
    """

    __tablename__ = "amount_requests"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    requested_amount = Column(Numeric(10, 2), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(String(20), nullable=True, default=RequestStatus.PENDING.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    processed_at = Column(DateTime(timezone=True), nullable=True)
    processed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    def __repr__(self) -> str:
        """String representation of the AmountRequest model."""
        return (
            f"<AmountRequest(id={self.id}, "
            f"team_id={self.team_id}, "
            f"requested_amount={self.requested_amount}, "
            f"status='{self.status}')>"
        )

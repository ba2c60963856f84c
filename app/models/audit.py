"""
Audit log model for tracking balance changes and account administration.

This module defines the SQLAlchemy model for audit logs, which record
every state-changing action in the system.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from app.models.base import Base


class AuditLog(Base):
    """
    Audit log model tracking system actions.

    Rows are written in the same transaction as the change they describe.
    """

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(50), nullable=False)  # CREATE, DEBIT, APPROVE, etc.
    resource_type = Column(String(50), nullable=False)  # TEAM, EXPENSE, etc.
    resource_id = Column(String(50), nullable=True)
    details = Column(JSON, nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(255), nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        """String representation of the AuditLog model."""
        return (
            f"<AuditLog(id={self.id}, action='{self.action}', "
            f"resource_type='{self.resource_type}', user_id={self.user_id})>"
        )

"""
Session model for user sessions.

This module defines the SQLAlchemy model for server-side login sessions.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.sql import func

from app.models.base import Base

class UserSession(Base):
    """
    User session model.

    One row per successful login. ``session_token`` is the ``jti`` claim of
    the access token handed out for it; a token is only honoured while its
    session row is active, so logging out revokes it.
    """

    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    session_token = Column(String(64), nullable=False, unique=True, index=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_activity = Column(DateTime(timezone=True), server_default=func.now())
    expires_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        """String representation of the UserSession model."""
        return f"<UserSession(id={self.id}, user_id={self.user_id}, token={self.session_token[:10]}...)"

"""
Authentication utilities for FastAPI.
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.core.security import TokenManager, utcnow
from app.db.session import get_db
from app.models.user import User
from app.models.session import UserSession
from app.core.logging import logger

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


async def resolve_token(db: AsyncSession, token: Optional[str]) -> Optional[User]:
    """
    Resolve a bearer token to its user.

    The token must decode and its ``jti`` must name an active, unexpired
    session belonging to the user named by ``sub``.

    Args:
        db: Database session
        token: Raw bearer token, possibly None

    Returns:
        The user, or None if the token is not usable
    """
    if not token:
        return None

    payload = TokenManager.verify_token(token)
    if payload is None:
        return None

    result = await db.execute(
        select(User, UserSession)
        .join(UserSession, UserSession.user_id == User.id)
        .where(
            UserSession.session_token == payload["jti"],
            UserSession.is_active.is_(True),
            UserSession.expires_at > utcnow(),
            User.username == payload["sub"],
        )
    )
    row = result.first()
    if row is None:
        logger.warning(f"No active session for token subject: {payload['sub']}")
        return None
    return row[0]


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> User:
    """
    Get the current authenticated user.

    Args:
        db: Database session
        token: JWT token

    Returns:
        Current user

    Raises:
        HTTPException: If authentication fails
    """
    user = await resolve_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get the current active user.

    Raises:
        HTTPException: If user is inactive
    """
    if not current_user.is_active:
        logger.warning(f"Inactive user attempted access: {current_user.username}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )
    return current_user


async def get_optional_user(
    db: AsyncSession = Depends(get_db),
    token: Optional[str] = Depends(optional_oauth2_scheme)
) -> Optional[User]:
    """Like ``get_current_active_user`` but returns None instead of raising."""
    user = await resolve_token(db, token)
    if user is None or not user.is_active:
        return None
    return user

"""
Authentication endpoints.
This module provides endpoints for logging in and out
and for checking the current session.
"""
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_db
from app.schemas.user import AuthCheck, LoginRequest, Success, Token, User as UserSchema, UserSummary
from app.models.user import User as UserModel
from app.services.user import UserService
from app.core.auth import get_current_active_user, get_optional_user, oauth2_scheme
from app.core.deps import ClientInfo, get_request_client
from app.core.logging import logger

router = APIRouter()


async def _issue_token(db: AsyncSession, username: str, password: str, client: ClientInfo) -> Token:
    logger.info(f"Login attempt for username: {username}")
    outcome = await UserService.login(db, username, password, client)
    if outcome is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token, user = outcome
    return Token(access_token=token, user=UserSummary.model_validate(user))


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    client: ClientInfo = Depends(get_request_client),
) -> Any:
    """
    Log in with a JSON body.

    Returns:
        Access token and the logged-in user
    """
    return await _issue_token(db, credentials.username, credentials.password, client)


@router.post("/token", response_model=Token)
async def login_for_access_token(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends(),
    client: ClientInfo = Depends(get_request_client),
) -> Any:
    """OAuth2 password flow, used by the interactive docs."""
    return await _issue_token(db, form_data.username, form_data.password, client)


@router.post("/logout", response_model=Success)
async def logout(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme),
    current_user: UserModel = Depends(get_current_active_user),
) -> Any:
    """End the current session; its token stops working."""
    await UserService.logout(db, token, current_user)
    return Success()


@router.get("/check", response_model=AuthCheck)
async def check(current_user: Optional[UserModel] = Depends(get_optional_user)) -> Any:
    """Report whether the caller has a valid session. Never fails with 401."""
    if current_user is None:
        return AuthCheck(authenticated=False)
    return AuthCheck(authenticated=True, user=UserSummary.model_validate(current_user))


@router.get("/me", response_model=UserSchema)
async def read_users_me(current_user: UserModel = Depends(get_current_active_user)) -> Any:
    return current_user

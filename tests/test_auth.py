"""
Tests for authentication endpoints.
"""

from datetime import timedelta

import pytest
from fastapi import status
from sqlalchemy import select, update

from app.core.security import TokenManager, utcnow
from app.models.audit import AuditLog
from app.models.session import UserSession
from app.models.user import User


@pytest.mark.asyncio
async def test_login_success(async_client, password, field_user, team):
    """Test successful JSON login."""
    response = await async_client.post(
        "/api/auth/login", json={"username": "field_one", "password": password}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["username"] == "field_one"
    assert data["user"]["role"] == "field_staff"
    assert data["user"]["team_id"] == team.id

    payload = TokenManager.verify_token(data["access_token"])
    assert payload["sub"] == "field_one"


@pytest.mark.asyncio
async def test_login_invalid_credentials(async_client, db_session, field_user):
    """Test login with a wrong password is refused and audited."""
    response = await async_client.post(
        "/api/auth/login", json={"username": "field_one", "password": "wrong-password"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid credentials"

    actions = (await db_session.execute(select(AuditLog.action))).scalars().all()
    assert actions == ["LOGIN_FAILED"]


@pytest.mark.asyncio
async def test_login_unknown_user(async_client, password):
    response = await async_client.post(
        "/api/auth/login", json={"username": "nobody", "password": password}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_login_inactive_user(async_client, password, db_session, field_user):
    await db_session.execute(update(User).where(User.id == field_user.id).values(is_active=False))
    await db_session.commit()

    response = await async_client.post(
        "/api/auth/login", json={"username": "field_one", "password": password}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_token_form_login(async_client, password, admin_user):
    """Test the OAuth2 password form endpoint."""
    response = await async_client.post(
        "/api/auth/token", data={"username": "admin", "password": password}
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_check_without_session(async_client):
    response = await async_client.get("/api/auth/check")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"authenticated": False, "user": None}


@pytest.mark.asyncio
async def test_check_with_bad_token(async_client):
    response = await async_client.get(
        "/api/auth/check", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.json()["authenticated"] is False


@pytest.mark.asyncio
async def test_check_and_me_with_session(async_client, login, partner_user):
    headers = await login("partner_one")

    response = await async_client.get("/api/auth/check", headers=headers)
    assert response.json()["authenticated"] is True
    assert response.json()["user"]["full_name"] == "Alice Partner"

    response = await async_client.get("/api/auth/me", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["username"] == "partner_one"
    assert data["is_active"] is True
    assert data["last_login"] is not None


@pytest.mark.asyncio
async def test_me_requires_token(async_client):
    response = await async_client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_logout_revokes_token(async_client, login, db_session, field_user):
    headers = await login("field_one")

    response = await async_client.post("/api/auth/logout", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True}

    response = await async_client.get("/api/auth/me", headers=headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    active = (await db_session.execute(
        select(UserSession.is_active).where(UserSession.user_id == field_user.id)
    )).scalars().all()
    assert active == [False]


@pytest.mark.asyncio
async def test_each_login_is_its_own_session(async_client, login, field_user):
    first = await login("field_one")
    second = await login("field_one")

    await async_client.post("/api/auth/logout", headers=first)

    response = await async_client.get("/api/auth/me", headers=second)
    assert response.status_code == status.HTTP_200_OK


@pytest.mark.asyncio
async def test_token_without_session_id_is_rejected():
    from jose import jwt

    from app.core.config import settings

    token = jwt.encode(
        {"sub": "field_one", "type": "access"},
        settings.security.secret_key_str,
        algorithm=settings.security.algorithm,
    )
    assert TokenManager.verify_token(token) is None


@pytest.mark.asyncio
async def test_expired_session_is_rejected(async_client, login, db_session, field_user):
    headers = await login("field_one")

    await db_session.execute(
        update(UserSession)
        .where(UserSession.user_id == field_user.id)
        .values(expires_at=utcnow() - timedelta(minutes=1))
    )
    await db_session.commit()

    response = await async_client.get("/api/auth/me", headers=headers)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = await async_client.get("/api/auth/check", headers=headers)
    assert response.json()["authenticated"] is False

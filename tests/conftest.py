"""
Configuration for pytest.

This module provides fixtures and configuration for running tests. The
application settings are pointed at a throwaway SQLite file and upload
directory before anything from ``app`` is imported.
"""

import os
import shutil
import tempfile
from decimal import Decimal
from pathlib import Path

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="fieldworkbook-tests-"))
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from app.core.deps import RequestContext
from app.core.rbac import Role
from app.core.security import PasswordManager
from app.db.session import AsyncSessionLocal, engine
from app.main import app
from app.models import Base, Team, User, UserRole
from app.utils.money import to_money

PASSWORD = "secret123"


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
async def setup_database():
    """Create fresh tables and an empty upload directory for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    shutil.rmtree(_TEST_ROOT / "uploads", ignore_errors=True)


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def upload_dir() -> Path:
    return _TEST_ROOT / "uploads"


@pytest.fixture
async def db_session():
    """Create a test database session."""
    async with AsyncSessionLocal() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def async_client():
    """Create an async test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def make_user():
    """Create a user in its own session so later rollbacks never expire it."""
    async def _make_user(username, role=UserRole.FIELD_STAFF, team_id=None, full_name=None):
        user = User(
            username=username,
            hashed_password=PasswordManager.get_password_hash(PASSWORD),
            full_name=full_name or username.replace("_", " ").title(),
            email=f"{username}@example.com",
            role=role.value,
            team_id=team_id,
        )
        async with AsyncSessionLocal() as session:
            session.add(user)
            await session.commit()
            await session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_team():
    async def _make_team(name="North Survey", initial="5000.00", created_by=None):
        amount = to_money(initial)
        team = Team(
            name=name,
            location="Field Office",
            initial_amount=amount,
            used_amount=Decimal("0.00"),
            remaining_amount=amount,
            created_by=created_by,
            description="",
        )
        async with AsyncSessionLocal() as session:
            session.add(team)
            await session.commit()
            await session.refresh(team)
        return team
    return _make_team


@pytest.fixture
def fetch_team(db_session):
    """Re-read a team from the database, bypassing the identity map."""
    async def _fetch_team(team_id):
        result = await db_session.execute(
            select(Team).where(Team.id == team_id).execution_options(populate_existing=True)
        )
        team = result.scalars().first()
        await db_session.commit()
        return team
    return _fetch_team


@pytest.fixture
async def admin_user(make_user):
    return await make_user("admin", role=UserRole.ADMIN, full_name="System Administrator")


@pytest.fixture
async def partner_user(make_user):
    return await make_user("partner_one", role=UserRole.PARTNER, full_name="Alice Partner")


@pytest.fixture
async def team(make_team, admin_user):
    return await make_team(created_by=admin_user.id)


@pytest.fixture
async def field_user(make_user, team):
    return await make_user("field_one", team_id=team.id, full_name="Frank Field")


@pytest.fixture
def ctx_for():
    def _ctx_for(user):
        return RequestContext(user_id=user.id, role=Role(user.role), team_id=user.team_id)
    return _ctx_for


@pytest.fixture
def login(async_client):
    """Log a user in through the API and return bearer headers."""
    async def _login(username, password=PASSWORD):
        response = await async_client.post(
            "/api/auth/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _login

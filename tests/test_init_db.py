"""
Tests for database bootstrap.
"""

from decimal import Decimal

import pytest
from pydantic import SecretStr
from sqlalchemy import func, insert, select

from app.core.config import settings
from app.db.init_db import init_db, seed_admin
from app.models.amount_request import AmountRequest
from app.models.user import User, UserRole
from app.services.user import UserService


@pytest.mark.asyncio
async def test_seed_admin_skipped_without_password(db_session):
    assert await seed_admin(db_session) is False
    assert (await db_session.execute(select(func.count(User.id)))).scalar() == 0


@pytest.mark.asyncio
async def test_seed_admin_runs_once(db_session, monkeypatch):
    monkeypatch.setattr(settings, "admin_password", SecretStr("bootstrap-pass"))

    assert await seed_admin(db_session) is True
    assert await seed_admin(db_session) is False

    admin = await UserService.authenticate(db_session, "admin", "bootstrap-pass")
    assert admin is not None
    assert admin.role == UserRole.ADMIN.value


@pytest.mark.asyncio
async def test_init_db_normalizes_legacy_requests(db_session, field_user):
    await db_session.execute(insert(AmountRequest).values(
        team_id=field_user.team_id,
        user_id=field_user.id,
        requested_amount=Decimal("20.00"),
        reason="before statuses",
        status=None,
    ))
    await db_session.commit()

    await init_db()

    statuses = (await db_session.execute(select(AmountRequest.status))).scalars().all()
    assert statuses == ["pending"]

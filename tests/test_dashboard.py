"""
Tests for dashboard endpoints.
"""

from decimal import Decimal

import pytest
from fastapi import status

from app.services.amount_request import AmountRequestService
from app.services.ledger import LedgerService


@pytest.mark.asyncio
async def test_dashboard_stats(async_client, login, db_session, make_team, field_user, team, partner_user, ctx_for):
    """Test the totals reflect every team, spend and pending request."""
    await make_team(name="South Survey", initial="1500.25")
    await LedgerService.debit(db_session, ctx_for(field_user), team.id, "500.00")
    await db_session.commit()
    await AmountRequestService.submit(db_session, ctx_for(field_user), "90.00", "Batteries")

    headers = await login("partner_one")
    response = await async_client.get("/api/dashboard/stats", headers=headers)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert set(data) == {
        "team_count", "total_initial", "total_used", "total_remaining", "pending_request_count"
    }
    assert data["team_count"] == 2
    assert Decimal(data["total_initial"]) == Decimal("6500.25")
    assert Decimal(data["total_used"]) == Decimal("500.00")
    assert Decimal(data["total_remaining"]) == Decimal("6000.25")
    assert data["pending_request_count"] == 1


@pytest.mark.asyncio
async def test_dashboard_stats_empty(async_client, login, admin_user):
    headers = await login("admin")
    response = await async_client.get("/api/dashboard/stats", headers=headers)

    data = response.json()
    assert data["team_count"] == 0
    assert Decimal(data["total_initial"]) == Decimal("0")
    assert data["pending_request_count"] == 0


@pytest.mark.asyncio
async def test_dashboard_forbidden_for_field_staff(async_client, login, field_user):
    headers = await login("field_one")
    response = await async_client.get("/api/dashboard/stats", headers=headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_dashboard_requires_authentication(async_client):
    response = await async_client.get("/api/dashboard/stats")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

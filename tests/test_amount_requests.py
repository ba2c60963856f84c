"""
Tests for the amount request workflow.
"""

from decimal import Decimal

import pytest
from fastapi import status
from sqlalchemy import insert, select

from app.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.models.amount_request import AmountRequest, RequestStatus
from app.models.audit import AuditLog
from app.services.amount_request import AmountRequestService
from app.services.ledger import LedgerService


async def add_legacy_request(db, user, amount):
    """Insert a request the way older versions did, without a status."""
    await db.execute(insert(AmountRequest).values(
        team_id=user.team_id,
        user_id=user.id,
        requested_amount=Decimal(amount),
        reason="legacy",
        status=None,
    ))
    await db.commit()


@pytest.mark.asyncio
async def test_submit_starts_pending(db_session, field_user, ctx_for):
    request = await AmountRequestService.submit(db_session, ctx_for(field_user), "750.00", "Fuel")

    assert request.status == RequestStatus.PENDING.value
    assert request.team_id == field_user.team_id
    assert request.requested_amount == Decimal("750.00")
    assert request.processed_at is None


@pytest.mark.asyncio
async def test_only_field_staff_with_a_team_can_submit(db_session, partner_user, make_user, ctx_for):
    with pytest.raises(ForbiddenError):
        await AmountRequestService.submit(db_session, ctx_for(partner_user), "10.00", "x")

    unbound = await make_user("floating")
    with pytest.raises(ValidationError, match="not assigned"):
        await AmountRequestService.submit(db_session, ctx_for(unbound), "10.00", "x")


@pytest.mark.asyncio
async def test_submit_rejects_non_positive_amount(db_session, field_user, ctx_for):
    with pytest.raises(ValidationError):
        await AmountRequestService.submit(db_session, ctx_for(field_user), "0.00", "nothing")


@pytest.mark.asyncio
async def test_approve_twice_credits_once(db_session, field_user, partner_user, team, ctx_for, fetch_team):
    request = await AmountRequestService.submit(db_session, ctx_for(field_user), "2000.00", "Tools")

    approved = await AmountRequestService.approve(db_session, ctx_for(partner_user), request.id)
    assert approved.status == RequestStatus.APPROVED.value
    assert approved.processed_by == partner_user.id
    assert approved.processed_at is not None

    with pytest.raises(InvalidStateError):
        await AmountRequestService.approve(db_session, ctx_for(partner_user), request.id)

    stored = await fetch_team(team.id)
    assert stored.initial_amount == Decimal("7000.00")
    assert stored.remaining_amount == Decimal("7000.00")


@pytest.mark.asyncio
async def test_reject_requires_pending(db_session, field_user, admin_user, ctx_for):
    request = await AmountRequestService.submit(db_session, ctx_for(field_user), "100.00", "Food")
    await AmountRequestService.approve(db_session, ctx_for(admin_user), request.id)

    with pytest.raises(InvalidStateError):
        await AmountRequestService.reject(db_session, ctx_for(admin_user), request.id)


@pytest.mark.asyncio
async def test_processing_unknown_request(db_session, admin_user, ctx_for):
    with pytest.raises(NotFoundError):
        await AmountRequestService.approve(db_session, ctx_for(admin_user), 4242)
    with pytest.raises(NotFoundError):
        await AmountRequestService.reject(db_session, ctx_for(admin_user), 4242)


@pytest.mark.asyncio
async def test_field_staff_cannot_approve(db_session, field_user, ctx_for):
    request = await AmountRequestService.submit(db_session, ctx_for(field_user), "100.00", "Food")
    with pytest.raises(ForbiddenError):
        await AmountRequestService.approve(db_session, ctx_for(field_user), request.id)


@pytest.mark.asyncio
async def test_budget_scenario(db_session, field_user, partner_user, team, ctx_for, fetch_team):
    """5000 initial, spend 1200, approve 2000, reject 500."""
    staff = ctx_for(field_user)
    reviewer = ctx_for(partner_user)

    await LedgerService.debit(db_session, staff, team.id, "1200.00")
    await db_session.commit()

    top_up = await AmountRequestService.submit(db_session, staff, "2000.00", "Second phase")
    await AmountRequestService.approve(db_session, reviewer, top_up.id)

    stored = await fetch_team(team.id)
    assert (stored.initial_amount, stored.used_amount, stored.remaining_amount) == (
        Decimal("7000.00"), Decimal("1200.00"), Decimal("5800.00")
    )

    extra = await AmountRequestService.submit(db_session, staff, "500.00", "Extras")
    rejected = await AmountRequestService.reject(db_session, reviewer, extra.id)
    assert rejected.status == RequestStatus.REJECTED.value

    stored = await fetch_team(team.id)
    assert (stored.initial_amount, stored.used_amount, stored.remaining_amount) == (
        Decimal("7000.00"), Decimal("1200.00"), Decimal("5800.00")
    )
    assert LedgerService.check_invariant(stored)


@pytest.mark.asyncio
async def test_normalize_legacy_statuses(db_session, field_user):
    await add_legacy_request(db_session, field_user, "50.00")

    assert await AmountRequestService.normalize_legacy_statuses(db_session) == 1
    assert await AmountRequestService.normalize_legacy_statuses(db_session) == 0

    statuses = (await db_session.execute(select(AmountRequest.status))).scalars().all()
    assert statuses == [RequestStatus.PENDING.value]


@pytest.mark.asyncio
async def test_approval_is_audited(db_session, field_user, admin_user, ctx_for):
    request = await AmountRequestService.submit(db_session, ctx_for(field_user), "80.00", "Water")
    await AmountRequestService.approve(db_session, ctx_for(admin_user), request.id)

    actions = (await db_session.execute(
        select(AuditLog.action).where(AuditLog.resource_type == "AMOUNT_REQUEST").order_by(AuditLog.id)
    )).scalars().all()
    assert actions == ["CREATE", "APPROVE"]


@pytest.mark.asyncio
async def test_api_workflow(async_client, login, field_user, partner_user, team):
    staff_headers = await login("field_one")
    partner_headers = await login("partner_one")

    response = await async_client.post(
        "/api/amount-requests",
        json={"requested_amount": "300.00", "reason": "Generator fuel"},
        headers=staff_headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    request_id = response.json()["id"]

    response = await async_client.post(
        "/api/amount-requests",
        json={"requested_amount": "300.00", "reason": "Nope"},
        headers=partner_headers,
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Only field staff can request amounts"

    response = await async_client.put(f"/api/amount-requests/{request_id}/approve", headers=staff_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await async_client.put(f"/api/amount-requests/{request_id}/approve", headers=partner_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "approved"

    response = await async_client.put(f"/api/amount-requests/{request_id}/approve", headers=partner_headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"] == "Invalid request or request already processed"

    response = await async_client.get("/api/amount-requests", headers=staff_headers)
    items = response.json()
    assert len(items) == 1
    assert items[0]["user_name"] == "Frank Field"
    assert items[0]["team_name"] == "North Survey"
    assert items[0]["processed_by_name"] == "Alice Partner"

    response = await async_client.get(f"/api/teams/{team.id}", headers=staff_headers)
    assert Decimal(response.json()["remaining_amount"]) == Decimal("5300.00")


@pytest.mark.asyncio
async def test_fix_null_requests_endpoint(async_client, login, db_session, admin_user, field_user):
    await add_legacy_request(db_session, field_user, "5.00")

    headers = await login("admin")
    response = await async_client.put("/api/fix-null-requests", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "updated": 1}

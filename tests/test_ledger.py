"""
Tests for team balance operations.
"""

import asyncio
from decimal import Decimal

import pytest

from app.core.deps import RequestContext
from app.core.exceptions import (
    ForbiddenError,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)
from app.core.rbac import Role
from app.db.session import AsyncSessionLocal
from app.services.ledger import LedgerService


@pytest.mark.asyncio
async def test_debit_moves_amount_from_remaining_to_used(db_session, team, field_user, ctx_for, fetch_team):
    """Test a debit keeps remaining == initial - used."""
    updated = await LedgerService.debit(db_session, ctx_for(field_user), team.id, "1200.00")
    await db_session.commit()

    assert updated.initial_amount == Decimal("5000.00")
    assert updated.used_amount == Decimal("1200.00")
    assert updated.remaining_amount == Decimal("3800.00")

    stored = await fetch_team(team.id)
    assert LedgerService.check_invariant(stored)


@pytest.mark.asyncio
async def test_overdraft_is_refused_and_changes_nothing(db_session, team, field_user, ctx_for, fetch_team):
    with pytest.raises(InsufficientFundsError):
        await LedgerService.debit(db_session, ctx_for(field_user), team.id, "5000.01")
    await db_session.rollback()

    stored = await fetch_team(team.id)
    assert stored.initial_amount == Decimal("5000.00")
    assert stored.used_amount == Decimal("0.00")
    assert stored.remaining_amount == Decimal("5000.00")


@pytest.mark.asyncio
async def test_debit_of_exact_remaining_leaves_zero(db_session, make_team, make_user, ctx_for, fetch_team):
    team = await make_team(initial="100.00")
    user = await make_user("exact_spender", team_id=team.id)
    ctx = ctx_for(user)

    await LedgerService.debit(db_session, ctx, team.id, "30.10")
    await LedgerService.debit(db_session, ctx, team.id, "69.90")
    await db_session.commit()

    stored = await fetch_team(team.id)
    assert stored.remaining_amount == Decimal("0.00")
    assert stored.used_amount == Decimal("100.00")

    with pytest.raises(InsufficientFundsError):
        await LedgerService.debit(db_session, ctx, team.id, "0.01")
    await db_session.rollback()


@pytest.mark.asyncio
async def test_credit_raises_initial_and_remaining(db_session, team, field_user, ctx_for, fetch_team):
    await LedgerService.debit(db_session, ctx_for(field_user), team.id, "1000.00")
    await LedgerService.credit(db_session, team.id, "250.50")
    await db_session.commit()

    stored = await fetch_team(team.id)
    assert stored.initial_amount == Decimal("5250.50")
    assert stored.used_amount == Decimal("1000.00")
    assert stored.remaining_amount == Decimal("4250.50")
    assert LedgerService.check_invariant(stored)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", ["0", "-5.00", "not-a-number"])
async def test_non_positive_or_invalid_amounts_are_rejected(db_session, team, field_user, ctx_for, amount):
    with pytest.raises(ValidationError):
        await LedgerService.debit(db_session, ctx_for(field_user), team.id, amount)
    with pytest.raises(ValidationError):
        await LedgerService.credit(db_session, team.id, amount)


@pytest.mark.asyncio
async def test_missing_team(db_session, admin_user, ctx_for):
    with pytest.raises(NotFoundError):
        await LedgerService.debit(db_session, ctx_for(admin_user), 9999, "10.00")
    with pytest.raises(NotFoundError):
        await LedgerService.credit(db_session, 9999, "10.00")


@pytest.mark.asyncio
async def test_field_staff_cannot_debit_another_team(db_session, make_team, field_user, ctx_for, fetch_team):
    other = await make_team(name="South Survey", initial="800.00")

    with pytest.raises(ForbiddenError):
        await LedgerService.debit(db_session, ctx_for(field_user), other.id, "10.00")

    stored = await fetch_team(other.id)
    assert stored.remaining_amount == Decimal("800.00")


@pytest.mark.asyncio
async def test_concurrent_debits_never_overdraw(team, field_user, fetch_team):
    """Four debits of 1250.01 against 5000.00: at most three can succeed."""
    ctx = RequestContext(user_id=field_user.id, role=Role.FIELD_STAFF, team_id=team.id)

    async def attempt() -> bool:
        async with AsyncSessionLocal() as session:
            try:
                await LedgerService.debit(session, ctx, team.id, "1250.01")
                await session.commit()
                return True
            except InsufficientFundsError:
                await session.rollback()
                return False

    results = await asyncio.gather(*(attempt() for _ in range(4)))

    assert results.count(True) == 3
    stored = await fetch_team(team.id)
    assert stored.remaining_amount == Decimal("1249.97")
    assert stored.used_amount == Decimal("3750.03")
    assert LedgerService.check_invariant(stored)


@pytest.mark.asyncio
async def test_credit_past_column_capacity_is_refused(db_session, make_team, fetch_team):
    big = await make_team(name="Reserve", initial="99999999.00")

    with pytest.raises(ValidationError):
        await LedgerService.credit(db_session, big.id, "1.00")
    await db_session.rollback()

    await LedgerService.credit(db_session, big.id, "0.99")
    await db_session.commit()

    stored = await fetch_team(big.id)
    assert stored.initial_amount == Decimal("99999999.99")
    assert stored.remaining_amount == Decimal("99999999.99")


@pytest.mark.asyncio
async def test_aggregate_totals(db_session, make_team, field_user, team, ctx_for):
    await make_team(name="South Survey", initial="1000.00")
    await LedgerService.debit(db_session, ctx_for(field_user), team.id, "400.00")
    await db_session.commit()

    stats = await LedgerService.aggregate(db_session)

    assert stats.team_count == 2
    assert stats.total_initial == Decimal("6000.00")
    assert stats.total_used == Decimal("400.00")
    assert stats.total_remaining == Decimal("5600.00")
    assert stats.pending_request_count == 0

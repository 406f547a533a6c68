"""
Tests for payment status changes and materialization.

Covers:
- mark_paid / mark_pending on stored rows, and NotFound on virtual ones
- Shared link scope checks and the anonymous actor
- Materialization locking in hours and amount
- Uniqueness under concurrent writers
"""

import asyncio

import pytest

from paydesk.core.config import settings
from paydesk.core.errors import NotFound, ScopeMismatch, Unauthorized, ValidationError
from paydesk.models.payment import PaymentStatus, RowState
from paydesk.models.period import PayPeriod
from paydesk.models.scope import Credentials
from paydesk.services.ledger_service import LedgerService


@pytest.fixture
def materialized(test_db, make_user, log_hours, manager_credentials):
    """A user with 20h at $25 in March 2026 P1, already stored."""
    async def _materialized():
        user_id = await make_user("Ana", hourly_rate=25, bank_details={"account_number": "42"})
        await log_hours(user_id, "2026-03-02", 20)
        await LedgerService.materialize(user_id, "P1", 3, 2026, manager_credentials)
        return user_id
    return _materialized


@pytest.mark.asyncio
class TestMarkPaid:
    """Test LedgerService.mark_paid."""

    async def test_marks_paid_with_actor(self, test_db, materialized, finance_credentials):
        user_id = await materialized()

        record = await LedgerService.mark_paid(user_id, "P1", 3, 2026, "Fin Ops", finance_credentials)

        assert record.status == PaymentStatus.PAID
        assert record.paid_by == "Fin Ops"
        assert record.paid_at is not None
        assert record.amount == 500
        assert record.state == RowState.PERSISTED
        assert record.has_bank_details is True

    async def test_actor_defaults_to_session_name(self, test_db, materialized, manager_credentials):
        user_id = await materialized()

        record = await LedgerService.mark_paid(user_id, "P1", 3, 2026, None, manager_credentials)

        assert record.paid_by == "Maya Manager"

    async def test_virtual_row_is_not_found(self, test_db, make_user, log_hours, manager_credentials):
        """Hours alone do not make a row; mutation never creates one."""
        user_id = await make_user("Ana", hourly_rate=25)
        await log_hours(user_id, "2026-03-02", 20)

        with pytest.raises(NotFound):
            await LedgerService.mark_paid(user_id, "P1", 3, 2026, "Fin Ops", manager_credentials)
        assert await test_db["payments"].count_documents({}) == 0

    async def test_paid_twice_restamps(self, test_db, materialized, manager_credentials):
        user_id = await materialized()

        first = await LedgerService.mark_paid(user_id, "P1", 3, 2026, "A", manager_credentials)
        second = await LedgerService.mark_paid(user_id, "P1", 3, 2026, "B", manager_credentials)

        assert second.status == PaymentStatus.PAID
        assert second.paid_by == "B"
        assert second.paid_at >= first.paid_at
        assert await test_db["payments"].count_documents({}) == 1

    async def test_developer_cannot_mark_paid(self, test_db, materialized, developer_credentials):
        user_id = await materialized()

        with pytest.raises(Unauthorized):
            await LedgerService.mark_paid(user_id, "P1", 3, 2026, "Dev", developer_credentials)

    async def test_full_is_not_a_payable_period(self, test_db, manager_credentials):
        with pytest.raises(ValidationError):
            await LedgerService.mark_paid("u1", "FULL", 3, 2026, "A", manager_credentials)

    async def test_token_actor_is_the_shared_link_sentinel(self, test_db, materialized, mint_token):
        user_id = await materialized()
        token = await mint_token(3, 2026, PayPeriod.P1)

        record = await LedgerService.mark_paid(
            user_id, "P1", 3, 2026, "Somebody Real", Credentials(token=token)
        )

        assert record.paid_by == settings.SHARED_LINK_ACTOR == "Shared Link"

    async def test_token_for_other_period_is_refused(self, test_db, materialized, mint_token):
        user_id = await materialized()
        token = await mint_token(3, 2026, PayPeriod.P2)

        with pytest.raises(ScopeMismatch):
            await LedgerService.mark_paid(user_id, "P1", 3, 2026, None, Credentials(token=token))

        stored = await test_db["payments"].find_one({"user_id": user_id})
        assert stored["status"] == "pending"


@pytest.mark.asyncio
class TestMarkPending:
    """Test LedgerService.mark_pending."""

    async def test_paid_then_pending_clears_stamp(self, test_db, materialized, manager_credentials):
        user_id = await materialized()
        await LedgerService.mark_paid(user_id, "P1", 3, 2026, "Fin Ops", manager_credentials)

        record = await LedgerService.mark_pending(user_id, "P1", 3, 2026, manager_credentials)

        assert record.status == PaymentStatus.PENDING
        assert record.paid_at is None
        assert record.paid_by is None
        stored = await test_db["payments"].find_one({"user_id": user_id})
        assert "paid_at" not in stored
        assert "paid_by" not in stored

    async def test_pending_on_pending_is_a_no_op(self, test_db, materialized, manager_credentials):
        user_id = await materialized()

        record = await LedgerService.mark_pending(user_id, "P1", 3, 2026, manager_credentials)

        assert record.status == PaymentStatus.PENDING
        assert record.amount == 500

    async def test_virtual_row_is_not_found(self, test_db, make_user, log_hours, manager_credentials):
        user_id = await make_user("Ana")
        await log_hours(user_id, "2026-03-02", 4)

        with pytest.raises(NotFound):
            await LedgerService.mark_pending(user_id, "P1", 3, 2026, manager_credentials)

    async def test_scenario_token_for_p1_cannot_touch_p2(self, test_db, make_user, log_hours, mint_token, manager_credentials):
        """A token minted for (3, 2026, P1) used on P2 fails with ScopeMismatch."""
        user_id = await make_user("Ana", hourly_rate=25)
        await log_hours(user_id, "2026-03-20", 8)
        await LedgerService.materialize(user_id, "P2", 3, 2026, manager_credentials)
        await LedgerService.mark_paid(user_id, "P2", 3, 2026, "Fin Ops", manager_credentials)
        token = await mint_token(3, 2026, PayPeriod.P1)

        with pytest.raises(ScopeMismatch):
            await LedgerService.mark_pending(user_id, "P2", 3, 2026, Credentials(token=token))

        stored = await test_db["payments"].find_one({"user_id": user_id, "period": "P2"})
        assert stored["status"] == "paid"

    async def test_token_in_scope(self, test_db, materialized, mint_token, manager_credentials):
        user_id = await materialized()
        await LedgerService.mark_paid(user_id, "P1", 3, 2026, "Fin Ops", manager_credentials)
        token = await mint_token(3, 2026, PayPeriod.P1)

        record = await LedgerService.mark_pending(user_id, "P1", 3, 2026, Credentials(token=token))

        assert record.status == PaymentStatus.PENDING


@pytest.mark.asyncio
class TestMaterialize:
    """Test LedgerService.materialize."""

    async def test_locks_in_current_figures(self, test_db, make_user, log_hours, manager_credentials):
        user_id = await make_user("Ana", hourly_rate=25)
        await log_hours(user_id, "2026-03-02", 20)

        record = await LedgerService.materialize(user_id, "P1", 3, 2026, manager_credentials)

        assert record.state == RowState.PERSISTED
        assert record.id
        assert (record.hours, record.amount, record.status) == (20, 500, PaymentStatus.PENDING)
        stored = await test_db["payments"].find_one({"user_id": user_id})
        assert stored["user_name"] == "Ana"
        assert stored["amount"] == 500

    async def test_existing_row_is_returned_unchanged(self, test_db, materialized, manager_credentials):
        user_id = await materialized()
        await test_db["users"].update_one({"name": "Ana"}, {"$set": {"hourly_rate": 99}})

        record = await LedgerService.materialize(user_id, "P1", 3, 2026, manager_credentials)

        assert record.amount == 500
        assert await test_db["payments"].count_documents({}) == 1

    async def test_no_hours_is_not_found(self, test_db, make_user, manager_credentials):
        user_id = await make_user("Ana")

        with pytest.raises(NotFound):
            await LedgerService.materialize(user_id, "P1", 3, 2026, manager_credentials)

    async def test_unknown_user_is_not_found(self, test_db, manager_credentials):
        with pytest.raises(NotFound):
            await LedgerService.materialize("000000000000000000000000", "P1", 3, 2026, manager_credentials)

    async def test_token_can_materialize_its_own_period(self, test_db, make_user, log_hours, mint_token):
        user_id = await make_user("Ana", hourly_rate=25)
        await log_hours(user_id, "2026-03-02", 2)
        token = await mint_token(3, 2026, PayPeriod.P1)

        record = await LedgerService.materialize(user_id, "P1", 3, 2026, Credentials(token=token))

        assert record.amount == 50


@pytest.mark.asyncio
class TestConcurrentWriters:
    """Racing writers never produce a second row."""

    async def test_concurrent_mark_paid(self, test_db, materialized, manager_credentials):
        user_id = await materialized()

        results = await asyncio.gather(*[
            LedgerService.mark_paid(user_id, "P1", 3, 2026, f"actor-{i}", manager_credentials)
            for i in range(10)
        ])

        assert all(r.status == PaymentStatus.PAID for r in results)
        assert len({r.id for r in results}) == 1
        assert await test_db["payments"].count_documents({"user_id": user_id}) == 1

    async def test_concurrent_materialize(self, test_db, make_user, log_hours, manager_credentials):
        user_id = await make_user("Ana", hourly_rate=25)
        await log_hours(user_id, "2026-03-02", 20)

        results = await asyncio.gather(*[
            LedgerService.materialize(user_id, "P1", 3, 2026, manager_credentials) for _ in range(10)
        ])

        assert len({r.id for r in results}) == 1
        assert await test_db["payments"].count_documents({}) == 1

    async def test_mixed_mutations(self, test_db, materialized, manager_credentials):
        user_id = await materialized()

        await asyncio.gather(*[
            LedgerService.mark_paid(user_id, "P1", 3, 2026, "A", manager_credentials)
            if i % 2 else
            LedgerService.mark_pending(user_id, "P1", 3, 2026, manager_credentials)
            for i in range(10)
        ])

        assert await test_db["payments"].count_documents({"user_id": user_id}) == 1

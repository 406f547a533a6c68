"""
LedgerService - Status changes on persisted payroll rows.

mark_paid / mark_pending only ever update a row that already exists;
a period that has never been materialized raises NotFound instead of
being created from its computed figures. materialize() is the one
operation that turns a virtual row into a stored one.
"""

from typing import Optional

from paydesk.core.config import settings
from paydesk.core.errors import NotFound
from paydesk.core.logging import get_logger
from paydesk.db.session import get_database
from paydesk.models.payment import LedgerRow, PaymentRecord
from paydesk.models.period import PayPeriod
from paydesk.models.scope import Credentials, TokenScope
from paydesk.models.user import PAYMENT_ADMIN_ROLES
from paydesk.repositories.payment_repo import PaymentRepository
from paydesk.repositories.time_log_repo import TimeLogRepository
from paydesk.repositories.user_repo import UserRepository
from paydesk.services.access_gate import AccessGate
from paydesk.services.period_resolver import resolve_range, to_pay_period, validate_month_year
from paydesk.services.reconciliation_service import build_rate_snapshot, persisted_record, virtual_row
from paydesk.services.time_log_aggregator import TimeLogAggregator

logger = get_logger(__name__)


class LedgerService:
    @staticmethod
    async def mark_paid(
        user_id: str,
        period: PayPeriod,
        month: int,
        year: int,
        actor: Optional[str] = None,
        credentials: Optional[Credentials] = None
    ) -> PaymentRecord:
        """
        Mark a persisted payment as paid, stamping when and by whom.

        Over a shared link the actor is always the shared link sentinel,
        never a name supplied by the caller.
        """
        period = to_pay_period(period)
        validate_month_year(month, year)
        scope = await AccessGate.authorize(
            credentials, PAYMENT_ADMIN_ROLES, month=month, year=year, period=period
        )

        if isinstance(scope, TokenScope):
            paid_by = settings.SHARED_LINK_ACTOR
        else:
            paid_by = actor or scope.name or scope.user_id

        db = await get_database()
        row = await PaymentRepository(db).mark_paid(user_id, period, month, year, paid_by)
        if row is None:
            raise NotFound(_not_found_message(user_id, period, month, year))

        logger.info(
            "payment_marked_paid",
            user_id=user_id, period=period.value, month=month, year=year,
            paid_by=paid_by, via=scope.kind
        )
        return await LedgerService._to_record(db, row)

    @staticmethod
    async def mark_pending(
        user_id: str,
        period: PayPeriod,
        month: int,
        year: int,
        credentials: Optional[Credentials] = None
    ) -> PaymentRecord:
        """Undo a payment: back to pending with paid_at/paid_by cleared."""
        period = to_pay_period(period)
        validate_month_year(month, year)
        scope = await AccessGate.authorize(
            credentials, PAYMENT_ADMIN_ROLES, month=month, year=year, period=period
        )

        db = await get_database()
        row = await PaymentRepository(db).mark_pending(user_id, period, month, year)
        if row is None:
            raise NotFound(_not_found_message(user_id, period, month, year))

        logger.info(
            "payment_marked_pending",
            user_id=user_id, period=period.value, month=month, year=year, via=scope.kind
        )
        return await LedgerService._to_record(db, row)

    @staticmethod
    async def materialize(
        user_id: str,
        period: PayPeriod,
        month: int,
        year: int,
        credentials: Optional[Credentials] = None
    ) -> PaymentRecord:
        """
        Persist a period's computed row so it can be marked paid.

        Hours and amount are locked in at the current rate. An already
        persisted row is returned as is.
        """
        period = to_pay_period(period)
        validate_month_year(month, year)
        scope = await AccessGate.authorize(
            credentials, PAYMENT_ADMIN_ROLES, month=month, year=year, period=period
        )

        db = await get_database()
        payments = PaymentRepository(db)

        existing = await payments.get(user_id, period, month, year)
        if existing:
            return await LedgerService._to_record(db, existing)

        payee = await UserRepository(db).get_payee(user_id)
        if payee is None:
            raise NotFound(f"User {user_id} not found")

        rates = build_rate_snapshot([payee])
        hours_by_user = await TimeLogAggregator(TimeLogRepository(db)).aggregate(
            resolve_range(month, year, period)
        )
        hours = hours_by_user.get(user_id, {}).get(period, 0.0)
        if hours <= 0:
            raise NotFound(f"No approved hours for user {user_id} in {period.value} {month}/{year}")

        row = await payments.materialize(
            virtual_row(payee, period, month, year, hours, rates[payee.id])
        )

        logger.info(
            "payment_materialized",
            user_id=user_id, period=period.value, month=month, year=year,
            hours=row.hours, amount=row.amount, via=scope.kind
        )
        return persisted_record(row, payee, rates[payee.id])

    @staticmethod
    async def _to_record(db, row: LedgerRow) -> PaymentRecord:
        payee = await UserRepository(db).get_payee(row.user_id)
        rate = payee.hourly_rate if payee else 0.0
        return persisted_record(row, payee, rate)


def _not_found_message(user_id: str, period: PayPeriod, month: int, year: int) -> str:
    return f"Payment record not found for user {user_id} in {period.value} {month}/{year}"

"""
ReconciliationService - Payment records for a pay period.

Core algorithm:
1. Authorize (session role or shared link scope); fail closed
2. Resolve the period's date range
3. Fetch payees, persisted rows and approved hours, one query each
4. For each payee and sub-period, a persisted row wins verbatim;
   otherwise synthesize a virtual row at the snapshot rate
5. Drop rows with no hours and no history, sort by payee name

Reads never write, whichever path authorized them.
"""

from typing import Dict, List, Optional, Tuple

from paydesk.core.errors import ValidationError
from paydesk.db.session import get_database
from paydesk.models.payment import LedgerRow, PaymentRecord, PaymentStatus, RowState
from paydesk.models.period import PayPeriod, PeriodSelector
from paydesk.models.scope import Credentials, TokenScope
from paydesk.models.user import PAYMENT_ADMIN_ROLES, PAYROLL_ROLES, Payee
from paydesk.repositories.payment_repo import PaymentRepository
from paydesk.repositories.time_log_repo import TimeLogRepository
from paydesk.repositories.user_repo import UserRepository
from paydesk.schemas.payment import PaymentSummary
from paydesk.services.access_gate import AccessGate
from paydesk.services.period_resolver import periods_for, resolve_range, to_selector, validate_month_year
from paydesk.services.time_log_aggregator import HoursByUser, TimeLogAggregator

# user_id -> hourly rate, captured once per reconciliation
RateSnapshot = Dict[str, float]


class ReconciliationService:
    @staticmethod
    async def get_records(
        month: Optional[int],
        year: Optional[int],
        period=None,
        credentials: Optional[Credentials] = None
    ) -> List[PaymentRecord]:
        """
        Payment records for a month, or one half of it.

        With a shared link token the token's own (month, year, period) is
        used; any value the caller also supplies must match it.
        """
        month, year, period = await ReconciliationService._authorized_period(
            month, year, period, credentials
        )
        db = await get_database()
        return await ReconciliationService.load_records(db, month, year, period)

    @staticmethod
    async def get_summary(
        month: Optional[int],
        year: Optional[int],
        period=None,
        credentials: Optional[Credentials] = None
    ) -> PaymentSummary:
        month, year, period = await ReconciliationService._authorized_period(
            month, year, period, credentials
        )
        db = await get_database()
        records = await ReconciliationService.load_records(db, month, year, period)
        return summarize(records, month, year, period)

    @staticmethod
    async def load_records(db, month: int, year: int, period=None) -> List[PaymentRecord]:
        """Fetch everything a period needs in three queries and reconcile it."""
        selector = to_selector(period) if period is not None else PeriodSelector.FULL
        periods = periods_for(selector)
        date_range = resolve_range(month, year, selector)

        payees = await UserRepository(db).list_payees(PAYROLL_ROLES)
        rates = build_rate_snapshot(payees)

        row_filter = None if selector == PeriodSelector.FULL else PayPeriod(selector.value)
        persisted = await PaymentRepository(db).find_for_month(month, year, row_filter)

        hours = await TimeLogAggregator(TimeLogRepository(db)).aggregate(date_range)

        return reconcile(payees, rates, persisted, hours, periods, month, year)

    @staticmethod
    async def _authorized_period(month, year, period, credentials):
        scope = await AccessGate.authorize(
            credentials, PAYMENT_ADMIN_ROLES, month=month, year=year, period=period
        )
        if isinstance(scope, TokenScope):
            return scope.month, scope.year, scope.period

        if month is None or year is None:
            raise ValidationError("Month and year are required")
        validate_month_year(month, year)
        if period is not None:
            period = to_selector(period)
        return month, year, period


def build_rate_snapshot(payees: List[Payee]) -> RateSnapshot:
    rates: RateSnapshot = {}
    for payee in payees:
        if payee.hourly_rate < 0:
            raise ValidationError(f"Negative hourly rate for user {payee.id}")
        rates[payee.id] = payee.hourly_rate
    return rates


def reconcile(
    payees: List[Payee],
    rates: RateSnapshot,
    persisted: List[LedgerRow],
    hours_by_user: HoursByUser,
    periods: List[PayPeriod],
    month: int,
    year: int
) -> List[PaymentRecord]:
    """
    Merge aggregated hours with persisted rows. Pure.

    Amounts of virtual rows come only from `rates`; persisted rows keep
    the amount they were stored with.
    """
    rows_by_key: Dict[Tuple[str, PayPeriod], LedgerRow] = {
        (row.user_id, PayPeriod(row.period)): row for row in persisted
    }

    records: List[PaymentRecord] = []
    for payee in payees:
        rate = rates.get(payee.id, 0.0)
        for period in periods:
            hours = hours_by_user.get(payee.id, {}).get(period, 0.0)
            row = rows_by_key.get((payee.id, period))

            if row is not None:
                records.append(persisted_record(row, payee, rate))
            elif hours > 0:
                records.append(virtual_record(payee, period, month, year, hours, rate))

    records.sort(key=lambda r: (r.user_name.casefold(), r.user_id, r.period.value))
    return records


def virtual_row(payee: Payee, period: PayPeriod, month: int, year: int, hours: float, rate: float) -> LedgerRow:
    """The unsaved row a period would get if it were materialized now."""
    return LedgerRow(
        user_id=payee.id,
        user_name=payee.name,
        period=period,
        month=month,
        year=year,
        hours=hours,
        amount=round(hours * rate, 2)
    )


def virtual_record(payee: Payee, period: PayPeriod, month: int, year: int, hours: float, rate: float) -> PaymentRecord:
    row = virtual_row(payee, period, month, year, hours, rate)
    return PaymentRecord(
        state=RowState.VIRTUAL,
        user_id=payee.id,
        user_name=payee.name,
        period=period,
        month=month,
        year=year,
        hours=row.hours,
        amount=row.amount,
        status=PaymentStatus.PENDING,
        hourly_rate=rate,
        has_bank_details=payee.has_bank_details,
        bank_details=payee.bank_details
    )


def persisted_record(row: LedgerRow, payee: Optional[Payee], rate: float) -> PaymentRecord:
    return PaymentRecord(
        id=row.id or "",
        state=RowState.PERSISTED,
        user_id=row.user_id,
        user_name=payee.name if payee else row.user_name,
        period=row.period,
        month=row.month,
        year=row.year,
        hours=row.hours,
        amount=row.amount,
        status=row.status,
        paid_at=row.paid_at,
        paid_by=row.paid_by,
        notes=row.notes,
        hourly_rate=rate,
        has_bank_details=payee.has_bank_details if payee else False,
        bank_details=payee.bank_details if payee else None
    )


def summarize(records: List[PaymentRecord], month: int, year: int, period=None) -> PaymentSummary:
    paid = [r for r in records if r.status == PaymentStatus.PAID]
    pending = [r for r in records if r.status == PaymentStatus.PENDING]
    return PaymentSummary(
        month=month,
        year=year,
        period=to_selector(period) if period is not None else None,
        records=records,
        total_hours=round(sum(r.hours for r in records), 2),
        total_amount=round(sum(r.amount for r in records), 2),
        paid_amount=round(sum(r.amount for r in paid), 2),
        pending_amount=round(sum(r.amount for r in pending), 2)
    )

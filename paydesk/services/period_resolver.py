"""
Pay period date arithmetic.

P1 covers days 1-15, P2 covers day 16 to the last day of the month,
FULL covers both. Dates are zero-padded ``YYYY-MM-DD`` strings so they
compare chronologically as plain strings.
"""

import calendar
from datetime import date
from typing import List, Union

from paydesk.core.errors import ValidationError
from paydesk.models.period import DateRange, PayPeriod, PeriodSelector

P1_LAST_DAY = 15


def validate_month_year(month: int, year: int) -> None:
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month!r}")
    if not isinstance(year, int) or not 1 <= year <= 9999:
        raise ValidationError(f"Year must be between 1 and 9999, got {year!r}")


def last_day_of_month(month: int, year: int) -> int:
    validate_month_year(month, year)
    return calendar.monthrange(year, month)[1]


def resolve_range(
    month: int, year: int, selector: Union[PeriodSelector, PayPeriod, str] = PeriodSelector.FULL
) -> DateRange:
    """Inclusive date range covered by a pay period selector."""
    selector = to_selector(selector)
    last_day = last_day_of_month(month, year)

    start_day, end_day = 1, last_day
    if selector == PeriodSelector.P1:
        end_day = P1_LAST_DAY
    elif selector == PeriodSelector.P2:
        start_day = P1_LAST_DAY + 1

    return DateRange(
        start_date=_format_day(year, month, start_day),
        end_date=_format_day(year, month, end_day),
    )


def periods_for(selector: Union[PeriodSelector, PayPeriod, str, None]) -> List[PayPeriod]:
    """The ledger periods a selector spans, in calendar order."""
    if selector is None:
        return [PayPeriod.P1, PayPeriod.P2]
    selector = to_selector(selector)
    if selector == PeriodSelector.FULL:
        return [PayPeriod.P1, PayPeriod.P2]
    return [PayPeriod(selector.value)]


def sub_period_for(day: str) -> PayPeriod:
    """Bucket a YYYY-MM-DD date by its own day of month."""
    try:
        day_of_month = date.fromisoformat(day).day
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {day!r}, expected YYYY-MM-DD")
    return PayPeriod.P1 if day_of_month <= P1_LAST_DAY else PayPeriod.P2


def to_pay_period(period) -> PayPeriod:
    """Coerce to a ledger period; FULL is not a ledger period."""
    try:
        return PayPeriod(getattr(period, "value", period))
    except ValueError:
        raise ValidationError(f"Invalid period {period!r}, expected P1 or P2")


def to_selector(selector) -> PeriodSelector:
    if isinstance(selector, PayPeriod):
        return PeriodSelector(selector.value)
    try:
        return PeriodSelector(selector)
    except ValueError:
        raise ValidationError(f"Invalid period {selector!r}, expected P1, P2 or FULL")


def _format_day(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"

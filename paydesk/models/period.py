from enum import Enum
from pydantic import BaseModel


class PayPeriod(str, Enum):
    """Half-month pay period a ledger row belongs to."""
    P1 = "P1"  # days 1-15
    P2 = "P2"  # day 16 to end of month


class PeriodSelector(str, Enum):
    """What a caller asks for: one half of the month, or all of it."""
    P1 = "P1"
    P2 = "P2"
    FULL = "FULL"


class DateRange(BaseModel):
    """Inclusive range of zero-padded YYYY-MM-DD dates."""
    start_date: str
    end_date: str

"""
Payment model - one payroll row per (user, pay period, month, year).

Design principles:
- At most one row per (user_id, period, month, year), enforced by a unique index
- Rows are either virtual (computed from approved hours, never stored)
  or persisted (stored, authoritative)
- A persisted row's hours/amount are locked in; later rate changes never touch it
- Only status, paid_at, paid_by change after persistence
"""

from typing import Optional
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, model_validator

from paydesk.models.base import _utcnow
from paydesk.models.period import PayPeriod
from paydesk.models.user import BankDetails


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class RowState(str, Enum):
    VIRTUAL = "virtual"
    PERSISTED = "persisted"


class LedgerRow(BaseModel):
    """
    Stored payroll row.

    Invariants:
    - status = paid iff paid_at is set
    - (user_id, period, month, year) is unique across the collection
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="_id")

    user_id: str
    user_name: str = ""
    period: PayPeriod
    month: int
    year: int

    hours: float = 0.0
    amount: float = 0.0

    status: PaymentStatus = PaymentStatus.PENDING
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def check_paid_stamp(self) -> "LedgerRow":
        if (self.status == PaymentStatus.PAID) != (self.paid_at is not None):
            raise ValueError("paid_at must be set exactly when status is paid")
        return self

    def key(self) -> dict:
        """Filter matching this row's uniqueness key."""
        return payment_key(self.user_id, self.period, self.month, self.year)


def payment_key(user_id: str, period: PayPeriod, month: int, year: int) -> dict:
    return {
        "user_id": user_id,
        "period": PayPeriod(period).value,
        "month": month,
        "year": year,
    }


class PaymentRecord(BaseModel):
    """Read model returned to callers: a ledger row joined with its payee."""
    id: str = ""  # empty while the row is virtual
    state: RowState = RowState.VIRTUAL

    user_id: str
    user_name: str
    period: PayPeriod
    month: int
    year: int

    hours: float
    amount: float
    status: PaymentStatus = PaymentStatus.PENDING
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None
    notes: Optional[str] = None

    hourly_rate: float = 0.0
    has_bank_details: bool = False
    bank_details: Optional[BankDetails] = None

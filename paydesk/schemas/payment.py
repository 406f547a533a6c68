from typing import List, Optional
from pydantic import BaseModel, Field

from paydesk.models.payment import PaymentRecord
from paydesk.models.period import PayPeriod, PeriodSelector


class PaymentTarget(BaseModel):
    """Identifies one ledger row by its uniqueness key."""
    user_id: str
    period: PayPeriod
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)


class MarkPaidRequest(PaymentTarget):
    """Request body to mark a payment as paid."""
    actor_name: Optional[str] = None


class PaymentSummary(BaseModel):
    """Invoice view of a pay period: the records plus their totals."""
    month: int
    year: int
    period: Optional[PeriodSelector] = None
    records: List[PaymentRecord]
    total_hours: float
    total_amount: float
    paid_amount: float
    pending_amount: float

from typing import Optional
from datetime import datetime
from pydantic import BaseModel

from paydesk.models.base import MongoModel
from paydesk.models.period import PayPeriod


class SharedLink(MongoModel):
    """
    Capability token granting public access to one pay period's invoice.

    The (month, year, period) binding never changes after minting and
    at most one link exists per binding.
    """
    token: str
    type: str = "invoice"
    month: int
    year: int
    period: PayPeriod
    created_by: str
    expires_at: Optional[datetime] = None


class SharedLinkValidation(BaseModel):
    valid: bool
    month: Optional[int] = None
    year: Optional[int] = None
    period: Optional[PayPeriod] = None
    error: Optional[str] = None

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from paydesk.models.period import PayPeriod


class SharedLinkCreate(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1, le=9999)
    period: PayPeriod


class SharedLinkURL(BaseModel):
    url: str


class SharedLinkResponse(BaseModel):
    id: str
    token: str
    url: str
    month: int
    year: int
    period: PayPeriod
    created_at: datetime
    expires_at: Optional[datetime] = None


class DeleteResult(BaseModel):
    success: bool

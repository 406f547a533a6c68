from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from paydesk.core.auth import get_credentials
from paydesk.models.payment import PaymentRecord
from paydesk.models.period import PeriodSelector
from paydesk.models.scope import Credentials
from paydesk.schemas.payment import MarkPaidRequest, PaymentSummary, PaymentTarget
from paydesk.services.ledger_service import LedgerService
from paydesk.services.reconciliation_service import ReconciliationService

router = APIRouter()

@router.get("", response_model=List[PaymentRecord])
async def get_payment_records(
    month: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None),
    period: Optional[PeriodSelector] = Query(default=None),
    credentials: Credentials = Depends(get_credentials)
):
    """Payment records for a month or pay period (session or shared link)"""
    return await ReconciliationService.get_records(month, year, period, credentials)

@router.get("/summary", response_model=PaymentSummary)
async def get_payment_summary(
    month: Optional[int] = Query(default=None),
    year: Optional[int] = Query(default=None),
    period: Optional[PeriodSelector] = Query(default=None),
    credentials: Credentials = Depends(get_credentials)
):
    """Invoice totals for a month or pay period"""
    return await ReconciliationService.get_summary(month, year, period, credentials)

@router.post("/mark-paid", response_model=PaymentRecord)
async def mark_payment_as_paid(
    body: MarkPaidRequest,
    credentials: Credentials = Depends(get_credentials)
):
    """Mark a materialized payment as paid"""
    return await LedgerService.mark_paid(
        body.user_id, body.period, body.month, body.year, body.actor_name, credentials
    )

@router.post("/mark-pending", response_model=PaymentRecord)
async def mark_payment_as_pending(
    body: PaymentTarget,
    credentials: Credentials = Depends(get_credentials)
):
    """Revert a payment to pending"""
    return await LedgerService.mark_pending(
        body.user_id, body.period, body.month, body.year, credentials
    )

@router.post("/materialize", response_model=PaymentRecord)
async def materialize_payment_record(
    body: PaymentTarget,
    credentials: Credentials = Depends(get_credentials)
):
    """Lock in a pay period's computed hours and amount as a stored record"""
    return await LedgerService.materialize(
        body.user_id, body.period, body.month, body.year, credentials
    )

"""
PaymentRepository - Persisted payroll rows.

Every write is a single atomic find_one_and_update against the
(user_id, period, month, year) unique key; there is no read-then-write.
Status changes never upsert, so they cannot create rows. Only
materialize() inserts, and it does so with $setOnInsert so an existing
row is returned untouched.
"""

from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from paydesk.models.base import _utcnow
from paydesk.models.payment import LedgerRow, PaymentStatus, payment_key
from paydesk.models.period import PayPeriod


class PaymentRepository:
    """Repository for persisted ledger rows."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["payments"]

    async def find_for_month(
        self, month: int, year: int, period: Optional[PayPeriod] = None
    ) -> List[LedgerRow]:
        """All persisted rows for a month, optionally one half of it."""
        query = {"month": month, "year": year}
        if period is not None:
            query["period"] = PayPeriod(period).value

        docs = await self.collection.find(query).to_list(None)
        return [self._to_row(doc) for doc in docs]

    async def get(
        self, user_id: str, period: PayPeriod, month: int, year: int
    ) -> Optional[LedgerRow]:
        doc = await self.collection.find_one(payment_key(user_id, period, month, year))
        if doc:
            return self._to_row(doc)
        return None

    async def mark_paid(
        self, user_id: str, period: PayPeriod, month: int, year: int, paid_by: str
    ) -> Optional[LedgerRow]:
        """
        Set status=paid and stamp paid_at/paid_by.

        Returns None if the row was never materialized.
        """
        now = _utcnow()
        result = await self.collection.find_one_and_update(
            payment_key(user_id, period, month, year),
            {
                "$set": {
                    "status": PaymentStatus.PAID.value,
                    "paid_at": now,
                    "paid_by": paid_by,
                    "updated_at": now
                }
            },
            upsert=False,
            return_document=ReturnDocument.AFTER
        )
        if result:
            return self._to_row(result)
        return None

    async def mark_pending(
        self, user_id: str, period: PayPeriod, month: int, year: int
    ) -> Optional[LedgerRow]:
        """
        Set status=pending and clear paid_at/paid_by.

        Returns None if the row was never materialized.
        """
        result = await self.collection.find_one_and_update(
            payment_key(user_id, period, month, year),
            {
                "$set": {
                    "status": PaymentStatus.PENDING.value,
                    "updated_at": _utcnow()
                },
                "$unset": {"paid_at": "", "paid_by": ""}
            },
            upsert=False,
            return_document=ReturnDocument.AFTER
        )
        if result:
            return self._to_row(result)
        return None

    async def materialize(self, row: LedgerRow) -> LedgerRow:
        """
        Persist a virtual row, or return the row already stored under its key.

        Hours and amount are only written on insert, so a persisted row
        keeps the figures it was locked in with.
        """
        now = _utcnow()
        on_insert = {
            "user_name": row.user_name,
            "hours": row.hours,
            "amount": row.amount,
            "status": PaymentStatus.PENDING.value,
            "created_at": now,
            "updated_at": now
        }
        if row.notes:
            on_insert["notes"] = row.notes

        try:
            result = await self.collection.find_one_and_update(
                row.key(),
                {"$setOnInsert": on_insert},
                upsert=True,
                return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            # Lost the insert race; the winner's row is now authoritative
            result = await self.collection.find_one(row.key())

        return self._to_row(result)

    # ===== PRIVATE HELPERS =====

    def _to_row(self, doc: dict) -> LedgerRow:
        doc["_id"] = str(doc["_id"])
        return LedgerRow(**doc)

from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from paydesk.models.shared_link import SharedLink
from paydesk.models.period import PayPeriod


class SharedLinkRepository:
    """Shared invoice link bindings."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["shared_links"]

    async def find_by_token(self, token: str) -> Optional[SharedLink]:
        doc = await self.collection.find_one({"token": token})
        if doc:
            return SharedLink(**doc)
        return None

    async def find_by_period(self, month: int, year: int, period: PayPeriod) -> Optional[SharedLink]:
        doc = await self.collection.find_one({
            "month": month,
            "year": year,
            "period": PayPeriod(period).value
        })
        if doc:
            return SharedLink(**doc)
        return None

    async def insert(self, link: SharedLink) -> SharedLink:
        """
        Insert a new link.

        Raises DuplicateKeyError if a link for the same period (or token)
        already exists.
        """
        doc = link.model_dump(by_alias=True, exclude_none=True, mode="python")
        doc["period"] = PayPeriod(link.period).value
        await self.collection.insert_one(doc)
        return link

    async def list_all(self) -> List[SharedLink]:
        """All links, newest first."""
        docs = await self.collection.find().sort("created_at", DESCENDING).to_list(None)
        return [SharedLink(**doc) for doc in docs]

    async def delete_by_token(self, token: str) -> bool:
        result = await self.collection.delete_one({"token": token})
        return result.deleted_count > 0

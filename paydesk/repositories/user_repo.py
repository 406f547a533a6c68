from typing import List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from bson import ObjectId

from paydesk.models.user import Payee, Role

# Only what payroll needs from the directory
PAYEE_PROJECTION = {"name": 1, "role": 1, "hourly_rate": 1, "bank_details": 1}

class UserRepository:
    """Read-only access to the user directory."""
    
    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]
    
    async def list_payees(self, roles: List[Role]) -> List[Payee]:
        """All users holding one of the given roles, in one query."""
        docs = await self.collection.find(
            {
                "role": {"$in": [Role(r).value for r in roles]},
                "is_deleted": {"$ne": True}
            },
            PAYEE_PROJECTION
        ).to_list(None)
        return [self._to_payee(doc) for doc in docs]
    
    async def get_payee(self, user_id: str) -> Optional[Payee]:
        """Get a single payee by ID."""
        if not ObjectId.is_valid(user_id):
            return None
        doc = await self.collection.find_one(
            {"_id": ObjectId(user_id), "is_deleted": {"$ne": True}},
            PAYEE_PROJECTION
        )
        if doc:
            return self._to_payee(doc)
        return None
    
    def _to_payee(self, doc: dict) -> Payee:
        doc["_id"] = str(doc["_id"])
        if doc.get("hourly_rate") is None:
            doc["hourly_rate"] = 0.0
        return Payee(**doc)

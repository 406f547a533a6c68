from typing import List
from motor.motor_asyncio import AsyncIOMotorDatabase

from paydesk.models.time_log import TimeEntry, TimeLogStatus


class TimeLogRepository:
    """Read-only access to the timesheet log."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["time_logs"]

    async def find_approved_between(self, start_date: str, end_date: str) -> List[TimeEntry]:
        """
        Every approved entry dated within [start_date, end_date].

        One query for all users; dates are zero-padded strings so the
        range comparison is chronological.
        """
        docs = await self.collection.find(
            {
                "status": TimeLogStatus.APPROVED.value,
                "date": {"$gte": start_date, "$lte": end_date}
            },
            {"user_id": 1, "date": 1, "hours": 1, "status": 1}
        ).to_list(None)

        for doc in docs:
            doc["_id"] = str(doc["_id"])
            doc["user_id"] = str(doc["user_id"])
        return [TimeEntry(**doc) for doc in docs]

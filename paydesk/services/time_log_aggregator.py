from collections import defaultdict
from typing import Dict

from paydesk.models.period import DateRange, PayPeriod
from paydesk.repositories.time_log_repo import TimeLogRepository
from paydesk.services.period_resolver import sub_period_for

HoursByUser = Dict[str, Dict[PayPeriod, float]]


class TimeLogAggregator:
    """Sums approved hours per user and half-month."""

    def __init__(self, time_logs: TimeLogRepository):
        self.time_logs = time_logs

    async def aggregate(self, date_range: DateRange) -> HoursByUser:
        """
        Approved hours in the range, keyed by user then sub-period.

        Each entry is bucketed by its own date, so a FULL-month range
        still splits into P1 and P2.
        """
        entries = await self.time_logs.find_approved_between(
            date_range.start_date, date_range.end_date
        )

        totals: HoursByUser = defaultdict(lambda: defaultdict(float))
        for entry in entries:
            totals[entry.user_id][sub_period_for(entry.date)] += entry.hours or 0.0

        return {user_id: dict(buckets) for user_id, buckets in totals.items()}

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class TimeLogStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeEntry(BaseModel):
    """
    One logged block of work. Owned by the timesheet workflow;
    payroll only ever reads approved entries.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, validation_alias="_id", serialization_alias="id")
    user_id: str
    date: str  # YYYY-MM-DD
    hours: float = 0.0
    status: TimeLogStatus = TimeLogStatus.PENDING

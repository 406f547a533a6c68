from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class Role(str, Enum):
    MANAGER = "manager"
    DEVELOPER = "developer"
    LEADERSHIP = "leadership"
    FINANCE = "finance"


# Users whose approved hours are billed
PAYROLL_ROLES = [Role.DEVELOPER, Role.MANAGER, Role.LEADERSHIP, Role.FINANCE]

# Users allowed to reconcile, mark payments and manage shared links
PAYMENT_ADMIN_ROLES = [Role.MANAGER, Role.FINANCE]


class BankDetails(BaseModel):
    account_name: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    branch_name: Optional[str] = None
    branch_code: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    notes: Optional[str] = None


class Payee(BaseModel):
    """A user-directory entry as seen by payroll."""
    id: str = Field(validation_alias="_id", serialization_alias="id")
    name: str
    role: Role = Role.DEVELOPER
    hourly_rate: float = 0.0
    bank_details: Optional[BankDetails] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def has_bank_details(self) -> bool:
        return bool(self.bank_details and self.bank_details.account_number)


class SessionIdentity(BaseModel):
    """Identity asserted by the session service's JWT."""
    id: str
    name: str = ""
    role: Role

"""
Authorization scopes.

A request runs under exactly one scope: either a role granted by a
session, or a single pay period granted by a shared link token.
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field

from paydesk.models.period import PayPeriod
from paydesk.models.user import Role, SessionIdentity


class RoleScope(BaseModel):
    kind: Literal["role"] = "role"
    user_id: str
    name: str = ""
    role: Role


class TokenScope(BaseModel):
    kind: Literal["token"] = "token"
    token: str
    month: int
    year: int
    period: PayPeriod

    def covers(self, month: int, year: int, period: PayPeriod) -> bool:
        return (self.month, self.year, self.period) == (month, year, PayPeriod(period))


Scope = Annotated[Union[RoleScope, TokenScope], Field(discriminator="kind")]


class Credentials(BaseModel):
    """What a caller presented: a session, a share token, both or neither."""
    session: Optional[SessionIdentity] = None
    token: Optional[str] = None

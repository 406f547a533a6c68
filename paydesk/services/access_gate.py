"""
AccessGate - one entry point for both ways into the ledger.

A caller either holds a session (role-based) or a shared link token
(bound to one pay period). A supplied token always takes precedence;
if neither is present the request is rejected outright.
"""

from typing import List, Optional

from paydesk.core.errors import InvalidToken, ScopeMismatch, Unauthorized
from paydesk.core.logging import get_logger
from paydesk.models.scope import Credentials, RoleScope, Scope, TokenScope
from paydesk.models.user import PAYMENT_ADMIN_ROLES, Role
from paydesk.services.shared_link_service import SharedLinkService

logger = get_logger(__name__)


class AccessGate:
    @staticmethod
    async def authorize(
        credentials: Optional[Credentials],
        roles: List[Role] = PAYMENT_ADMIN_ROLES,
        month: Optional[int] = None,
        year: Optional[int] = None,
        period=None
    ) -> Scope:
        """
        Resolve the scope a request runs under.

        month/year/period are what the caller asked to act on. With a
        token, any of them that is given must equal the token's binding.
        """
        credentials = credentials or Credentials()

        if credentials.token:
            validation = await SharedLinkService.validate(credentials.token)
            if not validation.valid:
                logger.info("access_denied", reason="invalid_token")
                raise InvalidToken(validation.error)

            scope = TokenScope(
                token=credentials.token,
                month=validation.month,
                year=validation.year,
                period=validation.period
            )
            AccessGate._check_binding(scope, month, year, period)
            return scope

        return AccessGate.authorize_role(credentials, roles)

    @staticmethod
    def authorize_role(
        credentials: Optional[Credentials],
        roles: List[Role] = PAYMENT_ADMIN_ROLES
    ) -> RoleScope:
        """Session-only authorization; tokens are ignored."""
        session = credentials.session if credentials else None
        if session is None:
            logger.info("access_denied", reason="no_credentials")
            raise Unauthorized("Authentication required")

        if session.role not in roles:
            logger.info("access_denied", reason="role", role=session.role.value, user_id=session.id)
            raise Unauthorized(
                f"Access denied. Required role: {' or '.join(Role(r).value for r in roles)}"
            )

        return RoleScope(user_id=session.id, name=session.name, role=session.role)

    @staticmethod
    def _check_binding(scope: TokenScope, month, year, period) -> None:
        requested_period = getattr(period, "value", period)
        mismatched = (
            (month is not None and month != scope.month)
            or (year is not None and year != scope.year)
            or (requested_period is not None and requested_period != scope.period.value)
        )
        if mismatched:
            logger.info(
                "access_denied",
                reason="scope_mismatch",
                bound=f"{scope.period.value} {scope.month}/{scope.year}",
                requested=f"{requested_period} {month}/{year}"
            )
            raise ScopeMismatch("Token does not match payment period")

"""
SharedLinkService - Capability tokens for public invoice access.

A shared link binds an opaque token to exactly one (month, year, period).
Holding the token grants read and status-change access to that period's
payments and nothing else.

- Minting is idempotent: one link per period, a second mint returns it
- Minting, listing and revoking require a manager/finance session;
  a token scope can never mint another token
- Validation is a read-only lookup and needs no authorization
"""

import secrets
from datetime import timedelta
from typing import List, Optional

from pymongo.errors import DuplicateKeyError

from paydesk.core.config import settings
from paydesk.core.errors import NotFound, Unauthorized
from paydesk.core.logging import get_logger
from paydesk.db.session import get_database
from paydesk.models.base import _utcnow, as_utc
from paydesk.models.period import PayPeriod
from paydesk.models.scope import RoleScope, Scope
from paydesk.models.shared_link import SharedLink, SharedLinkValidation
from paydesk.models.user import PAYMENT_ADMIN_ROLES
from paydesk.repositories.shared_link_repo import SharedLinkRepository
from paydesk.services.period_resolver import to_pay_period, validate_month_year

logger = get_logger(__name__)

INVALID_LINK = "Invalid or expired link"
EXPIRED_LINK = "Link has expired"


class SharedLinkService:
    @staticmethod
    async def mint(month: int, year: int, period: PayPeriod, scope: Scope) -> SharedLink:
        """Create the shared link for a pay period, or return the existing one."""
        SharedLinkService._require_admin(scope)
        validate_month_year(month, year)
        period = to_pay_period(period)

        db = await get_database()
        repo = SharedLinkRepository(db)

        existing = await repo.find_by_period(month, year, period)
        if existing and not _is_expired(existing):
            return existing
        if existing:
            # An expired link would otherwise block its period forever
            await repo.delete_by_token(existing.token)

        expires_at = None
        if settings.SHARED_LINK_EXPIRE_DAYS:
            expires_at = _utcnow() + timedelta(days=settings.SHARED_LINK_EXPIRE_DAYS)

        link = SharedLink(
            token=secrets.token_urlsafe(24),
            month=month,
            year=year,
            period=period,
            created_by=scope.user_id,
            expires_at=expires_at
        )

        try:
            await repo.insert(link)
        except DuplicateKeyError:
            # A concurrent mint for the same period won
            existing = await repo.find_by_period(month, year, period)
            if existing is None:
                raise
            return existing

        logger.info(
            "shared_link_minted",
            month=month, year=year, period=period.value, created_by=scope.user_id
        )
        return link

    @staticmethod
    async def validate(token: Optional[str]) -> SharedLinkValidation:
        """Resolve a token to its pay period. Never raises for bad tokens."""
        if not token:
            return SharedLinkValidation(valid=False, error=INVALID_LINK)

        db = await get_database()
        link = await SharedLinkRepository(db).find_by_token(token)

        if link is None:
            return SharedLinkValidation(valid=False, error=INVALID_LINK)

        if _is_expired(link):
            return SharedLinkValidation(valid=False, error=EXPIRED_LINK)

        return SharedLinkValidation(
            valid=True,
            month=link.month,
            year=link.year,
            period=link.period
        )

    @staticmethod
    async def revoke(token: str, scope: Scope) -> bool:
        """Delete a link; validation rejects the token from then on."""
        SharedLinkService._require_admin(scope)

        db = await get_database()
        deleted = await SharedLinkRepository(db).delete_by_token(token)
        if not deleted:
            raise NotFound("Link not found")

        logger.info("shared_link_revoked", revoked_by=scope.user_id)
        return True

    @staticmethod
    async def list_links(scope: Scope) -> List[SharedLink]:
        SharedLinkService._require_admin(scope)

        db = await get_database()
        return await SharedLinkRepository(db).list_all()

    @staticmethod
    def build_url(token: str) -> str:
        base_url = settings.PUBLIC_BASE_URL.rstrip("/")
        return f"{base_url}{settings.SHARED_LINK_PATH}/{token}"

    @staticmethod
    def _require_admin(scope: Scope) -> None:
        if not isinstance(scope, RoleScope):
            raise Unauthorized("Shared links can only be managed from a signed-in session")
        if scope.role not in PAYMENT_ADMIN_ROLES:
            raise Unauthorized("Access denied. Required role: manager or finance")


def _is_expired(link: SharedLink) -> bool:
    return link.expires_at is not None and as_utc(link.expires_at) < _utcnow()

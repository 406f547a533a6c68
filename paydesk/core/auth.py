from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, Header, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError as PydanticValidationError
from paydesk.core.config import settings
from paydesk.core.errors import Unauthorized
from paydesk.models.scope import Credentials
from paydesk.models.user import Role, SessionIdentity

# Sessions are optional: public routes accept a share token instead
security = HTTPBearer(auto_error=False)

def create_access_token(
    user_id: str,
    role: Role,
    name: str = "",
    expires_delta: timedelta | None = None
) -> str:
    """Create a session JWT the way the session service issues them."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    now = datetime.now(timezone.utc)
    expire = now + expires_delta

    payload = {
        "sub": user_id,
        "role": Role(role).value,
        "name": name,
        "exp": int(expire.timestamp()),
        "iat": int(now.timestamp())
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_session_token(token: str) -> SessionIdentity:
    """Turn a session JWT into the identity it asserts."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError:
        raise Unauthorized("Invalid session token")

    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthorized("Invalid session token")

    try:
        return SessionIdentity(
            id=user_id,
            name=payload.get("name") or "",
            role=payload.get("role")
        )
    except PydanticValidationError:
        raise Unauthorized("Invalid session token")

async def get_session_credentials(
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Credentials:
    """Session only, for routes a shared link can never reach."""
    if bearer is None:
        return Credentials()
    return Credentials(session=decode_session_token(bearer.credentials))

async def get_credentials(
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token: Optional[str] = Query(default=None, description="Shared link token"),
    x_share_token: Optional[str] = Header(default=None)
) -> Credentials:
    """Collect whatever the caller presented; AccessGate decides what it is worth."""
    share_token = token or x_share_token
    if share_token:
        # Token first; the bearer is not decoded
        return Credentials(token=share_token)
    return await get_session_credentials(bearer)

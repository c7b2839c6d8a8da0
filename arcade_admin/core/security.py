"""JWT helpers and the request authentication gate."""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.config import Settings, get_settings
from arcade_admin.core.errors import ForbiddenError, UnauthenticatedError
from arcade_admin.interfaces.http.deps.database import get_db_session
from arcade_admin.modules.accounts.models import Account, Role
from arcade_admin.modules.accounts.service import AccountService
from arcade_admin.schemas import TokenData

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

security = HTTPBearer(auto_error=False)


def _encode(payload: dict[str, Any], key: str, lifetime: timedelta, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        **payload,
        "iat": now,
        "exp": now + lifetime,
        "iss": settings.security.issuer,
        "aud": settings.security.audience,
    }
    return jwt.encode(claims, key, algorithm=settings.security.algorithm)


def _decode(token: str, key: str, settings: Settings, *, kind: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=[settings.security.algorithm],
            audience=settings.security.audience,
            issuer=settings.security.issuer,
        )
    except ExpiredSignatureError as exc:
        raise UnauthenticatedError(f"{kind.capitalize()} token expired", code="TOKEN_EXPIRED") from exc
    except JWTError as exc:
        raise UnauthenticatedError(f"Invalid {kind} token", code="INVALID_TOKEN") from exc
    if payload.get("type") != kind or not payload.get("sub"):
        raise UnauthenticatedError(f"Invalid {kind} token", code="INVALID_TOKEN")
    return payload


def create_access_token(account: Account, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return _encode(
        {
            "sub": account.id,
            "username": account.username,
            "role": account.role,
            "uniqueId": account.unique_id,
            "type": "access",
        },
        settings.security.secret_key,
        timedelta(minutes=settings.security.access_token_expire_minutes),
        settings,
    )


def create_refresh_token(account: Account, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return _encode(
        {"sub": account.id, "type": "refresh"},
        settings.security.refresh_secret_key,
        timedelta(days=settings.security.refresh_token_expire_days),
        settings,
    )


def decode_access_token(token: str, settings: Optional[Settings] = None) -> TokenData:
    settings = settings or get_settings()
    payload = _decode(token, settings.security.secret_key, settings, kind="access")
    return TokenData(
        account_id=payload["sub"],
        username=payload.get("username", ""),
        role=payload.get("role", ""),
    )


def decode_refresh_token(token: str, settings: Optional[Settings] = None) -> str:
    """Return the account id carried by a valid refresh token."""
    settings = settings or get_settings()
    return _decode(token, settings.security.refresh_secret_key, settings, kind="refresh")["sub"]


async def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db_session),
) -> Account:
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise UnauthenticatedError("Access token is required")

    token_data = decode_access_token(token, request.app.state.settings)
    service = AccountService.with_session(db)
    # role, ban and active flags come from the stored record, never the token
    account = await service.get_by_id(token_data.account_id)
    if account is None:
        raise UnauthenticatedError("User not found")
    if not account.can_authenticate():
        raise UnauthenticatedError("Account is inactive or banned")

    await service.touch(account.id)
    await db.commit()
    request.state.actor_id = account.id
    return account


async def get_current_admin(account: Account = Depends(get_current_account)) -> Account:
    if account.role != Role.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return account

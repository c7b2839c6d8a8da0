"""Domain services for account management."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.crypto import hash_password, verify_password
from arcade_admin.infrastructure.database.repositories.account_repository import SqlAccountRepository

from .exceptions import (
    AccountAlreadyBannedError,
    AccountAlreadyExistsError,
    AccountDisabledError,
    AccountNotBannedError,
    AccountNotFoundError,
    InvalidAccountDataError,
    InvalidCredentialsError,
)
from .models import Account, AccountCreateInput, AccountStatus, AccountUpdateInput, Role
from .repository import AccountRepository

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
_UNIQUE_ID_ATTEMPTS = 10


def normalize_username(username: str) -> str:
    return username.strip().lower()


def validate_username(username: str) -> str:
    normalized = normalize_username(username)
    if not USERNAME_MIN_LENGTH <= len(normalized) <= USERNAME_MAX_LENGTH:
        raise InvalidAccountDataError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    return normalized


def validate_password(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise InvalidAccountDataError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    return password


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class AccountService:
    """Encapsulates core account use cases."""

    repository: AccountRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self.repository.get_by_id(account_id)

    async def require(self, account_id: str) -> Account:
        account = await self.repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account

    async def get_by_username(self, username: str) -> Account | None:
        return await self.repository.get_by_username(normalize_username(username))

    async def list_by_role(self, role: str) -> Sequence[Account]:
        return await self.repository.list_by_role(role)

    async def authenticate(self, username: str, password: str) -> Account:
        """Resolve credentials to an account that may sign in.

        Unknown usernames and wrong passwords share one error so the response
        does not reveal which accounts exist.
        """
        account = await self.repository.get_by_username(normalize_username(username))
        if account is None or not verify_password(password, account.password_hash):
            raise InvalidCredentialsError()
        if not account.can_authenticate():
            raise AccountDisabledError()
        return account

    async def mark_logged_in(self, account_id: str) -> None:
        now = _utcnow()
        await self.repository.set_presence(
            account_id, is_online=True, last_login_at=now, last_activity_at=now
        )

    async def mark_logged_out(self, account_id: str) -> None:
        await self.repository.set_presence(account_id, is_online=False, last_activity_at=_utcnow())

    async def touch(self, account_id: str) -> None:
        await self.repository.set_presence(account_id, last_activity_at=_utcnow())

    async def create_account(self, payload: AccountCreateInput) -> Account:
        username = validate_username(payload.username)
        validate_password(payload.password)
        role = Role.parse(payload.role)
        if role is None:
            raise InvalidAccountDataError(f"Unknown role: {payload.role}")
        if not 0 <= payload.commission_rate <= 100:
            raise InvalidAccountDataError("Commission rate must be between 0 and 100")

        if await self.repository.get_by_username(username) is not None:
            raise AccountAlreadyExistsError()

        account = await self.repository.create_account(
            username=username,
            password_hash=hash_password(payload.password),
            role=role.value,
            unique_id=await self._generate_unique_id(role),
            email=payload.email,
            created_by=payload.created_by,
            commission_rate=payload.commission_rate,
            is_active=payload.is_active,
        )
        logger.info(
            "Account created: %s (%s) by %s", account.username, account.role, payload.created_by
        )
        return account

    async def update_account(self, account_id: str, payload: AccountUpdateInput) -> Account:
        current = await self.require(account_id)
        changes = payload.provided()

        if "username" in changes:
            username = validate_username(str(changes["username"]))
            if username != current.username:
                existing = await self.repository.get_by_username(username)
                if existing is not None and existing.id != account_id:
                    raise AccountAlreadyExistsError()
            changes["username"] = username

        if "role" in changes:
            role = Role.parse(changes["role"])
            if role is None:
                raise InvalidAccountDataError(f"Unknown role: {changes['role']}")
            changes["role"] = role.value

        if "commission_rate" in changes:
            rate = changes["commission_rate"]
            if rate is None or not 0 <= float(rate) <= 100:
                raise InvalidAccountDataError("Commission rate must be between 0 and 100")

        password = changes.pop("password", None)
        if password is not None:
            changes["password_hash"] = hash_password(validate_password(str(password)))

        if changes.get("is_active") is None:
            changes.pop("is_active", None)

        if not changes:
            return current
        return await self.repository.update_account(account_id, changes)

    async def delete_account(self, account_id: str) -> None:
        account = await self.require(account_id)
        await self.repository.delete_account(account_id)
        logger.info("Account deleted: %s (%s)", account.username, account.id)

    async def ban(self, account_id: str) -> Account:
        account = await self.require(account_id)
        if account.is_banned:
            raise AccountAlreadyBannedError()
        banned = await self.repository.update_account(
            account_id,
            {
                "is_banned": True,
                "is_active": False,
                "is_online": False,
                "status": AccountStatus.BANNED.value,
            },
        )
        logger.info("Account banned: %s", banned.username)
        return banned

    async def unban(self, account_id: str) -> Account:
        account = await self.require(account_id)
        if not account.is_banned:
            raise AccountNotBannedError()
        restored = await self.repository.update_account(
            account_id,
            {
                "is_banned": False,
                "is_active": True,
                "status": AccountStatus.ACTIVE.value,
            },
        )
        logger.info("Account unbanned: %s", restored.username)
        return restored

    async def change_password(
        self,
        account_id: str,
        *,
        current_password: str,
        new_password: str,
        confirm_password: Optional[str] = None,
    ) -> None:
        account = await self.require(account_id)
        if confirm_password is not None and new_password != confirm_password:
            raise InvalidAccountDataError("New passwords do not match")
        validate_password(new_password)
        if not verify_password(current_password, account.password_hash):
            raise InvalidAccountDataError("Current password is incorrect")
        await self.repository.update_account(
            account_id, {"password_hash": hash_password(new_password)}
        )

    async def _generate_unique_id(self, role: Role) -> str:
        prefix = role.unique_id_prefix
        for _ in range(_UNIQUE_ID_ATTEMPTS):
            candidate = f"{prefix}{random.randint(0, 999):03d}"
            if await self.repository.get_by_unique_id(candidate) is None:
                return candidate
        # three-digit space is crowded; widen until a free id turns up
        while True:
            candidate = f"{prefix}{random.randint(0, 999_999):06d}"
            if await self.repository.get_by_unique_id(candidate) is None:
                return candidate

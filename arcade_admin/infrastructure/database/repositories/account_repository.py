"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.db.models import Account as AccountModel
from arcade_admin.modules.accounts.exceptions import AccountNotFoundError
from arcade_admin.modules.accounts.models import Account
from arcade_admin.modules.accounts.repository import AccountRepository

_UPDATABLE_FIELDS = frozenset(
    {
        "username",
        "email",
        "password_hash",
        "role",
        "is_active",
        "is_online",
        "is_banned",
        "status",
        "commission_rate",
    }
)


class SqlAccountRepository(AccountRepository):
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        model = await self._session.get(AccountModel, account_id, populate_existing=True)
        return self._to_domain(model)

    async def get_by_username(self, username: str) -> Account | None:
        stmt = select(AccountModel).where(func.lower(AccountModel.username) == username.lower())
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def get_by_unique_id(self, unique_id: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.unique_id == unique_id.upper())
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def list_by_role(self, role: str) -> Sequence[Account]:
        stmt = (
            select(AccountModel)
            .where(AccountModel.role == role)
            .order_by(AccountModel.created_at.desc(), AccountModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def list_children(self, parent_ids: Sequence[str]) -> Sequence[Account]:
        if not parent_ids:
            return []
        stmt = select(AccountModel).where(AccountModel.created_by.in_(list(parent_ids)))
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def list_online(self, role: Optional[str] = None) -> Sequence[Account]:
        stmt = select(AccountModel).where(AccountModel.is_online.is_(True))
        if role is not None:
            stmt = stmt.where(AccountModel.role == role)
        stmt = stmt.order_by(AccountModel.last_login_at.desc(), AccountModel.id)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def count_by_role(self) -> dict[str, int]:
        stmt = select(AccountModel.role, func.count()).group_by(AccountModel.role)
        result = await self._session.execute(stmt)
        return {role: int(count) for role, count in result.all()}

    async def total_balance(self) -> float:
        stmt = select(func.coalesce(func.sum(AccountModel.balance), 0))
        return float((await self._session.execute(stmt)).scalar_one())

    async def create_account(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        unique_id: str,
        email: str | None,
        created_by: str | None,
        commission_rate: float,
        is_active: bool,
    ) -> Account:
        model = AccountModel(
            username=username,
            password_hash=password_hash,
            role=role,
            unique_id=unique_id,
            email=email,
            created_by=created_by,
            commission_rate=commission_rate,
            is_active=is_active,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update_account(self, account_id: str, changes: Mapping[str, Any]) -> Account:
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"fields cannot be updated: {sorted(unknown)}")

        model = await self._session.get(AccountModel, account_id)
        if model is None:
            raise AccountNotFoundError()

        for name, value in changes.items():
            setattr(model, name, value)

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def delete_account(self, account_id: str) -> bool:
        result = await self._session.execute(delete(AccountModel).where(AccountModel.id == account_id))
        return result.rowcount > 0

    async def apply_balance_delta(
        self,
        account_id: str,
        delta: float,
        *,
        floor: Optional[float] = 0.0,
    ) -> Account | None:
        # single guarded UPDATE: the floor check and the write cannot interleave
        # with another statement touching the same row
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(balance=AccountModel.balance + delta)
            .returning(AccountModel.id)
            .execution_options(synchronize_session=False)
        )
        if floor is not None:
            stmt = stmt.where(AccountModel.balance + delta >= floor)
        result = await self._session.execute(stmt)
        if result.scalar_one_or_none() is None:
            return None
        return await self.get_by_id(account_id)

    async def set_presence(
        self,
        account_id: str,
        *,
        is_online: Optional[bool] = None,
        last_login_at: Optional[datetime] = None,
        last_activity_at: Optional[datetime] = None,
    ) -> None:
        values: dict[str, Any] = {}
        if is_online is not None:
            values["is_online"] = is_online
        if last_login_at is not None:
            values["last_login_at"] = last_login_at
        if last_activity_at is not None:
            values["last_activity_at"] = last_activity_at
        if not values:
            return
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            username=model.username,
            role=model.role,
            unique_id=model.unique_id,
            password_hash=model.password_hash,
            email=model.email,
            created_by=model.created_by,
            balance=float(model.balance or 0),
            play_points=float(model.play_points or 0),
            win_points=float(model.win_points or 0),
            claim_points=float(model.claim_points or 0),
            end_points=float(model.end_points or 0),
            is_active=bool(model.is_active),
            is_online=bool(model.is_online),
            is_banned=bool(model.is_banned),
            status=model.status or "active",
            commission_rate=float(model.commission_rate or 0),
            total_commission_earned=float(model.total_commission_earned or 0),
            last_login_at=model.last_login_at,
            last_activity_at=model.last_activity_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

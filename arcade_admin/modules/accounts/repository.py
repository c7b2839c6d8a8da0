"""Repository protocol for accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .models import Account


class AccountRepository(Protocol):
    """Abstract repository interface for account persistence."""

    async def get_by_id(self, account_id: str) -> Account | None:
        ...

    async def get_by_username(self, username: str) -> Account | None:
        ...

    async def get_by_unique_id(self, unique_id: str) -> Account | None:
        ...

    async def list_by_role(self, role: str) -> Sequence[Account]:
        ...

    async def list_children(self, parent_ids: Sequence[str]) -> Sequence[Account]:
        ...

    async def list_online(self, role: Optional[str] = None) -> Sequence[Account]:
        ...

    async def count_by_role(self) -> dict[str, int]:
        ...

    async def total_balance(self) -> float:
        ...

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
        ...

    async def update_account(self, account_id: str, changes: Mapping[str, Any]) -> Account:
        ...

    async def delete_account(self, account_id: str) -> bool:
        ...

    async def apply_balance_delta(
        self,
        account_id: str,
        delta: float,
        *,
        floor: Optional[float] = 0.0,
    ) -> Account | None:
        ...

    async def set_presence(
        self,
        account_id: str,
        *,
        is_online: Optional[bool] = None,
        last_login_at: Optional[datetime] = None,
        last_activity_at: Optional[datetime] = None,
    ) -> None:
        ...

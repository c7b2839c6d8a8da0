"""Hierarchy resolution: who sits below whom."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.infrastructure.database.repositories.account_repository import SqlAccountRepository
from arcade_admin.modules.accounts.models import Account, Role
from arcade_admin.modules.accounts.repository import AccountRepository
from arcade_admin.modules.permissions.exceptions import AccessDeniedError
from arcade_admin.modules.permissions.policy import can_manage_role

from .models import HierarchyStats


def _created_at_key(account: Account) -> float:
    return account.created_at.timestamp() if account.created_at else float("-inf")


def sort_listing(accounts: Iterable[Account]) -> list[Account]:
    """Newest first; equal timestamps fall back to ascending id."""
    ordered = sorted(accounts, key=lambda account: account.id)
    ordered.sort(key=_created_at_key, reverse=True)
    return ordered


@dataclass(slots=True)
class HierarchyResolver:
    """Computes descendant sets on demand; nothing is cached between calls."""

    repository: AccountRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "HierarchyResolver":
        return cls(SqlAccountRepository(session))

    async def descendants_of(self, root_id: str, target_role: Optional[str] = None) -> list[Account]:
        """Return every account reachable from ``root_id`` through ``created_by`` links.

        The walk is breadth-first across all roles, so accounts created several
        tiers below their creator are found as well. Each account appears once,
        the root itself never does, and an unknown root yields an empty list.
        """
        root = await self.repository.get_by_id(root_id)
        if root is None:
            return []

        visited: set[str] = {root.id}
        found: list[Account] = []
        frontier = [root.id]
        while frontier:
            children = await self.repository.list_children(frontier)
            frontier = []
            for child in children:
                if child.id in visited:
                    continue
                visited.add(child.id)
                found.append(child)
                frontier.append(child.id)

        if target_role is not None:
            found = [account for account in found if account.role == target_role]
        return sort_listing(found)

    async def is_descendant(self, ancestor_id: str, account_id: str) -> bool:
        """Walk the creator chain of ``account_id`` upward looking for ``ancestor_id``."""
        seen: set[str] = set()
        current = await self.repository.get_by_id(account_id)
        while current is not None and current.created_by and current.id not in seen:
            if current.created_by == ancestor_id:
                return True
            seen.add(current.id)
            current = await self.repository.get_by_id(current.created_by)
        return False

    async def stats_of(self, root_id: str) -> HierarchyStats:
        descendants = await self.descendants_of(root_id)
        counts: dict[str, int] = {}
        for account in descendants:
            counts[account.role] = counts.get(account.role, 0) + 1
        return HierarchyStats(
            counts_by_role=counts,
            total_balance=sum(account.balance for account in descendants),
        )

    async def global_stats(self) -> HierarchyStats:
        return HierarchyStats(
            counts_by_role=await self.repository.count_by_role(),
            total_balance=await self.repository.total_balance(),
            include_super_distributors=True,
        )

    async def stats_for(self, actor: Account) -> HierarchyStats:
        if actor.is_admin():
            return await self.global_stats()
        if actor.role == Role.USER.value or Role.parse(actor.role) is None:
            raise AccessDeniedError()
        return await self.stats_of(actor.id)

    async def visible_accounts(self, actor: Account, role: str) -> list[Account]:
        """Accounts of ``role`` the actor may list.

        Admins see the whole system; everyone else sees their own descendants,
        and only for roles they are allowed to manage.
        """
        if not can_manage_role(actor.role, role):
            raise AccessDeniedError()
        if actor.is_admin():
            return sort_listing(await self.repository.list_by_role(role))
        return await self.descendants_of(actor.id, role)

    async def online_users(self, actor: Account) -> list[Account]:
        if actor.is_admin():
            return list(await self.repository.list_online(Role.USER.value))
        if not can_manage_role(actor.role, Role.USER):
            raise AccessDeniedError()
        descendants = await self.descendants_of(actor.id, Role.USER.value)
        return [account for account in descendants if account.is_online]

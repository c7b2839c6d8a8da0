"""Aggregates computed over the account hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from arcade_admin.modules.accounts.models import Role


@dataclass(slots=True)
class HierarchyStats:
    counts_by_role: dict[str, int] = field(default_factory=dict)
    total_balance: float = 0.0
    # only meaningful for the global view; scoped views leave it unset
    include_super_distributors: bool = False

    def count(self, role: Role) -> int:
        return self.counts_by_role.get(role.value, 0)

    @property
    def total_super_distributors(self) -> Optional[int]:
        if not self.include_super_distributors:
            return None
        return self.count(Role.SUPER_DISTRIBUTOR)

    @property
    def total_distributors(self) -> int:
        return self.count(Role.DISTRIBUTOR)

    @property
    def total_retailers(self) -> int:
        return self.count(Role.RETAILER)

    @property
    def total_users(self) -> int:
        return self.count(Role.USER)

"""Repository protocol for audit entries."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, Sequence

from .models import AuditEntry, AuditFilters, AuditStats, Pagination


class AuditRepository(Protocol):
    async def add_entry(
        self,
        *,
        actor_id: Optional[str],
        action: str,
        status: str,
        details: dict[str, Any],
        resource_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditEntry:
        ...

    async def list_entries(
        self, filters: AuditFilters, pagination: Pagination
    ) -> tuple[Sequence[AuditEntry], int]:
        ...

    async def list_since(self, since: datetime, limit: int) -> Sequence[AuditEntry]:
        ...

    async def stats(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> AuditStats:
        ...

    async def delete_before(self, cutoff: datetime) -> int:
        ...

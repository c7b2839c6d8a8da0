"""Audit recording and retrieval services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arcade_admin.core.config import AuditSettings, Settings, get_settings
from arcade_admin.infrastructure.database.repositories.audit_repository import SqlAuditRepository

from .exceptions import InvalidAuditQueryError
from .models import (
    SORTABLE_FIELDS,
    ActionKind,
    AuditEntry,
    AuditFilters,
    AuditPage,
    AuditStats,
    LogStatus,
    Pagination,
)
from .repository import AuditRepository

logger = logging.getLogger(__name__)

_SENSITIVE_KEYS = frozenset({"password", "newPassword", "currentPassword", "confirmPassword"})


def scrub(details: dict[str, Any]) -> dict[str, Any]:
    """Drop credential fields, including inside a nested ``changes`` payload."""
    cleaned: dict[str, Any] = {}
    for key, value in details.items():
        if key in _SENSITIVE_KEYS:
            continue
        if isinstance(value, dict):
            value = scrub(value)
        cleaned[key] = value
    return cleaned


class AuditRecorder:
    """Writes audit entries in their own session; never raises to the caller."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], *, enabled: bool = True) -> None:
        self._session_factory = session_factory
        self._enabled = enabled

    async def record(
        self,
        *,
        actor_id: Optional[str],
        action: ActionKind | str,
        status: LogStatus | str = LogStatus.SUCCESS,
        details: Optional[dict[str, Any]] = None,
        resource_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        if not self._enabled:
            return
        action_value = action.value if isinstance(action, ActionKind) else action
        status_value = status.value if isinstance(status, LogStatus) else status
        try:
            async with self._session_factory() as session:
                await SqlAuditRepository(session).add_entry(
                    actor_id=actor_id,
                    action=action_value,
                    status=status_value,
                    details=scrub(details or {}),
                    resource_id=resource_id,
                    ip_address=ip_address,
                    user_agent=user_agent,
                )
                await session.commit()
        except Exception:
            logger.exception("Failed to write audit entry %s for actor %s", action_value, actor_id)


@dataclass(slots=True)
class AuditLogService:
    repository: AuditRepository
    settings: AuditSettings

    @classmethod
    def with_session(cls, session: AsyncSession, settings: Settings | None = None) -> "AuditLogService":
        settings = settings or get_settings()
        return cls(SqlAuditRepository(session), settings.audit)

    def build_pagination(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Pagination:
        pagination = Pagination(
            page=1 if page is None else page,
            limit=50 if limit is None else limit,
            sort_by=sort_by or "createdAt",
            sort_order=(sort_order or "desc").lower(),
        )
        if pagination.page < 1:
            raise InvalidAuditQueryError("page must be at least 1")
        if not 1 <= pagination.limit <= self.settings.max_page_size:
            raise InvalidAuditQueryError(
                f"limit must be between 1 and {self.settings.max_page_size}"
            )
        if pagination.sort_by not in SORTABLE_FIELDS:
            raise InvalidAuditQueryError(f"sortBy must be one of {', '.join(SORTABLE_FIELDS)}")
        if pagination.sort_order not in ("asc", "desc"):
            raise InvalidAuditQueryError("sortOrder must be asc or desc")
        return pagination

    async def list_logs(self, filters: AuditFilters, pagination: Pagination) -> AuditPage:
        if filters.action and filters.action not in ActionKind.__members__:
            raise InvalidAuditQueryError(f"Unknown action: {filters.action}")
        if filters.status and filters.status not in LogStatus.__members__:
            raise InvalidAuditQueryError(f"Unknown status: {filters.status}")
        entries, total = await self.repository.list_entries(filters, pagination)
        return AuditPage(entries=list(entries), total=total, page=pagination.page, limit=pagination.limit)

    async def logs_by_actor(self, actor_id: str, pagination: Pagination) -> AuditPage:
        return await self.list_logs(AuditFilters(actor_id=actor_id), pagination)

    async def logs_by_action(self, action: str, pagination: Pagination) -> AuditPage:
        return await self.list_logs(AuditFilters(action=action), pagination)

    async def search(self, term: str, pagination: Pagination) -> AuditPage:
        if not term or not term.strip():
            raise InvalidAuditQueryError("Search query is required")
        return await self.list_logs(AuditFilters(search=term.strip()), pagination)

    async def recent(self, hours: Optional[int] = None) -> Sequence[AuditEntry]:
        if hours is None:
            hours = self.settings.recent_hours
        if hours < 1:
            raise InvalidAuditQueryError("hours must be at least 1")
        since = datetime.now(timezone.utc) - timedelta(hours=hours)
        return await self.repository.list_since(since, self.settings.recent_limit)

    async def stats(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> AuditStats:
        return await self.repository.stats(start, end)

    async def purge_older_than(self, days: Optional[int] = None) -> int:
        if days is None:
            days = self.settings.retention_days
        if days < 1:
            raise InvalidAuditQueryError("days must be at least 1")
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        removed = await self.repository.delete_before(cutoff)
        logger.info("Purged %d audit entries older than %d days", removed, days)
        return removed

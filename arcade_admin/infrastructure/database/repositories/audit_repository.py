"""SQLAlchemy repository for audit entries."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.db.models import Account as AccountModel
from arcade_admin.db.models import AuditLog as AuditLogModel
from arcade_admin.modules.audit.models import AuditEntry, AuditFilters, AuditStats, Pagination

_SORT_COLUMNS = {
    "createdAt": AuditLogModel.created_at,
    "action": AuditLogModel.action,
    "status": AuditLogModel.status,
}


def _truncate(value: Any, length: int) -> Optional[str]:
    if value is None:
        return None
    return str(value)[:length]


class SqlAuditRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

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
        model = AuditLogModel(
            actor_id=actor_id,
            action=action,
            status=status,
            resource_id=_truncate(resource_id, 64),
            details=json.dumps(details, ensure_ascii=False, default=str) if details else None,
            description=_truncate(details.get("description"), 255),
            target_username=_truncate(details.get("targetUsername"), 50),
            ip_address=_truncate(ip_address, 45),
            user_agent=_truncate(user_agent, 255),
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return AuditEntry.from_orm(model)

    async def list_entries(
        self, filters: AuditFilters, pagination: Pagination
    ) -> tuple[Sequence[AuditEntry], int]:
        conditions = self._conditions(filters)

        count_stmt = select(func.count()).select_from(AuditLogModel).where(*conditions)
        total = int((await self._session.execute(count_stmt)).scalar_one())

        column = _SORT_COLUMNS.get(pagination.sort_by, AuditLogModel.created_at)
        direction = asc if pagination.sort_order == "asc" else desc
        stmt = (
            select(AuditLogModel, AccountModel)
            .outerjoin(AccountModel, AccountModel.id == AuditLogModel.actor_id)
            .where(*conditions)
            .order_by(direction(column), direction(AuditLogModel.id))
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self._session.execute(stmt)
        return [AuditEntry.from_orm(log, actor) for log, actor in result.all()], total

    async def list_since(self, since: datetime, limit: int) -> Sequence[AuditEntry]:
        stmt = (
            select(AuditLogModel, AccountModel)
            .outerjoin(AccountModel, AccountModel.id == AuditLogModel.actor_id)
            .where(AuditLogModel.created_at >= since)
            .order_by(desc(AuditLogModel.created_at), desc(AuditLogModel.id))
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [AuditEntry.from_orm(log, actor) for log, actor in result.all()]

    async def stats(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> AuditStats:
        stmt = select(AuditLogModel.action, AuditLogModel.status, func.count()).group_by(
            AuditLogModel.action, AuditLogModel.status
        )
        if start is not None:
            stmt = stmt.where(AuditLogModel.created_at >= start)
        if end is not None:
            stmt = stmt.where(AuditLogModel.created_at <= end)

        stats = AuditStats()
        for action, status, count in (await self._session.execute(stmt)).all():
            stats.total_logs += count
            if status == "SUCCESS":
                stats.success_count += count
            elif status == "FAILED":
                stats.failed_count += count
            stats.action_breakdown[action] = stats.action_breakdown.get(action, 0) + count
        return stats

    async def delete_before(self, cutoff: datetime) -> int:
        result = await self._session.execute(
            delete(AuditLogModel).where(AuditLogModel.created_at < cutoff)
        )
        return result.rowcount or 0

    @staticmethod
    def _conditions(filters: AuditFilters) -> list[Any]:
        conditions: list[Any] = []
        if filters.actor_id:
            conditions.append(AuditLogModel.actor_id == filters.actor_id)
        if filters.action:
            conditions.append(AuditLogModel.action == filters.action)
        if filters.status:
            conditions.append(AuditLogModel.status == filters.status)
        if filters.resource_id:
            conditions.append(AuditLogModel.resource_id == filters.resource_id)
        if filters.start_date is not None:
            conditions.append(AuditLogModel.created_at >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(AuditLogModel.created_at <= filters.end_date)
        if filters.search:
            term = filters.search
            conditions.append(
                or_(
                    AuditLogModel.description.icontains(term, autoescape=True),
                    AuditLogModel.target_username.icontains(term, autoescape=True),
                    AuditLogModel.action.icontains(term, autoescape=True),
                )
            )
        return conditions

"""Game-session statistics service."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.infrastructure.database.repositories.game_session_repository import (
    SqlGameSessionRepository,
)

from .exceptions import GameSessionNotFoundError, InvalidGameQueryError
from .models import GameSessionFilters, GameSessionRecord, MachineSummary, OutcomeStats
from .repository import GameSessionRepository

_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MAX_LIMIT = 500


def _check_date(value: Optional[str], name: str) -> Optional[str]:
    if value and not _DATE.match(value):
        raise InvalidGameQueryError(f"{name} must be formatted as YYYY-MM-DD")
    return value or None


@dataclass(slots=True)
class GameStatsService:
    repository: GameSessionRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "GameStatsService":
        return cls(SqlGameSessionRepository(session))

    @staticmethod
    def build_filters(
        machine_id: Optional[str] = None,
        outcome: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> GameSessionFilters:
        return GameSessionFilters(
            machine_id=machine_id or None,
            outcome=outcome or None,
            start_date=_check_date(start_date, "startDate"),
            end_date=_check_date(end_date, "endDate"),
        )

    async def list_sessions(
        self, filters: GameSessionFilters, *, limit: int = 50, skip: int = 0
    ) -> tuple[Sequence[GameSessionRecord], int]:
        if not 1 <= limit <= MAX_LIMIT or skip < 0:
            raise InvalidGameQueryError(f"limit must be between 1 and {MAX_LIMIT}, skip >= 0")
        return await self.repository.list_sessions(filters, limit, skip)

    async def get_session(self, session_id: int) -> GameSessionRecord:
        record = await self.repository.get_by_session_id(session_id)
        if record is None:
            raise GameSessionNotFoundError()
        return record

    async def outcome_stats(self, machine_id: Optional[str] = None) -> Sequence[OutcomeStats]:
        return await self.repository.outcome_stats(machine_id or None)

    async def machines(self, filters: GameSessionFilters) -> Sequence[MachineSummary]:
        return await self.repository.machine_summaries(filters)

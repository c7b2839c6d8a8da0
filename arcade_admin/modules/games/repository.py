"""Repository protocol for game sessions."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .models import GameSessionFilters, GameSessionRecord, MachineSummary, OutcomeStats


class GameSessionRepository(Protocol):
    async def list_sessions(
        self, filters: GameSessionFilters, limit: int, skip: int
    ) -> tuple[Sequence[GameSessionRecord], int]:
        ...

    async def get_by_session_id(self, session_id: int) -> GameSessionRecord | None:
        ...

    async def outcome_stats(self, machine_id: Optional[str] = None) -> Sequence[OutcomeStats]:
        ...

    async def machine_summaries(self, filters: GameSessionFilters) -> Sequence[MachineSummary]:
        ...

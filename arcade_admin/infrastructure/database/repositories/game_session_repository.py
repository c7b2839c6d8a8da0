"""SQLAlchemy repository for game-session telemetry."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import case, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.db.models import GameSession
from arcade_admin.modules.games.models import (
    OUTCOMES,
    GameSessionFilters,
    GameSessionRecord,
    MachineSummary,
    OutcomeStats,
)


def _date_conditions(filters: GameSessionFilters) -> list[Any]:
    conditions: list[Any] = []
    if filters.start_date:
        conditions.append(GameSession.start_time >= f"{filters.start_date} 00:00:00")
    if filters.end_date:
        conditions.append(GameSession.start_time <= f"{filters.end_date} 23:59:59")
    return conditions


class SqlGameSessionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_sessions(
        self, filters: GameSessionFilters, limit: int, skip: int
    ) -> tuple[Sequence[GameSessionRecord], int]:
        conditions = _date_conditions(filters)
        if filters.machine_id:
            conditions.append(GameSession.machine_id == filters.machine_id)
        if filters.outcome:
            conditions.append(GameSession.outcome == filters.outcome)

        total = int(
            (
                await self._session.execute(
                    select(func.count()).select_from(GameSession).where(*conditions)
                )
            ).scalar_one()
        )
        stmt = (
            select(GameSession)
            .where(*conditions)
            .order_by(desc(GameSession.created_at), desc(GameSession.id))
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()], total

    async def get_by_session_id(self, session_id: int) -> GameSessionRecord | None:
        stmt = select(GameSession).where(GameSession.session_id == session_id)
        model = (await self._session.execute(stmt)).scalar_one_or_none()
        return self._to_domain(model) if model is not None else None

    async def outcome_stats(self, machine_id: Optional[str] = None) -> Sequence[OutcomeStats]:
        stmt = select(
            GameSession.outcome,
            func.count(),
            func.avg(GameSession.final_score),
            func.max(GameSession.final_score),
            func.avg(GameSession.max_ante_reached),
        ).group_by(GameSession.outcome)
        if machine_id:
            stmt = stmt.where(GameSession.machine_id == machine_id)
        result = await self._session.execute(stmt.order_by(GameSession.outcome))
        return [
            OutcomeStats(
                outcome=outcome,
                count=int(count),
                avg_score=float(avg_score or 0),
                max_score=float(max_score or 0),
                avg_ante=float(avg_ante or 0),
            )
            for outcome, count, avg_score, max_score, avg_ante in result.all()
        ]

    async def machine_summaries(self, filters: GameSessionFilters) -> Sequence[MachineSummary]:
        outcome_columns = [
            func.sum(case((GameSession.outcome == outcome, 1), else_=0)).label(outcome)
            for outcome in OUTCOMES
        ]
        stmt = (
            select(
                GameSession.machine_id,
                func.count().label("total_sessions"),
                *outcome_columns,
                func.avg(GameSession.final_score).label("avg_final_score"),
                func.max(GameSession.final_score).label("max_final_score"),
                func.avg(GameSession.max_ante_reached).label("avg_max_ante"),
                func.max(GameSession.max_ante_reached).label("max_max_ante"),
                func.sum(GameSession.rounds_completed).label("total_rounds"),
                func.avg(GameSession.rounds_completed).label("avg_rounds"),
                func.max(GameSession.end_time).label("last_session_date"),
                func.sum(GameSession.starting_money).label("total_starting_money"),
                func.sum(GameSession.money_claimed).label("total_money_claimed"),
                func.sum(GameSession.session_net_profit).label("total_session_net_profit"),
            )
            .where(*_date_conditions(filters))
            .group_by(GameSession.machine_id)
            .order_by(desc("last_session_date"), GameSession.machine_id)
        )
        result = await self._session.execute(stmt)
        summaries = []
        for row in result.mappings().all():
            summaries.append(
                MachineSummary(
                    machine_id=row["machine_id"],
                    total_sessions=int(row["total_sessions"]),
                    outcomes={outcome: int(row[outcome] or 0) for outcome in OUTCOMES},
                    avg_final_score=float(row["avg_final_score"] or 0),
                    max_final_score=float(row["max_final_score"] or 0),
                    avg_max_ante=float(row["avg_max_ante"] or 0),
                    max_max_ante=int(row["max_max_ante"] or 0),
                    total_rounds=int(row["total_rounds"] or 0),
                    avg_rounds=float(row["avg_rounds"] or 0),
                    last_session_date=row["last_session_date"] or None,
                    total_starting_money=float(row["total_starting_money"] or 0),
                    total_money_claimed=float(row["total_money_claimed"] or 0),
                    total_session_net_profit=float(row["total_session_net_profit"] or 0),
                )
            )
        return summaries

    @staticmethod
    def _to_domain(model: GameSession) -> GameSessionRecord:
        return GameSessionRecord(
            session_id=int(model.session_id),
            machine_id=model.machine_id,
            run_number=int(model.run_number or 0),
            outcome=model.outcome,
            final_score=float(model.final_score or 0),
            max_ante_reached=int(model.max_ante_reached or 0),
            rounds_completed=int(model.rounds_completed or 0),
            time_spent_readable=model.time_spent_readable or "",
            start_time=model.start_time,
            end_time=model.end_time or "",
            starting_money=float(model.starting_money or 0),
            money_claimed=float(model.money_claimed or 0),
            session_net_profit=float(model.session_net_profit or 0),
            created_at=model.created_at,
        )

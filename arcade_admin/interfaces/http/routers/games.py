"""Read-only game-session statistics."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from arcade_admin.core.security import get_current_account
from arcade_admin.interfaces.http.deps import get_game_stats_service
from arcade_admin.modules.accounts.models import Account
from arcade_admin.modules.games.service import GameStatsService
from arcade_admin.schemas import ApiResponse, GameSessionOut, MachineSummaryOut, OutcomeStatsOut

router = APIRouter()


@router.get("", response_model=ApiResponse[list[GameSessionOut]], response_model_exclude_none=True)
@router.get(
    "/",
    response_model=ApiResponse[list[GameSessionOut]],
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def list_game_sessions(
    _: Account = Depends(get_current_account),
    machine_id: Optional[str] = Query(None),
    outcome: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = Query(50),
    skip: int = Query(0),
    service: GameStatsService = Depends(get_game_stats_service),
):
    filters = service.build_filters(machine_id, outcome, start_date, end_date)
    sessions, total = await service.list_sessions(filters, limit=limit, skip=skip)
    return ApiResponse(
        data=[GameSessionOut.model_validate(record) for record in sessions],
        count=len(sessions),
        total_count=total,
    )


@router.get("/stats", response_model=ApiResponse[list[OutcomeStatsOut]], response_model_exclude_none=True)
async def game_stats(
    _: Account = Depends(get_current_account),
    machine_id: Optional[str] = Query(None),
    service: GameStatsService = Depends(get_game_stats_service),
):
    stats = await service.outcome_stats(machine_id)
    return ApiResponse(data=[OutcomeStatsOut.model_validate(row) for row in stats])


@router.get("/machines", response_model=ApiResponse[list[MachineSummaryOut]], response_model_exclude_none=True)
async def machines(
    _: Account = Depends(get_current_account),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: GameStatsService = Depends(get_game_stats_service),
):
    summaries = await service.machines(service.build_filters(start_date=start_date, end_date=end_date))
    return ApiResponse(
        data=[MachineSummaryOut.from_domain(summary) for summary in summaries],
        total_count=len(summaries),
    )


@router.get("/{session_id}", response_model=ApiResponse[GameSessionOut], response_model_exclude_none=True)
async def get_game_session(
    session_id: int,
    _: Account = Depends(get_current_account),
    service: GameStatsService = Depends(get_game_stats_service),
):
    record = await service.get_session(session_id)
    return ApiResponse(data=GameSessionOut.model_validate(record))

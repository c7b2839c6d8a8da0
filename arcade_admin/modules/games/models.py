"""Read-only views over arcade game-session telemetry."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

OUTCOMES = ("win", "loss", "abandoned", "cash_out", "incomplete")


@dataclass(slots=True)
class GameSessionRecord:
    session_id: int
    machine_id: str
    run_number: int
    outcome: str
    final_score: float
    max_ante_reached: int
    rounds_completed: int
    time_spent_readable: str
    start_time: str
    end_time: str
    starting_money: float
    money_claimed: float
    session_net_profit: float
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class GameSessionFilters:
    machine_id: Optional[str] = None
    outcome: Optional[str] = None
    # calendar days, YYYY-MM-DD; compared against the start_time string
    start_date: Optional[str] = None
    end_date: Optional[str] = None


@dataclass(slots=True)
class OutcomeStats:
    outcome: str
    count: int
    avg_score: float
    max_score: float
    avg_ante: float


@dataclass(slots=True)
class MachineSummary:
    machine_id: str
    total_sessions: int = 0
    outcomes: dict[str, int] = field(default_factory=dict)
    avg_final_score: float = 0.0
    max_final_score: float = 0.0
    avg_max_ante: float = 0.0
    max_max_ante: int = 0
    total_rounds: int = 0
    avg_rounds: float = 0.0
    last_session_date: Optional[str] = None
    total_starting_money: float = 0.0
    total_money_claimed: float = 0.0
    total_session_net_profit: float = 0.0

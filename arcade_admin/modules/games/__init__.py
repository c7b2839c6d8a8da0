"""Game-session statistics."""

from .exceptions import GameSessionNotFoundError, InvalidGameQueryError
from .models import OUTCOMES, GameSessionFilters, GameSessionRecord, MachineSummary, OutcomeStats
from .repository import GameSessionRepository

__all__ = [
    "OUTCOMES",
    "GameSessionFilters",
    "GameSessionNotFoundError",
    "GameSessionRecord",
    "GameSessionRepository",
    "InvalidGameQueryError",
    "MachineSummary",
    "OutcomeStats",
]

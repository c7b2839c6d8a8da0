"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .services import (
    get_account_service,
    get_app_settings,
    get_audit_log_service,
    get_authorization_service,
    get_credit_ledger,
    get_game_stats_service,
    get_hierarchy_resolver,
)

__all__ = [
    "get_db_session",
    "get_account_service",
    "get_app_settings",
    "get_audit_log_service",
    "get_authorization_service",
    "get_credit_ledger",
    "get_game_stats_service",
    "get_hierarchy_resolver",
]

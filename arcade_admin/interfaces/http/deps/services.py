"""Service dependency providers."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.config import Settings
from arcade_admin.modules.accounts.service import AccountService
from arcade_admin.modules.audit.service import AuditLogService
from arcade_admin.modules.games.service import GameStatsService
from arcade_admin.modules.hierarchy.service import HierarchyResolver
from arcade_admin.modules.ledger.service import CreditLedger
from arcade_admin.modules.permissions.service import AuthorizationService

from .database import get_db_session


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_account_service(db: AsyncSession = Depends(get_db_session)) -> AccountService:
    return AccountService.with_session(db)


def get_hierarchy_resolver(db: AsyncSession = Depends(get_db_session)) -> HierarchyResolver:
    return HierarchyResolver.with_session(db)


def get_authorization_service(
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> AuthorizationService:
    return AuthorizationService.with_session(db, settings)


def get_credit_ledger(
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> CreditLedger:
    return CreditLedger.with_session(db, settings)


def get_audit_log_service(
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> AuditLogService:
    return AuditLogService.with_session(db, settings)


def get_game_stats_service(db: AsyncSession = Depends(get_db_session)) -> GameStatsService:
    return GameStatsService.with_session(db)


__all__ = [
    "get_account_service",
    "get_app_settings",
    "get_audit_log_service",
    "get_authorization_service",
    "get_credit_ledger",
    "get_game_stats_service",
    "get_hierarchy_resolver",
]

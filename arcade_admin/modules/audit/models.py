"""Audit log domain model."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from arcade_admin.db import models as orm


class ActionKind(str, Enum):
    # account lifecycle
    CREATE_USER = "CREATE_USER"
    UPDATE_USER = "UPDATE_USER"
    DELETE_USER = "DELETE_USER"
    BAN_USER = "BAN_USER"
    UNBAN_USER = "UNBAN_USER"
    # authentication
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    FAILED_LOGIN = "FAILED_LOGIN"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    # credit
    CREDIT_TRANSFER = "CREDIT_TRANSFER"
    CREDIT_ADJUSTMENT = "CREDIT_ADJUSTMENT"
    COMMISSION_PAYOUT = "COMMISSION_PAYOUT"
    # games
    GAME_START = "GAME_START"
    GAME_END = "GAME_END"
    BET_PLACED = "BET_PLACED"
    GAME_WIN = "GAME_WIN"
    GAME_LOSS = "GAME_LOSS"
    # administrative
    SYSTEM_CONFIG_CHANGE = "SYSTEM_CONFIG_CHANGE"
    BULK_OPERATION = "BULK_OPERATION"
    PROFILE_UPDATE = "PROFILE_UPDATE"
    SETTINGS_CHANGE = "SETTINGS_CHANGE"


class LogStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


SORTABLE_FIELDS = ("createdAt", "action", "status")


@dataclass(slots=True)
class ActorSummary:
    id: str
    username: str
    unique_id: str
    role: str


@dataclass(slots=True)
class AuditEntry:
    id: int
    actor_id: Optional[str]
    action: str
    status: str
    details: dict[str, Any]
    created_at: datetime
    resource_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    actor: Optional[ActorSummary] = None

    @classmethod
    def from_orm(cls, instance: orm.AuditLog, actor: Optional[orm.Account] = None) -> "AuditEntry":
        details: dict[str, Any] = {}
        if instance.details:
            try:
                details = json.loads(instance.details)
            except json.JSONDecodeError:
                details = {}
        summary = None
        if actor is not None:
            summary = ActorSummary(
                id=actor.id, username=actor.username, unique_id=actor.unique_id, role=actor.role
            )
        return cls(
            id=int(instance.id),
            actor_id=instance.actor_id,
            action=instance.action,
            status=instance.status,
            details=details,
            created_at=instance.created_at,
            resource_id=instance.resource_id,
            ip_address=instance.ip_address,
            user_agent=instance.user_agent,
            actor=summary,
        )


@dataclass(slots=True)
class AuditFilters:
    actor_id: Optional[str] = None
    action: Optional[str] = None
    status: Optional[str] = None
    resource_id: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass(slots=True)
class Pagination:
    page: int = 1
    limit: int = 50
    sort_by: str = "createdAt"
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(slots=True)
class AuditPage:
    entries: list[AuditEntry]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return -(-self.total // self.limit)


@dataclass(slots=True)
class AuditStats:
    total_logs: int = 0
    success_count: int = 0
    failed_count: int = 0
    action_breakdown: dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if not self.total_logs:
            return 0.0
        return self.success_count / self.total_logs * 100

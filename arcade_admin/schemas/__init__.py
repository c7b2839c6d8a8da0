"""Pydantic schemas used across the project.

Everything on the wire is camelCase; Python attributes stay snake_case.
"""
from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from arcade_admin.modules.accounts.models import Account
from arcade_admin.modules.audit.models import AuditEntry, AuditStats
from arcade_admin.modules.games.models import MachineSummary
from arcade_admin.modules.hierarchy.models import HierarchyStats
from arcade_admin.modules.ledger.models import CreditTransactionRecord

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PaginationMeta(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ApiResponse(BaseModel, Generic[T]):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None
    count: Optional[int] = None
    total_count: Optional[int] = Field(default=None, alias="totalCount")
    pagination: Optional[PaginationMeta] = None


# ---- auth -----------------------------------------------------------------


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(ApiModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(ApiModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


# ---- accounts -------------------------------------------------------------


class AccountOut(ApiModel):
    id: str
    username: str
    email: Optional[str] = None
    role: str
    unique_id: str
    parent_id: Optional[str] = None
    created_by: Optional[str] = None
    credit_balance: float
    play_points: float = 0
    win_points: float = 0
    claim_points: float = 0
    end_points: float = 0
    is_active: bool
    is_banned: bool
    is_online: bool
    status: str
    commission_rate: float = 0
    total_commission_earned: float = 0
    last_login: Optional[datetime] = None
    last_activity: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountOut":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            role=account.role,
            unique_id=account.unique_id,
            parent_id=account.parent_id,
            created_by=account.created_by,
            credit_balance=account.balance,
            play_points=account.play_points,
            win_points=account.win_points,
            claim_points=account.claim_points,
            end_points=account.end_points,
            is_active=account.is_active,
            is_banned=account.is_banned,
            is_online=account.is_online,
            status=account.status,
            commission_rate=account.commission_rate,
            total_commission_earned=account.total_commission_earned,
            last_login=account.last_login_at,
            last_activity=account.last_activity_at,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class LoginResult(ApiModel):
    user: AccountOut
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class CreateUserRequest(ApiModel):
    username: str
    password: str
    role: str
    email: Optional[str] = None
    commission_rate: float = 0
    created_by: Optional[str] = None
    is_active: bool = True


class UpdateUserRequest(ApiModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    commission_rate: Optional[float] = None


class CreditAmountRequest(ApiModel):
    # validated by the ledger so malformed values map to INVALID_AMOUNT
    amount: Any = None


class AdjustmentOut(ApiModel):
    user: AccountOut
    amount: float
    balance_before: float
    balance_after: float


class TransferOut(ApiModel):
    from_user: AccountOut
    to_user: AccountOut
    amount: float


class CreditTransactionOut(ApiModel):
    id: str
    account_id: str
    counterparty_id: Optional[str] = None
    actor_id: str
    type: str
    amount: float
    balance_after: float
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, record: CreditTransactionRecord) -> "CreditTransactionOut":
        return cls.model_validate(record)


class HierarchyStatsOut(ApiModel):
    counts_by_role: dict[str, int]
    total_balance: float
    total_super_distributors: Optional[int] = None
    total_distributors: int
    total_retailers: int
    total_users: int
    total_points: float

    @classmethod
    def from_domain(cls, stats: HierarchyStats) -> "HierarchyStatsOut":
        return cls(
            counts_by_role=stats.counts_by_role,
            total_balance=stats.total_balance,
            total_super_distributors=stats.total_super_distributors,
            total_distributors=stats.total_distributors,
            total_retailers=stats.total_retailers,
            total_users=stats.total_users,
            total_points=stats.total_balance,
        )


# ---- audit ----------------------------------------------------------------


class ActorOut(ApiModel):
    id: str
    username: str
    unique_id: str
    role: str


class AuditEntryOut(ApiModel):
    id: int
    actor_id: Optional[str] = None
    actor: Optional[ActorOut] = None
    action: str
    status: str
    resource_id: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, entry: AuditEntry) -> "AuditEntryOut":
        return cls.model_validate(entry)


class AuditStatsOut(ApiModel):
    total_logs: int
    success_count: int
    failed_count: int
    success_rate: float
    action_breakdown: dict[str, int]

    @classmethod
    def from_domain(cls, stats: AuditStats) -> "AuditStatsOut":
        return cls(
            total_logs=stats.total_logs,
            success_count=stats.success_count,
            failed_count=stats.failed_count,
            success_rate=stats.success_rate,
            action_breakdown=stats.action_breakdown,
        )


# ---- games (telemetry field names are kept as recorded) -------------------


class GameSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class OutcomeStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outcome: str
    count: int
    avg_score: float
    max_score: float
    avg_ante: float


class MachineSummaryOut(BaseModel):
    machine_id: str
    total_sessions: int
    wins: int
    losses: int
    abandoned: int
    cash_out: int
    incomplete: int
    avg_final_score: float
    max_final_score: float
    avg_max_ante: float
    max_max_ante: int
    total_rounds: int
    avg_rounds: float
    last_session_date: Optional[str] = None
    total_starting_money: float
    total_money_claimed: float
    total_session_net_profit: float

    @classmethod
    def from_domain(cls, summary: MachineSummary) -> "MachineSummaryOut":
        return cls(
            machine_id=summary.machine_id,
            total_sessions=summary.total_sessions,
            wins=summary.outcomes.get("win", 0),
            losses=summary.outcomes.get("loss", 0),
            abandoned=summary.outcomes.get("abandoned", 0),
            cash_out=summary.outcomes.get("cash_out", 0),
            incomplete=summary.outcomes.get("incomplete", 0),
            avg_final_score=summary.avg_final_score,
            max_final_score=summary.max_final_score,
            avg_max_ante=summary.avg_max_ante,
            max_max_ante=summary.max_max_ante,
            total_rounds=summary.total_rounds,
            avg_rounds=summary.avg_rounds,
            last_session_date=summary.last_session_date,
            total_starting_money=summary.total_starting_money,
            total_money_claimed=summary.total_money_claimed,
            total_session_net_profit=summary.total_session_net_profit,
        )


class HealthResponse(BaseModel):
    status: str
    environment: str
    version: str

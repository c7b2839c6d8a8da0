"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text

from arcade_admin.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    email = Column(String(100))
    role = Column(String(20), nullable=False, index=True)
    unique_id = Column(String(20), unique=True, nullable=False)
    # plain column rather than a foreign key: deleting a creator leaves its
    # children in place and hierarchy queries skip the missing node
    created_by = Column(String(36), index=True)

    balance = Column(Float, nullable=False, default=0)
    play_points = Column(Float, nullable=False, default=0)
    win_points = Column(Float, nullable=False, default=0)
    claim_points = Column(Float, nullable=False, default=0)
    end_points = Column(Float, nullable=False, default=0)

    is_active = Column(Boolean, nullable=False, default=True)
    is_online = Column(Boolean, nullable=False, default=False, index=True)
    is_banned = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="active", index=True)

    commission_rate = Column(Float, nullable=False, default=0)
    total_commission_earned = Column(Float, nullable=False, default=0)

    last_login_at = Column(DateTime(timezone=True))
    last_activity_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)


class CreditTransaction(Base):
    __tablename__ = "credit_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), nullable=False, index=True)
    counterparty_id = Column(String(36))
    actor_id = Column(String(36), nullable=False)
    type = Column(String(20), nullable=False)  # adjustment, transfer_out, transfer_in
    amount = Column(Float, nullable=False)
    balance_after = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(String(36), index=True)
    action = Column(String(40), nullable=False, index=True)
    status = Column(String(10), nullable=False, default="SUCCESS")
    resource_id = Column(String(64), index=True)
    details = Column(Text)
    description = Column(String(255))
    target_username = Column(String(50))
    ip_address = Column(String(45))
    user_agent = Column(String(255))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)


class GameSession(Base):
    __tablename__ = "game_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, unique=True, nullable=False, index=True)
    machine_id = Column(String(50), nullable=False, default="arcade_001", index=True)
    run_number = Column(Integer, nullable=False, default=1)
    outcome = Column(String(20), nullable=False, default="incomplete")
    final_score = Column(Float, nullable=False, default=0)
    max_ante_reached = Column(Integer, nullable=False, default=0)
    rounds_completed = Column(Integer, nullable=False, default=0)
    time_spent_readable = Column(String(30), default="")
    start_time = Column(String(19), nullable=False)
    end_time = Column(String(19), default="")
    starting_money = Column(Float, nullable=False, default=0)
    money_claimed = Column(Float, nullable=False, default=0)
    session_net_profit = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

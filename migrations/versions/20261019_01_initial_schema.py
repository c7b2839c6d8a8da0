"""create accounts, credit ledger, audit log and game session tables

Revision ID: 3f6c1a9d2b70
Revises: 
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f6c1a9d2b70"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=100)),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("unique_id", sa.String(length=20), nullable=False),
        sa.Column("created_by", sa.String(length=36)),
        sa.Column("balance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("play_points", sa.Float(), nullable=False, server_default="0"),
        sa.Column("win_points", sa.Float(), nullable=False, server_default="0"),
        sa.Column("claim_points", sa.Float(), nullable=False, server_default="0"),
        sa.Column("end_points", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_online", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_banned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("commission_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_commission_earned", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        sa.Column("last_activity_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("unique_id", name="uq_accounts_unique_id"),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)
    op.create_index("ix_accounts_role", "accounts", ["role"])
    op.create_index("ix_accounts_created_by", "accounts", ["created_by"])
    op.create_index("ix_accounts_is_online", "accounts", ["is_online"])
    op.create_index("ix_accounts_status", "accounts", ["status"])
    op.create_index("ix_accounts_created_at", "accounts", ["created_at"])

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("account_id", sa.String(length=36), nullable=False),
        sa.Column("counterparty_id", sa.String(length=36)),
        sa.Column("actor_id", sa.String(length=36), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("balance_after", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_credit_transactions_account_id", "credit_transactions", ["account_id"])
    op.create_index("ix_credit_transactions_created_at", "credit_transactions", ["created_at"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(length=36)),
        sa.Column("action", sa.String(length=40), nullable=False),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="SUCCESS"),
        sa.Column("resource_id", sa.String(length=64)),
        sa.Column("details", sa.Text()),
        sa.Column("description", sa.String(length=255)),
        sa.Column("target_username", sa.String(length=50)),
        sa.Column("ip_address", sa.String(length=45)),
        sa.Column("user_agent", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_resource_id", "audit_logs", ["resource_id"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("session_id", sa.Integer(), nullable=False),
        sa.Column("machine_id", sa.String(length=50), nullable=False, server_default="arcade_001"),
        sa.Column("run_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("outcome", sa.String(length=20), nullable=False, server_default="incomplete"),
        sa.Column("final_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("max_ante_reached", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rounds_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("time_spent_readable", sa.String(length=30), server_default=""),
        sa.Column("start_time", sa.String(length=19), nullable=False),
        sa.Column("end_time", sa.String(length=19), server_default=""),
        sa.Column("starting_money", sa.Float(), nullable=False, server_default="0"),
        sa.Column("money_claimed", sa.Float(), nullable=False, server_default="0"),
        sa.Column("session_net_profit", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_game_sessions_session_id", "game_sessions", ["session_id"], unique=True)
    op.create_index("ix_game_sessions_machine_id", "game_sessions", ["machine_id"])


def downgrade() -> None:
    op.drop_index("ix_game_sessions_machine_id", table_name="game_sessions")
    op.drop_index("ix_game_sessions_session_id", table_name="game_sessions")
    op.drop_table("game_sessions")

    op.drop_index("ix_audit_logs_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_logs_resource_id", table_name="audit_logs")
    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("ix_credit_transactions_created_at", table_name="credit_transactions")
    op.drop_index("ix_credit_transactions_account_id", table_name="credit_transactions")
    op.drop_table("credit_transactions")

    op.drop_index("ix_accounts_created_at", table_name="accounts")
    op.drop_index("ix_accounts_status", table_name="accounts")
    op.drop_index("ix_accounts_is_online", table_name="accounts")
    op.drop_index("ix_accounts_created_by", table_name="accounts")
    op.drop_index("ix_accounts_role", table_name="accounts")
    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")

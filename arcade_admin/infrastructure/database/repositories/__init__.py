"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .audit_repository import SqlAuditRepository
from .credit_transaction_repository import SqlCreditTransactionRepository
from .game_session_repository import SqlGameSessionRepository

__all__ = [
    "SqlAccountRepository",
    "SqlAuditRepository",
    "SqlCreditTransactionRepository",
    "SqlGameSessionRepository",
]

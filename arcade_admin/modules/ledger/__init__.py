"""Credit ledger: balance adjustments and transfers."""

from .exceptions import InsufficientBalanceError, InvalidAmountError
from .models import AdjustmentResult, CreditTransactionRecord, TransactionType, TransferResult
from .repository import CreditTransactionRepository

__all__ = [
    "AdjustmentResult",
    "CreditTransactionRecord",
    "CreditTransactionRepository",
    "InsufficientBalanceError",
    "InvalidAmountError",
    "TransactionType",
    "TransferResult",
]

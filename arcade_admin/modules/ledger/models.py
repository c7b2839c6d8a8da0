"""Ledger domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from arcade_admin.modules.accounts.models import Account


class TransactionType(str, Enum):
    ADJUSTMENT = "adjustment"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"


@dataclass(slots=True)
class CreditTransactionRecord:
    id: str
    account_id: str
    actor_id: str
    type: str
    amount: float
    balance_after: float
    counterparty_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class AdjustmentResult:
    account: Account
    balance_before: float
    delta: float


@dataclass(slots=True)
class TransferResult:
    source: Account
    target: Account
    amount: float
    target_balance_before: float

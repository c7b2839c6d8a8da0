"""Repository protocol for credit transactions."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .models import CreditTransactionRecord


class CreditTransactionRepository(Protocol):
    async def add_transaction(
        self,
        *,
        account_id: str,
        actor_id: str,
        type: str,
        amount: float,
        balance_after: float,
        counterparty_id: Optional[str] = None,
    ) -> CreditTransactionRecord:
        ...

    async def list_transactions(
        self, account_id: str, limit: int = 50, offset: int = 0
    ) -> Sequence[CreditTransactionRecord]:
        ...

    async def count_transactions(self, account_id: str) -> int:
        ...

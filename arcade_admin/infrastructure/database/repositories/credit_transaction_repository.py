"""SQLAlchemy implementation for the credit ledger."""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.db.models import CreditTransaction
from arcade_admin.modules.ledger.models import CreditTransactionRecord


class SqlCreditTransactionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

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
        tx = CreditTransaction(
            account_id=account_id,
            actor_id=actor_id,
            counterparty_id=counterparty_id,
            type=type,
            amount=amount,
            balance_after=balance_after,
        )
        self.session.add(tx)
        await self.session.flush()
        return self._to_domain(tx)

    async def list_transactions(
        self, account_id: str, limit: int = 50, offset: int = 0
    ) -> Sequence[CreditTransactionRecord]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.account_id == account_id)
            .order_by(desc(CreditTransaction.created_at), CreditTransaction.id)
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def count_transactions(self, account_id: str) -> int:
        stmt = select(func.count()).select_from(CreditTransaction).where(
            CreditTransaction.account_id == account_id
        )
        return int((await self.session.execute(stmt)).scalar_one())

    @staticmethod
    def _to_domain(model: CreditTransaction) -> CreditTransactionRecord:
        return CreditTransactionRecord(
            id=model.id,
            account_id=model.account_id,
            actor_id=model.actor_id,
            counterparty_id=model.counterparty_id,
            type=model.type,
            amount=float(model.amount),
            balance_after=float(model.balance_after),
            created_at=model.created_at,
        )

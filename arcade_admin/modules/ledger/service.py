"""Credit ledger service: guarded balance adjustments and transfers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from arcade_admin.core.config import Settings, get_settings
from arcade_admin.core.errors import InvalidInputError
from arcade_admin.infrastructure.database.repositories.account_repository import SqlAccountRepository
from arcade_admin.infrastructure.database.repositories.credit_transaction_repository import (
    SqlCreditTransactionRepository,
)
from arcade_admin.modules.accounts.exceptions import AccountNotFoundError
from arcade_admin.modules.accounts.models import Account
from arcade_admin.modules.accounts.repository import AccountRepository
from arcade_admin.modules.hierarchy.service import HierarchyResolver
from arcade_admin.modules.permissions.policy import Operation
from arcade_admin.modules.permissions.service import AuthorizationService

from .exceptions import InsufficientBalanceError, InvalidAmountError
from .models import AdjustmentResult, CreditTransactionRecord, TransactionType, TransferResult
from .repository import CreditTransactionRepository

logger = logging.getLogger(__name__)


def parse_amount(value: Any, *, allow_negative: bool = False) -> float:
    """Accept real JSON numbers only: no booleans, strings, NaN or infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidAmountError()
    amount = float(value)
    if not math.isfinite(amount) or amount == 0:
        raise InvalidAmountError()
    if amount < 0 and not allow_negative:
        raise InvalidAmountError("Amount must be a positive number")
    return amount


@dataclass(slots=True)
class CreditLedger:
    accounts: AccountRepository
    transactions: CreditTransactionRepository
    authorization: AuthorizationService
    enforce_non_negative_adjust: bool = True

    @classmethod
    def with_session(cls, session: AsyncSession, settings: Settings | None = None) -> "CreditLedger":
        settings = settings or get_settings()
        accounts = SqlAccountRepository(session)
        return cls(
            accounts=accounts,
            transactions=SqlCreditTransactionRepository(session),
            authorization=AuthorizationService(
                HierarchyResolver(accounts),
                restrict_to_subtree=settings.permissions.restrict_to_subtree,
            ),
            enforce_non_negative_adjust=settings.credit.enforce_non_negative_adjust,
        )

    async def adjust(self, target_id: str, delta: Any, actor: Account) -> AdjustmentResult:
        """Add ``delta`` (which may be negative) to the target's balance."""
        amount = parse_amount(delta, allow_negative=True)
        target = await self._require(target_id)
        await self.authorization.ensure(actor, target, Operation.CREDIT)

        floor = 0.0 if self.enforce_non_negative_adjust else None
        updated = await self.accounts.apply_balance_delta(target.id, amount, floor=floor)
        if updated is None:
            await self._require(target_id)
            raise InsufficientBalanceError("Adjustment would make the balance negative")

        await self.transactions.add_transaction(
            account_id=updated.id,
            actor_id=actor.id,
            type=TransactionType.ADJUSTMENT.value,
            amount=amount,
            balance_after=updated.balance,
        )
        logger.info(
            "Credit adjusted by %s for %s: %+.2f (balance %.2f -> %.2f)",
            actor.username,
            updated.username,
            amount,
            target.balance,
            updated.balance,
        )
        return AdjustmentResult(account=updated, balance_before=target.balance, delta=amount)

    async def transfer(self, target_id: str, amount: Any, actor: Account) -> TransferResult:
        """Move ``amount`` from the actor's own balance to the target.

        The debit is a compare-and-swap on the actor's balance, so concurrent
        transfers cannot overdraw it. Both writes go through the caller's
        session and commit together; a credit step that finds no row reverses
        the debit before failing.
        """
        value = parse_amount(amount)
        if target_id == actor.id:
            raise InvalidInputError("Cannot transfer credit to yourself")

        target = await self._require(target_id)
        source = await self._require(actor.id)
        if source.balance < value:
            raise InsufficientBalanceError()
        await self.authorization.ensure(source, target, Operation.CREDIT)

        debited = await self.accounts.apply_balance_delta(source.id, -value, floor=0.0)
        if debited is None:
            raise InsufficientBalanceError()

        credited = await self.accounts.apply_balance_delta(target.id, value, floor=None)
        if credited is None:
            await self.accounts.apply_balance_delta(source.id, value, floor=None)
            logger.error("Transfer credit step found no account %s; debit reversed", target.id)
            raise AccountNotFoundError()

        await self.transactions.add_transaction(
            account_id=debited.id,
            actor_id=actor.id,
            counterparty_id=credited.id,
            type=TransactionType.TRANSFER_OUT.value,
            amount=-value,
            balance_after=debited.balance,
        )
        await self.transactions.add_transaction(
            account_id=credited.id,
            actor_id=actor.id,
            counterparty_id=debited.id,
            type=TransactionType.TRANSFER_IN.value,
            amount=value,
            balance_after=credited.balance,
        )
        logger.info(
            "Credit transferred: %.2f from %s to %s", value, debited.username, credited.username
        )
        return TransferResult(
            source=debited,
            target=credited,
            amount=value,
            target_balance_before=target.balance,
        )

    async def history(
        self,
        account_id: str,
        actor: Account,
        *,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[CreditTransactionRecord], int]:
        target = await self._require(account_id)
        await self.authorization.ensure(actor, target, Operation.READ)
        records = await self.transactions.list_transactions(target.id, limit, offset)
        total = await self.transactions.count_transactions(target.id)
        return records, total

    async def _require(self, account_id: str) -> Account:
        account = await self.accounts.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account

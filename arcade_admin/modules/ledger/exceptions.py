"""Ledger errors."""

from arcade_admin.core.errors import AppError, ErrorKind, InvalidInputError


class InvalidAmountError(InvalidInputError):
    default_message = "Invalid amount provided"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message, code="INVALID_AMOUNT")


class InsufficientBalanceError(AppError):
    kind = ErrorKind.INSUFFICIENT_BALANCE
    default_message = "Insufficient balance"

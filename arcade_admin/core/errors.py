"""Error taxonomy shared by every module and mapped onto HTTP responses."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INTERNAL = "INTERNAL"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INSUFFICIENT_BALANCE: 400,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """Base class for errors that surface to callers as a structured envelope."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.code = code or self.kind.value
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class InvalidInputError(AppError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid request"


class UnauthenticatedError(AppError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "Authentication required"


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


__all__ = [
    "AppError",
    "ConflictError",
    "ErrorKind",
    "ForbiddenError",
    "InvalidInputError",
    "NotFoundError",
    "UnauthenticatedError",
]

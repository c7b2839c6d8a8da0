"""Account domain specific exceptions."""

from arcade_admin.core.errors import (
    AppError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)


class AccountError(AppError):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(ConflictError, AccountError):
    """Raised when attempting to create an account with duplicate username."""

    default_message = "Username already exists"


class AccountNotFoundError(NotFoundError, AccountError):
    """Raised when the requested account cannot be found."""

    default_message = "User not found"


class AccountAlreadyBannedError(ConflictError, AccountError):
    default_message = "User is already banned"


class AccountNotBannedError(ConflictError, AccountError):
    default_message = "User is not banned"


class InvalidCredentialsError(UnauthenticatedError, AccountError):
    default_message = "Invalid credentials"


class AccountDisabledError(UnauthenticatedError, AccountError):
    default_message = "Account is inactive or banned"


class InvalidAccountDataError(InvalidInputError, AccountError):
    default_message = "Invalid account data"

"""Account domain exports (services are imported from ``.service``)."""

from .exceptions import (
    AccountAlreadyBannedError,
    AccountAlreadyExistsError,
    AccountDisabledError,
    AccountError,
    AccountNotBannedError,
    AccountNotFoundError,
    InvalidAccountDataError,
    InvalidCredentialsError,
)
from .models import (
    UNSET,
    Account,
    AccountCreateInput,
    AccountStatus,
    AccountUpdateInput,
    Role,
)
from .repository import AccountRepository

__all__ = [
    "UNSET",
    "Account",
    "AccountAlreadyBannedError",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountDisabledError",
    "AccountError",
    "AccountNotBannedError",
    "AccountNotFoundError",
    "AccountRepository",
    "AccountStatus",
    "AccountUpdateInput",
    "InvalidAccountDataError",
    "InvalidCredentialsError",
    "Role",
]

"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Role(str, Enum):
    ADMIN = "admin"
    SUPER_DISTRIBUTOR = "super_distributor"
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"
    USER = "user"

    @property
    def rank(self) -> int:
        return ROLE_RANKS[self]

    @property
    def unique_id_prefix(self) -> str:
        return UNIQUE_ID_PREFIXES[self]

    @classmethod
    def parse(cls, value: object) -> Optional["Role"]:
        """Return the matching role, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


ROLE_RANKS = {
    Role.ADMIN: 5,
    Role.SUPER_DISTRIBUTOR: 4,
    Role.DISTRIBUTOR: 3,
    Role.RETAILER: 2,
    Role.USER: 1,
}

UNIQUE_ID_PREFIXES = {
    Role.ADMIN: "ADM",
    Role.SUPER_DISTRIBUTOR: "SD",
    Role.DISTRIBUTOR: "D",
    Role.RETAILER: "R",
    Role.USER: "U",
}


class AccountStatus(str, Enum):
    ACTIVE = "active"
    BANNED = "banned"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


@dataclass(slots=True)
class Account:
    id: str
    username: str
    role: str
    unique_id: str
    password_hash: str = field(repr=False)
    email: Optional[str] = None
    created_by: Optional[str] = None
    balance: float = 0.0
    play_points: float = 0.0
    win_points: float = 0.0
    claim_points: float = 0.0
    end_points: float = 0.0
    is_active: bool = True
    is_online: bool = False
    is_banned: bool = False
    status: str = AccountStatus.ACTIVE.value
    commission_rate: float = 0.0
    total_commission_earned: float = 0.0
    last_login_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def parent_id(self) -> Optional[str]:
        return self.created_by

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def can_authenticate(self) -> bool:
        return self.is_active and not self.is_banned


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    password: str
    role: str = Role.USER.value
    email: Optional[str] = None
    commission_rate: float = 0.0
    created_by: Optional[str] = None
    is_active: bool = True


# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()


@dataclass(slots=True)
class AccountUpdateInput:
    username: Optional[str] | object = UNSET
    email: Optional[str] | object = UNSET
    password: Optional[str] | object = UNSET
    role: Optional[str] | object = UNSET
    is_active: Optional[bool] | object = UNSET
    commission_rate: Optional[float] | object = UNSET

    def provided(self) -> dict[str, object]:
        return {
            name: getattr(self, name)
            for name in self.__slots__
            if getattr(self, name) is not UNSET
        }

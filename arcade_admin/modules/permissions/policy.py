"""Role-based authorization rules for the distribution hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from arcade_admin.modules.accounts.models import Account, Role


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    BAN = "ban"
    CREDIT = "credit"


# actor role -> roles it may act upon; roles absent from the table manage nothing
MANAGEABLE_ROLES: Mapping[Role, frozenset[Role]] = {
    Role.ADMIN: frozenset(Role),
    Role.SUPER_DISTRIBUTOR: frozenset({Role.DISTRIBUTOR, Role.RETAILER, Role.USER}),
    Role.DISTRIBUTOR: frozenset({Role.RETAILER, Role.USER}),
    Role.RETAILER: frozenset({Role.USER}),
    Role.USER: frozenset(),
}


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    return Decision(False, reason)


def manageable_roles(actor_role: object) -> frozenset[Role]:
    role = Role.parse(actor_role)
    if role is None:
        return frozenset()
    return MANAGEABLE_ROLES.get(role, frozenset())


def can_manage_role(actor_role: object, target_role: object) -> bool:
    target = Role.parse(target_role)
    return target is not None and target in manageable_roles(actor_role)


def authorize(actor: Account, target: Account, operation: Operation) -> Decision:
    """Decide whether ``actor`` may perform ``operation`` on ``target``.

    Only the role classes are compared here; whether the target sits in the
    actor's own subtree is a separate, optional check.
    """
    if operation is Operation.READ and actor.id == target.id:
        return ALLOW
    if Role.parse(actor.role) is None:
        return deny(f"unrecognised actor role {actor.role!r}")
    if not can_manage_role(actor.role, target.role):
        return deny(f"{actor.role} may not {operation.value} {target.role} accounts")
    return ALLOW

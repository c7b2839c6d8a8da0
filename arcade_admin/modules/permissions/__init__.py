"""Authorization rules and the policy-enforcing service."""

from .exceptions import AccessDeniedError
from .policy import (
    ALLOW,
    MANAGEABLE_ROLES,
    Decision,
    Operation,
    authorize,
    can_manage_role,
    deny,
    manageable_roles,
)

__all__ = [
    "ALLOW",
    "MANAGEABLE_ROLES",
    "AccessDeniedError",
    "Decision",
    "Operation",
    "authorize",
    "can_manage_role",
    "deny",
    "manageable_roles",
]

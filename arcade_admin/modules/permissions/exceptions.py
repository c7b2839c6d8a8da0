"""Authorization errors."""

from arcade_admin.core.errors import ForbiddenError


class AccessDeniedError(ForbiddenError):
    """Raised when the actor's role may not act on the target."""

    default_message = "Access denied"

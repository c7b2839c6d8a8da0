"""Audit query errors."""

from arcade_admin.core.errors import InvalidInputError


class InvalidAuditQueryError(InvalidInputError):
    default_message = "Invalid log query"

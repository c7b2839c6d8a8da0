"""Game statistics errors."""

from arcade_admin.core.errors import InvalidInputError, NotFoundError


class GameSessionNotFoundError(NotFoundError):
    default_message = "Game session not found"


class InvalidGameQueryError(InvalidInputError):
    default_message = "Invalid game session query"

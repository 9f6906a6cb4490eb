"""
Error Taxonomy

Exceptions raised by the puzzle core and its collaborators. Controllers map
them onto HTTP status codes; the game service absorbs the recoverable ones.
"""


class PuzzleHubError(Exception):
    """Base class for all puzzle hub errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFoundError(PuzzleHubError):
    """A puzzle (or session) id has no matching definition."""


class LoadError(PuzzleHubError):
    """Storage was unreachable while loading a puzzle."""


class ValidationRejected(PuzzleHubError):
    """A guess failed the length or dictionary check. Consumes no attempt."""


class PersistenceFailure(PuzzleHubError):
    """Appending a result record failed. Logged only, never surfaced."""


class DictionaryUnavailable(PuzzleHubError):
    """The dictionary service could not be reached (treated as a pass)."""


class AuthenticationError(PuzzleHubError):
    """Admin credentials or token were rejected."""


class PuzzleValidationError(PuzzleHubError):
    """An authored puzzle definition is malformed."""


_STATUS_CODES = (
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (PuzzleValidationError, 400),
    (ValidationRejected, 400),
    (LoadError, 503),
    (DictionaryUnavailable, 503),
    (PersistenceFailure, 500),
)


def http_status(error: Exception) -> int:
    """HTTP status a controller answers with for this error."""
    for error_type, status in _STATUS_CODES:
        if isinstance(error, error_type):
            return status
    if isinstance(error, ValueError):
        return 400
    return 500

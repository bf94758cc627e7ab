from __future__ import annotations


class PuzzleError(Exception):
    """Base class for puzzle engine errors."""


# PUBLIC_INTERFACE
class ConfigurationError(PuzzleError):
    """The puzzle has no usable variants; the game cannot be played."""

    default_message = "No puzzle available."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


# PUBLIC_INTERFACE
class GuessValidationError(PuzzleError, ValueError):
    """A guess is malformed (wrong length, bad characters, ...).

    Recoverable: the caller shows the message inline and does not count
    a mistake.
    """


# PUBLIC_INTERFACE
class ConflictError(PuzzleError):
    """An assignment or submission already exists for (user, game)."""


# PUBLIC_INTERFACE
class NetworkError(PuzzleError):
    """A transient failure talking to the authoritative side."""


# PUBLIC_INTERFACE
class ReviewModeError(PuzzleError):
    """A mutation or check was attempted on a game that is in review mode."""

"""Exception hierarchy shared by the quiz core, the API, and the teacher console."""

from __future__ import annotations


class QuizArenaError(Exception):
    """Base class for all errors raised by the quiz core."""


class ValidationError(QuizArenaError, ValueError):
    """Raised when caller-supplied input is missing or invalid."""


class SessionStateError(QuizArenaError, RuntimeError):
    """Raised when a session operation is not allowed in the current state."""


class PersistenceError(QuizArenaError):
    """Raised when the quiz store cannot read or write its data."""


class GenerationError(QuizArenaError):
    """Raised when the AI quiz generator fails or returns a malformed quiz."""

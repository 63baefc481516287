"""Base exceptions for the domain layer."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain level exceptions."""


class NotFoundError(DomainError):
    """Raised when an entity cannot be located."""


class NoNoteSelectedError(DomainError):
    """Raised when an operation needs a selected note and there is none."""


class RecognitionError(DomainError):
    """Raised by a recognition engine that cannot honour a request."""


class RecognitionUnsupportedError(RecognitionError):
    """Raised when no speech recognition engine is available."""


# Alias to keep a generic name for error type hints
Error = DomainError

__all__ = [
    "DomainError",
    "NotFoundError",
    "NoNoteSelectedError",
    "RecognitionError",
    "RecognitionUnsupportedError",
    "Error",
]

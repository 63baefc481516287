"""Core library exposing domain models, settings, exceptions and messages."""

from .settings import Settings, get_settings
from .exceptions import (
    DomainError,
    NotFoundError,
    NoNoteSelectedError,
    RecognitionError,
    RecognitionUnsupportedError,
    Error,
)
from .models import Note, ResultEntry, RecordingState, RecordingStatus
from .i18n import I18n, get_i18n

__all__ = [
    "Settings",
    "get_settings",
    "DomainError",
    "NotFoundError",
    "NoNoteSelectedError",
    "RecognitionError",
    "RecognitionUnsupportedError",
    "Error",
    "Note",
    "ResultEntry",
    "RecordingState",
    "RecordingStatus",
    "I18n",
    "get_i18n",
]

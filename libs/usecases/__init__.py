"""Application use cases: list projection, dictation merge and the notes session."""

from .projection import project_notes
from .transcript import TranscriptMerger
from .session import NotesSession

__all__ = ["project_notes", "TranscriptMerger", "NotesSession"]

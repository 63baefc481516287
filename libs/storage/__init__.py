"""Local persistence for the note collection."""

from .notes_storage import JsonBlobStore
from .debounce import DebouncedSave

__all__ = ["JsonBlobStore", "DebouncedSave"]

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from libs.core.models import Note

logger = logging.getLogger(__name__)


class JsonBlobStore:
    """Key-value blob store for the note collection.

    The file holds a JSON object; the whole collection is one array stored
    under a single fixed key. Reads never fail: a missing or unreadable
    file yields an empty collection. Writes are best effort.
    """

    def __init__(self, path: Path, key: str = "notes_app_v1") -> None:
        self.path = Path(path)
        self.key = key

    # ------------------------------------------------------------------
    # public API
    def load(self) -> List[Note]:
        """Return the stored notes, or an empty list on absence or corruption."""

        blob = self._read_blob()
        records = blob.get(self.key)
        if records is None:
            return []
        if not isinstance(records, list):
            logger.warning("Stored notes are not a list, ignoring", extra={"path": str(self.path)})
            return []
        return _parse_records(records)

    def save(self, notes: Iterable[Note]) -> None:
        """Persist ``notes`` under the store key; failures are logged, not raised."""

        try:
            blob = self._read_blob()
            blob[self.key] = [note.to_record() for note in notes]
            self._write_blob(blob)
        except (OSError, TypeError, ValueError):
            logger.warning("Saving notes failed", exc_info=True, extra={"path": str(self.path)})

    # ------------------------------------------------------------------
    # helpers
    def _read_blob(self) -> Dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            logger.warning("Notes file unreadable", exc_info=True, extra={"path": str(self.path)})
            return {}
        try:
            data = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError:
            logger.warning("Notes file is corrupt, starting empty", extra={"path": str(self.path)})
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def _write_blob(self, blob: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".notes-", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(blob, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def _parse_records(records: List[Any]) -> List[Note]:
    notes: List[Note] = []
    seen: set[str] = set()
    for raw in records:
        if not isinstance(raw, dict):
            continue
        try:
            note = Note.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Skipping invalid note record: %s", exc.errors()[:1])
            continue
        if note.id in seen:
            logger.warning("Skipping duplicate note id", extra={"note_id": note.id})
            continue
        seen.add(note.id)
        notes.append(note)
    return notes


__all__ = ["JsonBlobStore"]

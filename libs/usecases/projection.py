from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, TypeVar

T = TypeVar("T")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def normalize_query(query: str | None) -> str:
    return (query or "").strip().casefold()


def _text(note: object, field: str) -> str:
    value = getattr(note, field, None)
    return "" if value is None else str(value).casefold()


def _updated(note: object) -> datetime:
    value = getattr(note, "updated_at", None)
    if not isinstance(value, datetime):
        return _OLDEST
    if value.tzinfo is None:
        # Naive timestamps are taken as UTC.
        return value.replace(tzinfo=timezone.utc)
    return value


def project_notes(notes: Iterable[T], query: str | None = "") -> List[T]:
    """Return the notes to display for ``query``, pinned first then newest.

    The input is never mutated. Notes with the same pin status and
    ``updated_at`` keep their collection order. A blank query returns every
    note; otherwise only notes whose title or body contains the query
    (case-insensitively) are kept. Missing text fields count as empty; a
    missing or non-datetime ``updated_at`` sorts last in its group.
    """

    # Two stable passes: newest first, then pinned ahead of unpinned.
    ordered = sorted(notes, key=_updated, reverse=True)
    ordered.sort(key=lambda n: not getattr(n, "pinned", False))

    q = normalize_query(query)
    if not q:
        return ordered
    return [n for n in ordered if q in _text(n, "title") or q in _text(n, "body")]


__all__ = ["project_notes", "normalize_query"]

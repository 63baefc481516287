"""Pydantic models representing core domain entities."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_note_id() -> str:
    return uuid4().hex


class Note(BaseModel):
    """A single user note as kept in memory and persisted to the store.

    Timestamps are timezone aware (UTC). On disk the field names follow the
    camelCase layout of the stored array (``createdAt``/``updatedAt``).
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_note_id)
    title: str = ""
    body: str = ""
    pinned: bool = False
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("title", "body", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("pinned", mode="before")
    @classmethod
    def _pinned_or_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _updated_not_before_created(self) -> "Note":
        if self.updated_at is None or self.updated_at < self.created_at:
            self.updated_at = self.created_at
        return self

    @classmethod
    def new(cls, title: str = "", body: str = "", now: datetime | None = None) -> "Note":
        """Create a fresh note with both timestamps set to ``now``."""
        now = now or utcnow()
        return cls(title=title, body=body, created_at=now, updated_at=now)

    def touch(self, now: datetime | None = None) -> None:
        """Refresh ``updated_at``; it always moves strictly forward."""
        now = now or utcnow()
        if self.updated_at is not None and now <= self.updated_at:
            now = self.updated_at + timedelta(microseconds=1)
        self.updated_at = now

    def to_record(self) -> dict[str, Any]:
        """Serialise to the JSON record layout used by the store."""
        return self.model_dump(mode="json", by_alias=True)


class ResultEntry(BaseModel):
    """One speech recognition result: a transcript fragment and its finality."""

    transcript: str = ""
    is_final: bool = False


class RecordingState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    ERROR = "error"


class RecordingStatus(BaseModel):
    """Current dictation state plus the message shown next to the record button."""

    state: RecordingState = RecordingState.IDLE
    message: str = ""
    note_id: Optional[str] = None


__all__ = [
    "Note",
    "ResultEntry",
    "RecordingState",
    "RecordingStatus",
    "new_note_id",
    "utcnow",
]

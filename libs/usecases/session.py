from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from libs.core.exceptions import (
    NoNoteSelectedError,
    NotFoundError,
    RecognitionError,
    RecognitionUnsupportedError,
)
from libs.core.i18n import I18n, get_i18n
from libs.core.models import Note, RecordingState, RecordingStatus, ResultEntry, utcnow
from libs.core.settings import Settings, get_settings
from libs.speech.engine import RecognitionEngine
from libs.storage import DebouncedSave, JsonBlobStore

from .projection import project_notes
from .transcript import TranscriptMerger

logger = logging.getLogger(__name__)


class NotesSession:
    """The note collection together with the state of one open editor.

    Owns the selection, the search query, dictation and save timing. All
    methods run synchronously on the caller's event loop; engine callbacks
    must be delivered on that same loop.
    """

    def __init__(
        self,
        store: JsonBlobStore,
        engine: Optional[RecognitionEngine] = None,
        *,
        save_delay: float = 0.25,
        i18n: Optional[I18n] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.engine = engine
        self.i18n = i18n or get_i18n("en")
        self.clock = clock

        self.notes: List[Note] = store.load()
        self.selected_note_id: Optional[str] = None
        self.search_query = ""
        self.merger = TranscriptMerger()
        self.recording_status = RecordingStatus(message=self.i18n.t("idle"))
        self._saver = DebouncedSave(self._persist, delay=save_delay)

        if engine is not None:
            engine.bind(
                on_start=self.handle_start,
                on_end=self.handle_end,
                on_error=self.handle_error,
                on_result=self.handle_result,
            )

        # Open the first note in display order.
        visible = self.visible_notes()
        if visible:
            self.selected_note_id = visible[0].id
        logger.info("Session opened", extra={"notes": len(self.notes)})

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, engine: Optional[RecognitionEngine] = None
    ) -> "NotesSession":
        settings = settings or get_settings()
        store = JsonBlobStore(settings.store_path, key=settings.storage_key)
        return cls(
            store,
            engine,
            save_delay=settings.save_debounce_ms / 1000,
            i18n=get_i18n(settings.language),
        )

    # ------------------------------------------------------------------
    # queries
    def get_note(self, note_id: str) -> Note:
        for note in self.notes:
            if note.id == note_id:
                return note
        raise NotFoundError(note_id)

    def selected_note(self) -> Optional[Note]:
        if self.selected_note_id is None:
            return None
        try:
            return self.get_note(self.selected_note_id)
        except NotFoundError:
            return None

    def visible_notes(self) -> List[Note]:
        return project_notes(self.notes, self.search_query)

    def set_search(self, query: Optional[str]) -> List[Note]:
        self.search_query = query or ""
        return self.visible_notes()

    # ------------------------------------------------------------------
    # note actions
    def create_note(self, title: Optional[str] = None) -> Note:
        self._stop_recording_if_needed()

        note = Note.new(
            title=self.i18n.t("new_note") if title is None else title,
            now=self.clock(),
        )
        self.notes.insert(0, note)
        self.selected_note_id = note.id
        self._saver.flush()
        logger.info("Note created", extra={"note_id": note.id})
        return note

    def select_note(self, note_id: str) -> Note:
        note = self.get_note(note_id)
        self._stop_recording_if_needed()
        self.selected_note_id = note.id
        return note

    def deselect(self) -> None:
        self._stop_recording_if_needed()
        self.selected_note_id = None

    def edit_selected(self, *, title: Optional[str] = None, body: Optional[str] = None) -> Note:
        """Apply editor input to the selected note; the write is debounced."""

        note = self._require_selected()
        changed = False
        if title is not None and title != note.title:
            note.title = title
            changed = True
        if body is not None and body != note.body:
            note.body = body
            changed = True
        if changed:
            note.touch(self.clock())
            self._saver.schedule()
        return note

    def toggle_pin(self) -> Note:
        note = self._require_selected()
        note.pinned = not note.pinned
        note.touch(self.clock())
        self._saver.flush()
        return note

    def delete_note(self, note_id: Optional[str] = None) -> Note:
        """Delete ``note_id`` (the selected note by default)."""

        note_id = note_id or self.selected_note_id
        if note_id is None:
            raise NoNoteSelectedError(self.i18n.t("select_note_first"))
        note = self.get_note(note_id)

        if note.id in (self.selected_note_id, self.recording_status.note_id):
            self._stop_recording_if_needed()
        self.notes = [n for n in self.notes if n.id != note.id]
        if self.selected_note_id == note.id:
            self.selected_note_id = None
        self._saver.flush()
        logger.info("Note deleted", extra={"note_id": note.id})
        return note

    def flush(self) -> None:
        """Write pending edits now."""
        self._saver.flush()

    # ------------------------------------------------------------------
    # dictation
    def start_recording(self) -> RecordingStatus:
        note = self.selected_note()
        if note is None:
            message = self.i18n.t("select_note_first")
            self._set_message(message)
            raise NoNoteSelectedError(message)
        if self.engine is None or not self.engine.is_available():
            message = self.i18n.t("speech_not_supported")
            self._set_message(message)
            raise RecognitionUnsupportedError(message)

        status = self.recording_status
        if status.state is RecordingState.LISTENING and status.note_id == note.id:
            return status

        self.merger.reset()
        self.recording_status = RecordingStatus(
            state=RecordingState.LISTENING,
            message=self.i18n.t("listening"),
            note_id=note.id,
        )
        try:
            self.engine.start()
        except RecognitionError as exc:
            # Engine already running; its session carries on.
            logger.debug("Ignoring recognition start failure: %s", exc)
        return self.recording_status

    def stop_recording(self) -> RecordingStatus:
        note_id = self.recording_status.note_id
        self.recording_status = RecordingStatus(message=self.i18n.t("idle"))
        self.merger.reset()
        if self.engine is not None:
            try:
                self.engine.stop()
            except RecognitionError as exc:
                logger.debug("Ignoring recognition stop failure: %s", exc)
        if note_id is not None:
            logger.info("Recording stopped", extra={"note_id": note_id})
        return self.recording_status

    def toggle_recording(self) -> RecordingStatus:
        if self.selected_note() is None:
            return self.start_recording()
        if self.recording_status.state is RecordingState.LISTENING:
            return self.stop_recording()
        return self.start_recording()

    # engine callbacks -------------------------------------------------
    def handle_start(self) -> None:
        if self.recording_status.state is RecordingState.LISTENING:
            logger.info(
                "Listening",
                extra={"note_id": self.recording_status.note_id, "state": RecordingState.LISTENING},
            )

    def handle_end(self) -> None:
        if self.recording_status.state is RecordingState.LISTENING:
            self.recording_status = RecordingStatus(message=self.i18n.t("idle"))
        self.merger.reset()

    def handle_error(self, reason: str) -> None:
        logger.warning("Recognition error", extra={"reason": reason, "state": RecordingState.ERROR})
        self.recording_status = RecordingStatus(
            state=RecordingState.ERROR,
            message=self.i18n.t("error_prefix", reason=reason),
        )
        self.merger.reset()

    def handle_result(self, results: Sequence[ResultEntry], resume_index: int = 0) -> None:
        status = self.recording_status
        if status.state is not RecordingState.LISTENING or status.note_id is None:
            logger.debug("Dropping transcript outside a recording session")
            return
        try:
            note = self.get_note(status.note_id)
        except NotFoundError:
            logger.debug("Dropping transcript for a deleted note")
            return

        body = self.merger.apply(note.body, results, resume_index)
        if body != note.body:
            note.body = body
            note.touch(self.clock())
            self._saver.schedule()

    # ------------------------------------------------------------------
    # helpers
    def _require_selected(self) -> Note:
        note = self.selected_note()
        if note is None:
            raise NoNoteSelectedError(self.i18n.t("select_note_first"))
        return note

    def _stop_recording_if_needed(self) -> None:
        if self.recording_status.state is RecordingState.LISTENING:
            self.stop_recording()

    def _set_message(self, message: str) -> None:
        self.recording_status = self.recording_status.model_copy(update={"message": message})

    def _persist(self) -> None:
        self.store.save(self.notes)


__all__ = ["NotesSession"]

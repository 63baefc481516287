"""Local HTTP backend for the notes UI.

One process holds one :class:`NotesSession`; the UI drives it through these
routes and renders the returned projections.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from pydantic import BaseModel

from libs.core import (
    DomainError,
    I18n,
    NoNoteSelectedError,
    NotFoundError,
    Note,
    RecognitionUnsupportedError,
    RecordingStatus,
)
from libs.core.settings import get_settings
from libs.logging import setup_logging
from libs.speech import SpeechRecognitionEngine
from libs.usecases import NotesSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Dependency factories


@lru_cache
def get_session() -> NotesSession:
    settings = get_settings()
    engine = SpeechRecognitionEngine(settings.recognition_lang)
    return NotesSession.from_settings(settings, engine=engine)


def _http_error(exc: DomainError, i18n: I18n) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=i18n.t("note_not_found"))
    if isinstance(exc, NoNoteSelectedError):
        return HTTPException(status.HTTP_409_CONFLICT, detail=i18n.t("select_note_first"))
    if isinstance(exc, RecognitionUnsupportedError):
        return HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=i18n.t("speech_not_supported"))
    return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _summary(note: Note, i18n: I18n) -> Dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title.strip() or i18n.t("untitled"),
        "preview": note.body.strip() or i18n.t("no_content"),
        "pinned": note.pinned,
        "updated_at": note.updated_at.isoformat() if note.updated_at else None,
    }


def _detail(note: Note) -> Dict[str, Any]:
    return note.model_dump(mode="json")


def _recording(status_: RecordingStatus) -> Dict[str, Any]:
    return status_.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Pydantic schemas


class CreateNoteRequest(BaseModel):
    title: Optional[str] = None


class EditNoteRequest(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None


# ---------------------------------------------------------------------------
# FastAPI application


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging()
    logger.info("Starting notes API")
    yield
    if get_session.cache_info().currsize:
        get_session().flush()
    logger.info("Notes API stopped")


app = FastAPI(title="Notes API", lifespan=lifespan)


# Routes ---------------------------------------------------------------------


@app.get("/notes")
async def list_notes(
    q: Optional[str] = Query(None),
    session: NotesSession = Depends(get_session),
) -> Dict[str, Any]:
    notes = session.set_search(q) if q is not None else session.visible_notes()
    result: Dict[str, Any] = {
        "count": len(notes),
        "query": session.search_query,
        "selected_id": session.selected_note_id,
        "items": [_summary(n, session.i18n) for n in notes],
    }
    if not notes:
        result["empty_message"] = session.i18n.t("no_notes_found")
    return result


@app.post("/notes", status_code=status.HTTP_201_CREATED)
async def create_note(
    req: Optional[CreateNoteRequest] = None,
    session: NotesSession = Depends(get_session),
) -> Dict[str, Any]:
    note = session.create_note(req.title if req else None)
    return _detail(note)


@app.get("/notes/selected")
async def get_selected(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    note = session.selected_note()
    if note is None:
        raise _http_error(NoNoteSelectedError(), session.i18n)
    return _detail(note)


@app.patch("/notes/selected")
async def edit_selected(
    req: EditNoteRequest,
    session: NotesSession = Depends(get_session),
) -> Dict[str, Any]:
    try:
        note = session.edit_selected(title=req.title, body=req.body)
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc
    return _detail(note)


@app.post("/notes/selected/pin")
async def toggle_pin(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        note = session.toggle_pin()
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc
    return _detail(note)


@app.post("/notes/deselect")
async def deselect(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    session.deselect()
    return {"selected_id": None, "recording": _recording(session.recording_status)}


@app.get("/notes/{note_id}")
async def get_note(note_id: str, session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        note = session.get_note(note_id)
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc
    return _detail(note)


@app.post("/notes/{note_id}/select")
async def select_note(note_id: str, session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        note = session.select_note(note_id)
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc
    return _detail(note)


@app.delete("/notes/{note_id}")
async def delete_note(note_id: str, session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        note = session.delete_note(note_id)
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc
    return {"deleted": note.id, "selected_id": session.selected_note_id}


@app.get("/recording")
async def get_recording(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    return _recording(session.recording_status)


@app.post("/recording/start")
async def start_recording(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        return _recording(session.start_recording())
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc


@app.post("/recording/stop")
async def stop_recording(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    return _recording(session.stop_recording())


@app.post("/recording/toggle")
async def toggle_recording(session: NotesSession = Depends(get_session)) -> Dict[str, Any]:
    try:
        return _recording(session.toggle_recording())
    except DomainError as exc:
        raise _http_error(exc, session.i18n) from exc


__all__ = ["app", "get_session"]

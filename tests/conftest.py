import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

# Ensure project root on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apps.api.main import app, get_session
from libs.core import RecognitionError, ResultEntry
from libs.speech import RecognitionEngine
from libs.storage import JsonBlobStore
from libs.usecases import NotesSession


class ScriptedEngine(RecognitionEngine):
    """Recognition engine driven by the test instead of a microphone."""

    def __init__(self, available: bool = True, raise_on_double_start: bool = False) -> None:
        super().__init__("en-US")
        self.available = available
        self.raise_on_double_start = raise_on_double_start
        self.running = False
        self.calls: List[str] = []

    def is_available(self) -> bool:
        return self.available

    def start(self) -> None:
        self.calls.append("start")
        if self.running:
            if self.raise_on_double_start:
                raise RecognitionError("already started")
            return
        self.running = True
        self._emit_start()

    def stop(self) -> None:
        self.calls.append("stop")
        self.running = False

    # scripting helpers ---------------------------------------------------
    def say(self, *entries: Tuple[str, bool], resume_index: int = 0) -> None:
        results: Sequence[ResultEntry] = [
            ResultEntry(transcript=text, is_final=final) for text, final in entries
        ]
        self._emit_result(list(results), resume_index)

    def end(self) -> None:
        self.running = False
        self._emit_end()

    def fail(self, reason: str) -> None:
        self.running = False
        self._emit_error(reason)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture()
def store(tmp_path: Path) -> JsonBlobStore:
    return JsonBlobStore(tmp_path / "notes.json")


@pytest.fixture()
def engine() -> ScriptedEngine:
    return ScriptedEngine()


@pytest.fixture()
def session(store: JsonBlobStore, engine: ScriptedEngine) -> NotesSession:
    return NotesSession(store, engine, save_delay=0, clock=StepClock())


@pytest.fixture()
def client(session: NotesSession):
    """FastAPI test client bound to a session with a scripted engine."""

    app.dependency_overrides[get_session] = lambda: session

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()

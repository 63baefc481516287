import pytest

from libs.core import (
    NoNoteSelectedError,
    NotFoundError,
    RecognitionUnsupportedError,
    RecordingState,
)
from libs.usecases import NotesSession

from conftest import ScriptedEngine, StepClock


def test_create_note_selects_and_persists(session: NotesSession, store) -> None:
    note = session.create_note()

    assert note.title == "New note"
    assert note.body == ""
    assert not note.pinned
    assert note.created_at == note.updated_at
    assert session.selected_note_id == note.id
    assert session.notes[0] is note
    assert [n.id for n in store.load()] == [note.id]


def test_edit_refreshes_updated_at(session: NotesSession, store) -> None:
    note = session.create_note()
    created = note.created_at

    session.edit_selected(title="Test", body="")

    assert note.title == "Test"
    assert note.updated_at > created
    assert store.load()[0].title == "Test"


def test_edit_bumps_timestamp_even_when_clock_stands_still(store) -> None:
    frozen = StepClock()
    now = frozen()
    session = NotesSession(store, save_delay=0, clock=lambda: now)
    note = session.create_note()

    session.edit_selected(body="changed")

    assert note.updated_at > note.created_at


def test_unchanged_edit_is_not_a_mutation(session: NotesSession) -> None:
    note = session.create_note(title="Same")
    stamp = note.updated_at

    session.edit_selected(title="Same")

    assert note.updated_at == stamp


def test_toggle_pin_moves_note_first(session: NotesSession) -> None:
    first = session.create_note(title="first")
    session.create_note(title="second")
    session.select_note(first.id)

    session.toggle_pin()

    assert first.pinned
    assert session.visible_notes()[0].id == first.id


def test_search_filters_visible_notes(session: NotesSession) -> None:
    session.create_note(title="Shopping")
    session.create_note(title="Ideas")

    assert [n.title for n in session.set_search("shop")] == ["Shopping"]
    assert session.set_search("zzz") == []
    assert len(session.set_search("")) == 2


def test_delete_selected_clears_selection(session: NotesSession, store) -> None:
    note = session.create_note()

    session.delete_note()

    assert session.selected_note_id is None
    assert session.notes == []
    assert store.load() == []
    with pytest.raises(NotFoundError):
        session.get_note(note.id)


def test_delete_without_selection_raises(session: NotesSession) -> None:
    with pytest.raises(NoNoteSelectedError):
        session.delete_note()


def test_opens_first_note_in_display_order(store) -> None:
    seed = NotesSession(store, save_delay=0, clock=StepClock())
    older = seed.create_note(title="older")
    seed.create_note(title="newer")
    seed.select_note(older.id)
    seed.toggle_pin()

    reopened = NotesSession(store, save_delay=0)

    assert reopened.selected_note_id == older.id


def test_dictation_writes_into_selected_note(session: NotesSession, engine: ScriptedEngine, store) -> None:
    note = session.create_note()

    status = session.start_recording()
    assert status.state is RecordingState.LISTENING
    assert status.note_id == note.id

    engine.say(("hello ", True))
    engine.say(("wor", False))
    engine.say(("world", False))
    engine.say(("world.", True))

    assert note.body == "hello world."
    assert store.load()[0].body == "hello world."


def test_stop_after_interim_keeps_buffer(session: NotesSession, engine: ScriptedEngine) -> None:
    note = session.create_note()
    session.start_recording()
    engine.say(("done ", True), ("mayb", False))

    status = session.stop_recording()

    assert status.state is RecordingState.IDLE
    assert note.body == "done mayb"
    assert engine.calls[-1] == "stop"


def test_results_after_stop_are_dropped(session: NotesSession, engine: ScriptedEngine) -> None:
    note = session.create_note()
    session.start_recording()
    session.stop_recording()

    engine.say(("late", True))

    assert note.body == ""


def test_delete_while_listening_stops_engine(session: NotesSession, engine: ScriptedEngine) -> None:
    note = session.create_note()
    session.start_recording()
    engine.say(("partial", False))

    session.delete_note(note.id)
    engine.say(("partial words", True))

    assert session.recording_status.state is RecordingState.IDLE
    assert not engine.running
    assert note.body == "partial"
    assert session.notes == []


def test_switching_note_stops_recording(session: NotesSession, engine: ScriptedEngine) -> None:
    first = session.create_note(title="first")
    second = session.create_note(title="second")
    session.start_recording()

    session.select_note(first.id)
    engine.say(("stray", True))

    assert session.recording_status.state is RecordingState.IDLE
    assert second.body == ""
    assert first.body == ""


def test_deselect_stops_recording(session: NotesSession, engine: ScriptedEngine) -> None:
    session.create_note()
    session.start_recording()

    session.deselect()

    assert session.recording_status.state is RecordingState.IDLE
    assert "stop" in engine.calls


def test_start_without_selection_is_guidance(session: NotesSession, engine: ScriptedEngine) -> None:
    with pytest.raises(NoNoteSelectedError):
        session.start_recording()

    assert session.recording_status.state is RecordingState.IDLE
    assert session.recording_status.message == "Select a note first"
    assert engine.calls == []


def test_start_without_engine_reports_unsupported(store) -> None:
    session = NotesSession(store, save_delay=0)
    session.create_note()

    with pytest.raises(RecognitionUnsupportedError):
        session.start_recording()
    assert session.recording_status.message == "Speech not supported"


def test_unavailable_engine_reports_unsupported(store) -> None:
    session = NotesSession(store, ScriptedEngine(available=False), save_delay=0)
    session.create_note()

    with pytest.raises(RecognitionUnsupportedError):
        session.start_recording()


def test_double_start_is_ignored(store) -> None:
    engine = ScriptedEngine(raise_on_double_start=True)
    engine.running = True
    session = NotesSession(store, engine, save_delay=0)
    note = session.create_note()

    status = session.start_recording()
    engine.say(("still heard", True))

    assert status.state is RecordingState.LISTENING
    assert engine.calls == ["start"]
    assert note.body == "still heard"


def test_engine_error_enters_error_state(session: NotesSession, engine: ScriptedEngine) -> None:
    note = session.create_note()
    session.start_recording()

    engine.fail("not-allowed")
    engine.end()
    engine.say(("after error", True))

    assert session.recording_status.state is RecordingState.ERROR
    assert session.recording_status.message == "Error: not-allowed"
    assert note.body == ""

    assert session.start_recording().state is RecordingState.LISTENING


def test_engine_end_returns_to_idle(session: NotesSession, engine: ScriptedEngine) -> None:
    session.create_note()
    session.start_recording()
    engine.say(("in flight", False))

    engine.end()

    assert session.recording_status.state is RecordingState.IDLE
    assert session.merger.last_interim == ""


def test_toggle_recording(session: NotesSession) -> None:
    session.create_note()

    assert session.toggle_recording().state is RecordingState.LISTENING
    assert session.toggle_recording().state is RecordingState.IDLE

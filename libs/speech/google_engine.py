"""Microphone dictation through the ``SpeechRecognition`` package.

The library captures phrases on a background thread and recognises them
with the Google Web API. It has no notion of interim guesses, so every
recognised phrase is delivered as a final result. Opening the microphone
and calibrating for ambient noise happen on a worker thread; callbacks are
handed to the event loop that called :meth:`SpeechRecognitionEngine.start`.

Each ``start()`` opens a new generation. Phrases recognised for an older
generation (after ``stop()`` or a restart) are discarded.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from functools import partial
from typing import Any, Callable, List, Optional

from libs.core.models import ResultEntry
from .engine import RecognitionEngine

logger = logging.getLogger(__name__)


def _import_sr() -> Any:
    import speech_recognition as sr

    return sr


class SpeechRecognitionEngine(RecognitionEngine):
    """Background microphone listener feeding Google Web API transcripts."""

    def __init__(
        self,
        lang: str = "en-US",
        *,
        phrase_time_limit: Optional[float] = 10.0,
        ambient_duration: float = 0.5,
    ) -> None:
        super().__init__(lang)
        self.phrase_time_limit = phrase_time_limit
        self.ambient_duration = ambient_duration
        self._lock = threading.Lock()
        self._active = False
        self._generation = 0
        self._stopper: Optional[Callable[..., None]] = None
        self._opener: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._results: List[ResultEntry] = []

    @property
    def running(self) -> bool:
        return self._active

    def is_available(self) -> bool:
        try:
            sr = _import_sr()
            return bool(sr.Microphone.list_microphone_names())
        except (ImportError, AttributeError, OSError):
            return False

    def start(self) -> None:
        sr = _import_sr()
        with self._lock:
            if self._active:
                return
            self._active = True
            self._generation += 1
            generation = self._generation
            self._results = []
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

        self._opener = threading.Thread(
            target=self._open, args=(sr, generation), name="dictation-open", daemon=True
        )
        self._opener.start()

    def stop(self) -> None:
        with self._lock:
            if not self._active:
                return
            stopper = self._close()
        if stopper is not None:
            stopper(wait_for_stop=False)
        logger.info("Dictation stopped")
        self._dispatch(self._emit_end)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait until a pending ``start()`` has opened (or failed to open) the microphone."""
        if self._opener is not None:
            self._opener.join(timeout)

    # ------------------------------------------------------------------
    # worker threads
    def _open(self, sr: Any, generation: int) -> None:
        recognizer = sr.Recognizer()
        try:
            microphone = sr.Microphone()
            with microphone as source:
                recognizer.adjust_for_ambient_noise(source, duration=self.ambient_duration)
        except OSError as exc:
            logger.warning("Microphone unavailable: %s", exc)
            self._abort(generation, "audio-capture")
            return

        stopper = recognizer.listen_in_background(
            microphone,
            partial(self._on_phrase, generation),
            phrase_time_limit=self.phrase_time_limit,
        )
        with self._lock:
            current = generation == self._generation
            if current:
                self._stopper = stopper
        if not current:
            # Stopped while calibrating.
            stopper(wait_for_stop=False)
            return
        logger.info("Dictation started", extra={"lang": self.lang})
        self._dispatch(self._emit_start)

    def _on_phrase(self, generation: int, recognizer: Any, audio: Any) -> None:
        sr = _import_sr()
        try:
            text = recognizer.recognize_google(audio, language=self.lang)
        except sr.UnknownValueError:
            # Nothing intelligible in this phrase.
            return
        except sr.RequestError as exc:
            logger.warning("Recognition request failed: %s", exc)
            self._abort(generation, "network")
            return
        if not text:
            return
        with self._lock:
            if generation != self._generation:
                logger.debug("Dropping phrase from a finished session")
                return
            # Phrases come back without surrounding whitespace.
            self._results.append(ResultEntry(transcript=f"{text.strip()} ", is_final=True))
            results = list(self._results)
        self._dispatch(self._emit_result, results, len(results) - 1)

    def _abort(self, generation: int, reason: str) -> None:
        """End ``generation`` after a runtime failure: error first, then end."""
        with self._lock:
            if generation != self._generation:
                return
            stopper = self._close()
        if stopper is not None:
            stopper(wait_for_stop=False)
        self._dispatch(self._emit_error, reason)
        self._dispatch(self._emit_end)

    def _close(self) -> Optional[Callable[..., None]]:
        # Caller holds the lock.
        self._active = False
        self._generation += 1
        stopper, self._stopper = self._stopper, None
        return stopper

    def _dispatch(self, fn: Callable[..., None], *args: Any) -> None:
        if self._loop is None or self._loop.is_closed():
            fn(*args)
        else:
            self._loop.call_soon_threadsafe(fn, *args)


__all__ = ["SpeechRecognitionEngine"]

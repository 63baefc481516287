from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from libs.core.models import ResultEntry

StartHandler = Callable[[], None]
EndHandler = Callable[[], None]
ErrorHandler = Callable[[str], None]
ResultHandler = Callable[[Sequence[ResultEntry], int], None]


class RecognitionEngine(ABC):
    """Abstract interface for a continuous speech-to-text source.

    Engines run continuously with interim results enabled and report back
    through four callbacks installed with :meth:`bind`:

    * ``on_start()`` once audio capture begins,
    * ``on_end()`` when the session finishes (after ``stop()`` or on its own),
    * ``on_error(reason)`` on a runtime failure,
    * ``on_result(results, resume_index)`` with every result of the current
      session; entries before ``resume_index`` were already delivered and
      have not changed.
    """

    def __init__(self, lang: str = "en-US") -> None:
        self.lang = lang
        self._on_start: Optional[StartHandler] = None
        self._on_end: Optional[EndHandler] = None
        self._on_error: Optional[ErrorHandler] = None
        self._on_result: Optional[ResultHandler] = None

    def bind(
        self,
        *,
        on_start: StartHandler,
        on_end: EndHandler,
        on_error: ErrorHandler,
        on_result: ResultHandler,
    ) -> None:
        self._on_start = on_start
        self._on_end = on_end
        self._on_error = on_error
        self._on_result = on_result

    @abstractmethod
    def is_available(self) -> bool:
        """Return whether recognition can run on this machine."""

    @abstractmethod
    def start(self) -> None:
        """Begin a session. Calling it while running is a no-op or raises RecognitionError."""

    @abstractmethod
    def stop(self) -> None:
        """Request the end of the current session; ``on_end`` follows."""

    # ------------------------------------------------------------------
    # helpers for implementations
    def _emit_start(self) -> None:
        if self._on_start:
            self._on_start()

    def _emit_end(self) -> None:
        if self._on_end:
            self._on_end()

    def _emit_error(self, reason: str) -> None:
        if self._on_error:
            self._on_error(reason)

    def _emit_result(self, results: List[ResultEntry], resume_index: int) -> None:
        if self._on_result:
            self._on_result(results, resume_index)


__all__ = ["RecognitionEngine", "ResultEntry"]

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedSave:
    """Coalescing write queue around a save callable.

    ``schedule()`` (re)arms a timer on the running event loop; a burst of
    calls within ``delay`` seconds results in a single call to ``write``.
    ``write`` takes no arguments and reads the live state itself, so a flush
    never persists a stale snapshot.
    """

    def __init__(self, write: Callable[[], None], delay: float = 0.25) -> None:
        self._write = write
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._flushing = False

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        """Request a write after the quiet period, superseding any pending one."""

        self.cancel()
        if self.delay <= 0:
            self.flush()
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop to defer on: write through.
            self.flush()
            return
        self._handle = loop.call_later(self.delay, self._on_timer)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def flush(self) -> None:
        """Write now, dropping any pending timer."""

        self.cancel()
        if self._flushing:
            return
        self._flushing = True
        try:
            self._write()
        finally:
            self._flushing = False

    def _on_timer(self) -> None:
        self._handle = None
        logger.debug("Debounced save firing")
        self.flush()


__all__ = ["DebouncedSave"]

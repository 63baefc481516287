from __future__ import annotations

from typing import Sequence

from libs.core.models import ResultEntry


def strip_interim(buffer: str, interim: str) -> str:
    """Remove the previously injected interim text from ``buffer``.

    The interim guess is normally the tail of the buffer and is cut as a
    suffix. If the user edited after it, the rightmost occurrence is removed
    instead; if it is gone entirely the buffer is returned unchanged.
    """

    if not interim:
        return buffer
    if buffer.endswith(interim):
        return buffer[: -len(interim)]
    idx = buffer.rfind(interim)
    if idx < 0:
        return buffer
    return buffer[:idx] + buffer[idx + len(interim):]


class TranscriptMerger:
    """Fold streaming recognition results into a growing text buffer.

    Final fragments are committed once and never touched again; the current
    interim guess is kept as the tail of the buffer and swapped out on every
    event, so at most one in-flight guess is ever visible. Fragments are
    concatenated as delivered; the engine is expected to pre-space them.
    """

    def __init__(self) -> None:
        self.accumulated_final = ""
        self.last_interim = ""

    def reset(self) -> None:
        self.accumulated_final = ""
        self.last_interim = ""

    def apply(self, buffer: str, results: Sequence[ResultEntry], resume_index: int = 0) -> str:
        """Return ``buffer`` updated with the results from ``resume_index`` on."""

        new_final = ""
        new_interim = ""
        for entry in results[max(resume_index, 0):]:
            if entry.is_final:
                new_final += entry.transcript
            else:
                new_interim += entry.transcript

        self.accumulated_final += new_final
        merged = strip_interim(buffer, self.last_interim) + new_final + new_interim
        self.last_interim = new_interim
        return merged


__all__ = ["TranscriptMerger", "strip_interim"]

from __future__ import annotations

"""Application-wide logging configuration.

Every record is rendered as one line of JSON:
- timestamp (UTC ISO8601), level, logger, service, environment, message
- notes-session context (``note_id``, ``state``, ``reason``, ``lang``) is
  grouped under a ``session`` object so log queries can filter on it
- any other extras passed as ``logger.info(msg, extra={...})`` are merged in
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from libs.core.settings import get_settings

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}

_SESSION_KEYS = ("note_id", "state", "reason", "lang")


def _plain(value: Any) -> Any:
    # RecordingState and friends log as their value.
    return value.value if isinstance(value, Enum) else value


class _JsonFormatter(logging.Formatter):
    """One-line JSON log formatter with stable keys and UTC timestamps."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        settings = get_settings()
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        base: Dict[str, Any] = {
            "timestamp": dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "service": settings.service_name,
            "environment": settings.environment,
            "message": record.getMessage(),
        }
        session: Dict[str, Any] = {}
        for k, v in record.__dict__.items():
            if k in _RESERVED or k in base:
                continue
            if k in _SESSION_KEYS:
                session[k] = _plain(v)
            else:
                base[k] = _plain(v)
        if session:
            base["session"] = session
        if record.exc_info:
            etype = getattr(record.exc_info[0], "__name__", str(record.exc_info[0]))
            base["error"] = {
                "class": etype,
                "message": str(record.exc_info[1])[:500],
            }
        try:
            return json.dumps(base, ensure_ascii=False)
        except (TypeError, ValueError):
            return json.dumps(_encodable(base), ensure_ascii=False)


def _encodable(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Replace values json cannot encode with their repr."""
    out: Dict[str, Any] = {}
    for k, v in payload.items():
        if isinstance(v, dict):
            out[k] = _encodable(v)
            continue
        try:
            json.dumps(v)
            out[k] = v
        except (TypeError, ValueError):
            out[k] = repr(v)
    return out


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logger to output one-line JSON logs.

    ``level`` overrides ``Settings.log_level`` (e.g. ``"DEBUG"`` to see
    dropped dictation phrases).
    """

    settings = get_settings()
    name = (level or settings.log_level).upper()
    resolved = getattr(logging, name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved)


__all__ = ["setup_logging"]

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml


class I18n:
    """YAML-backed catalogue of user-visible status messages.

    Messages live in ``config/i18n/messages.<lang>.yaml`` next to the
    project root; unknown languages and missing keys fall back to English,
    and finally to the key itself. Region suffixes (``en-US``) are ignored.
    """

    def __init__(self, lang: str, base_dir: Path | None = None) -> None:
        self.lang = (lang or "en").lower().replace("_", "-").split("-")[0]
        if base_dir is None:
            # libs/core/i18n.py -> project_root/config/i18n
            project_root = Path(__file__).resolve().parents[2]
            self.base_dir = project_root / "config" / "i18n"
        else:
            self.base_dir = base_dir
        self._cache: Dict[str, str] = {}
        self._fallback: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        def _read(path: Path) -> Dict[str, str]:
            if not path.exists():
                return {}
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
                if not isinstance(data, dict):
                    return {}
                return {str(k): str(v) for k, v in data.items()}

        self._fallback = _read(self.base_dir / "messages.en.yaml")
        if self.lang == "en":
            self._cache = self._fallback
        else:
            self._cache = _read(self.base_dir / f"messages.{self.lang}.yaml")

    def t(self, key: str, **params: Any) -> str:
        """Translate ``key`` and fill ``{placeholders}`` from ``params``."""
        text = self._cache.get(key) or self._fallback.get(key) or key
        if params:
            try:
                return text.format(**params)
            except (KeyError, IndexError):
                return text
        return text


@lru_cache
def get_i18n(lang: str) -> I18n:
    """Return a cached catalogue for ``lang``."""
    return I18n(lang)


__all__ = ["I18n", "get_i18n"]

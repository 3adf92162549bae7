"""File-backed key-value store used to persist browser state between runs."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Optional

from .error_codes import ErrorCode
from .logging_utils import _crawl_event
from .utils import log_line

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class KeyValueStore:
    """One JSON document per key under ``directory``.

    Values are always read and written whole; there is no expiry. The store
    must be opened before use and closed at teardown.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._open = False

    def open(self) -> "KeyValueStore":
        self.directory.mkdir(parents=True, exist_ok=True)
        self._open = True
        return self

    def close(self) -> None:
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def __enter__(self) -> "KeyValueStore":
        return self.open()

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _path_for(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", key).strip("._") or "item"
        return self.directory / f"{safe}.json"

    def _require_open(self) -> None:
        if not self._open:
            raise RuntimeError(f"KeyValueStore at {self.directory} is not open")

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value for ``key`` or ``None`` when absent or unreadable."""

        self._require_open()
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            log_line(f"[STATE] Failed to read {path}: {exc}")
            _crawl_event("error", phase="state", error_code=ErrorCode.SESSION, key=key)
            return None

    def set(self, key: str, value: Any) -> None:
        """Persist ``value`` for ``key``, replacing any previous value atomically."""

        self._require_open()
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(value, handle, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        self._require_open()
        try:
            os.remove(self._path_for(key))
        except FileNotFoundError:
            pass


__all__ = ["KeyValueStore"]

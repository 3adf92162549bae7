"""Cookie persistence for the authenticated SEI browser context."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from . import config
from .error_codes import ErrorCode
from .logging_utils import _crawl_event
from .state import KeyValueStore
from .utils import log_line

Cookie = Dict[str, Any]


class SessionStore:
    """Save and restore the browser context's cookies through a :class:`KeyValueStore`."""

    def __init__(self, store: KeyValueStore, *, key: str = config.COOKIES_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> Optional[List[Cookie]]:
        """Return the saved cookie list, or ``None`` when no usable session exists."""

        cookies = self.store.get(self.key)
        if not cookies:
            return None
        if not isinstance(cookies, list):
            log_line(f"[SESSION] Discarding malformed cookie payload ({type(cookies).__name__}).")
            self.store.delete(self.key)
            return None
        return cookies

    def restore(self, context) -> Optional[List[Cookie]]:
        """Add saved cookies to ``context``. Returns the cookies restored, if any."""

        cookies = self.load()
        if cookies is None:
            log_line("[SESSION] No saved cookies found; login will be required.")
            return None
        try:
            context.add_cookies(cookies)
        except Exception as exc:  # noqa: BLE001
            log_line(f"[SESSION] Failed to restore saved cookies: {exc}")
            _crawl_event("error", phase="session", step="restore", error_code=ErrorCode.SESSION)
            return None
        log_line(f"[SESSION] Restored {len(cookies)} cookies from {self.store.directory}.")
        return cookies

    def save(self, context) -> int:
        """Overwrite the saved session with the cookies currently held by ``context``."""

        try:
            cookies = list(context.cookies())
            self.store.set(self.key, cookies)
        except Exception as exc:  # noqa: BLE001
            log_line(f"[SESSION] Failed to save cookies: {exc}")
            _crawl_event("error", phase="session", step="save", error_code=ErrorCode.SESSION)
            return 0
        log_line(f"[SESSION] Saved {len(cookies)} cookies to {self.store.directory}.")
        return len(cookies)


__all__ = ["SessionStore", "Cookie"]

from __future__ import annotations

from typing import Any

from .utils import log_line


def _crawl_event(label: str, **fields: Any) -> None:
    """Log ``[CRAWLER][LABEL] key=value, ...`` with the fields sorted by key."""

    try:
        payload = ", ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))
        log_line(f"[CRAWLER][{label.upper()}] {payload}")
    except Exception:  # noqa: BLE001
        # A broken log handler must not end the crawl.
        return


__all__ = ["_crawl_event"]

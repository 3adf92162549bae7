from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _crawl_event
from .utils import log_line

Entrypoint = Literal["cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _crawl_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_runtime_config(entrypoint: Entrypoint, *, staging_mode: str | None = None) -> None:
    """Validate runtime configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    Missing credentials are only logged: a saved session may still be valid.
    """

    mode = (staging_mode or config.STAGING_MODE).strip().lower()
    if mode not in config.STAGING_MODES:
        _raise_config_error(
            f"Unknown staging mode {mode!r}; expected one of {', '.join(config.STAGING_MODES)}.",
            entrypoint=entrypoint,
            error="invalid_staging_mode",
        )

    if not config.PORTAL_URL.lower().startswith(("http://", "https://")):
        _raise_config_error(
            "SEI_PORTAL_URL must be an http(s) URL.",
            entrypoint=entrypoint,
            error="invalid_portal_url",
        )

    timeout_fields = [
        ("NAV_TIMEOUT_SECONDS", config.NAV_TIMEOUT_SECONDS),
        ("PORTAL_READY_TIMEOUT_MS", config.PORTAL_READY_TIMEOUT_MS),
        ("LIST_TABLE_TIMEOUT_MS", config.LIST_TABLE_TIMEOUT_MS),
        ("FRAME_TIMEOUT_MS", config.FRAME_TIMEOUT_MS),
    ]
    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )

    if not config.has_credentials():
        _crawl_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="missing_credentials",
            entrypoint=entrypoint,
        )
        log_line(
            "[CONFIG] SEI_USERNAME/SEI_PASSWORD not set; the run relies on saved cookies."
        )


__all__ = ["validate_runtime_config", "Entrypoint"]

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Sequence
from urllib.parse import urljoin

import pandas as pd

from . import config

LOGGER = logging.getLogger("sei_crawler")
_LOG_FORMAT = logging.Formatter("[%(asctime)s] %(message)s", "%Y-%m-%d %H:%M:%S")


def _handlers_for(log_path: Path) -> List[logging.Handler]:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handlers: List[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(_LOG_FORMAT)
    return handlers


def _configure_logger(log_path: Path) -> None:
    """Point the crawler logger at stdout and ``log_path``, closing earlier handlers."""

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        handler.close()
    for handler in _handlers_for(log_path):
        LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False


def setup_run_logger() -> Path:
    """Start a ``crawl_<timestamp>.log`` file for this run."""

    log_path = config.LOG_DIR / f"crawl_{datetime.now():%Y%m%d_%H%M%S}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def ensure_dirs() -> None:
    for directory in (config.DATA_DIR, config.LOG_DIR, config.COOKIE_DIR):
        directory.mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Log ``message`` at INFO, falling back to the default log file before a run starts."""

    if not LOGGER.handlers:
        _configure_logger(config.LOG_DIR / config.LOG_FILE.name)
    LOGGER.info(message)


def normalize_url(raw: str, *, page_url: str) -> str:
    """Resolve ``raw`` against ``page_url`` the way ``anchor.href`` does in a browser."""

    raw = (raw or "").strip()
    if not raw:
        return ""
    return urljoin(page_url, raw)


def format_record_table(columns: Sequence[str], values: Sequence[object]) -> str:
    """Render one record as a two-column text table for the console."""

    series = pd.Series(list(values), index=list(columns), dtype="object")
    return series.fillna("").to_string()


__all__ = [
    "LOGGER",
    "ensure_dirs",
    "format_record_table",
    "log_line",
    "normalize_url",
    "setup_run_logger",
]

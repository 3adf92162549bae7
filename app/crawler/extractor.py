"""Reads the history table of an SEI process detail view."""
from __future__ import annotations

from playwright.sync_api import TimeoutError as PWTimeout

from . import config
from .error_codes import ErrorCode
from .logging_utils import _crawl_event
from .models import HistoryExtraction
from .parser import parse_history_row
from .selectors_sei import SEI_SELECTORS, SeiSelectors
from .utils import log_line

OUTER_HTML_JS = "el => el.outerHTML"


def _enter_frame(page, selector: str, timeout_ms: int):
    handle = page.wait_for_selector(selector, timeout=timeout_ms)
    frame = handle.content_frame() if handle is not None else None
    if frame is None:
        raise RuntimeError(f"{selector} has no content frame")
    return frame


class RecordExtractor:
    """Open the "Consultar Andamento" view and read the history row.

    The page must already show a process detail view. Every failure is
    reported through the returned :class:`HistoryExtraction`; nothing raises.
    """

    def __init__(self, selectors: SeiSelectors = SEI_SELECTORS) -> None:
        self.selectors = selectors

    def open_history(self, page) -> None:
        tree = _enter_frame(page, self.selectors.tree_frame, config.FRAME_TIMEOUT_MS)
        tree.wait_for_selector(self.selectors.progress_trigger, timeout=config.FRAME_TIMEOUT_MS)
        tree.click(self.selectors.progress_trigger)
        log_line("[EXTRACT] Clicked 'Consultar Andamento'.")
        page.wait_for_timeout(config.HISTORY_SETTLE_MS)

    def read_history(self, page) -> HistoryExtraction:
        view = _enter_frame(page, self.selectors.view_frame, config.FRAME_TIMEOUT_MS)
        if view.query_selector(self.selectors.history_table) is None:
            log_line("[EXTRACT] History table not found.")
            return HistoryExtraction.no_table()
        table_html = view.eval_on_selector(self.selectors.history_table, OUTER_HTML_JS)
        return HistoryExtraction.ok(parse_history_row(table_html, selectors=self.selectors))

    def extract(self, page) -> HistoryExtraction:
        url = getattr(page, "url", "")
        try:
            self.open_history(page)
            result = self.read_history(page)
        except PWTimeout as exc:
            log_line(f"[EXTRACT][ERROR] Timed out waiting for detail frames on {url}: {exc}")
            _crawl_event(
                "error",
                phase="extract",
                error_code=ErrorCode.MISSING_ELEMENT,
                url=url,
                error=str(exc),
            )
            return HistoryExtraction.failed(str(exc))
        except Exception as exc:  # noqa: BLE001
            log_line(f"[EXTRACT][ERROR] Failed to extract history from {url}: {exc}")
            _crawl_event(
                "error",
                phase="extract",
                error_code=ErrorCode.EXTRACTION,
                url=url,
                error=str(exc),
            )
            return HistoryExtraction.failed(str(exc))

        _crawl_event(
            "extract",
            url=url,
            outcome=result.outcome.value,
            cells=len(result.cells),
        )
        return result


__all__ = ["RecordExtractor", "OUTER_HTML_JS"]

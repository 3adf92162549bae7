"""Per-unit walk over the SEI "Recebidos" process list."""
from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from playwright.sync_api import Error as PWError, TimeoutError as PWTimeout

from . import config
from .error_codes import ErrorCode
from .extractor import OUTER_HTML_JS, RecordExtractor
from .logging_utils import _crawl_event
from .models import ExtractedRecord, RecordLink, Unit
from .parser import parse_record_links, parse_tooltip
from .retry_policy import navigate_with_retry
from .selectors_sei import SEI_SELECTORS, SeiSelectors
from .staging_store import StagingStore
from .utils import format_record_table, log_line


class CrawlState(str, Enum):
    LIST_LOADED = "list_loaded"
    ROWS_EXTRACTED = "rows_extracted"
    PAGINATING = "paginating"
    DONE = "done"


@dataclass
class UnitCrawlResult:
    unit: Unit
    pages: int = 0
    records_seen: int = 0
    committed: int = 0
    navigation_failures: int = 0
    commit_failures: int = 0


class PaginationCrawler:
    """Drive one unit's list through ``LIST_LOADED -> ROWS_EXTRACTED -> PAGINATING -> DONE``.

    Records are opened on ``detail_page`` so that ``list_page`` keeps its
    pagination state while rows are visited.
    """

    def __init__(
        self,
        list_page,
        detail_page,
        extractor: RecordExtractor,
        staging: StagingStore,
        *,
        selectors: SeiSelectors = SEI_SELECTORS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.list_page = list_page
        self.detail_page = detail_page
        self.extractor = extractor
        self.staging = staging
        self.selectors = selectors
        self.sleep = sleep
        self.list_url: Optional[str] = None

    def read_links(self) -> List[RecordLink]:
        """Return the record links of the list page currently displayed."""

        self.list_url = self.list_page.url
        try:
            table_html = self.list_page.eval_on_selector(self.selectors.list_table, OUTER_HTML_JS)
        except PWError as exc:
            log_line(f"[LIST][ERROR] Unable to read {self.selectors.list_table} on {self.list_url}: {exc}")
            _crawl_event(
                "error",
                phase="list",
                error_code=ErrorCode.MISSING_ELEMENT,
                url=self.list_url,
                error=str(exc),
            )
            return []
        return parse_record_links(table_html or "", page_url=self.list_url, selectors=self.selectors)

    def process_link(self, unit: Unit, link: RecordLink, result: UnitCrawlResult) -> bool:
        """Open, extract and commit one record. Returns ``True`` when it was committed."""

        result.records_seen += 1
        log_line(f"[LIST] Opening {link.target_url} ({link.label})")
        outcome = navigate_with_retry(self.detail_page, link.target_url, sleep=self.sleep)
        if not outcome.ok:
            result.navigation_failures += 1
            log_line(
                f"[NAV][ERROR] Failed to open {link.target_url} after {outcome.attempts} attempts "
                f"(unit={unit.selector_value}); skipping record."
            )
            _crawl_event(
                "error",
                phase="nav",
                error_code=ErrorCode.NAVIGATION,
                url=link.target_url,
                unit=unit.selector_value,
                attempts=outcome.attempts,
            )
            return False

        history = self.extractor.extract(self.detail_page)
        record = ExtractedRecord.from_extraction(link, parse_tooltip(link.tooltip_raw), history)
        log_line("\n" + format_record_table(config.RECORD_COLUMNS, record.as_row()))

        if self.staging.commit(record):
            result.committed += 1
            return True
        result.commit_failures += 1
        return False

    def advance_page(self) -> bool:
        """Click the next-page control if it is visible. Returns ``True`` on a new page."""

        next_button = self.list_page.locator(self.selectors.next_page)
        try:
            if not next_button.is_visible():
                return False
            next_button.click()
            self.list_page.wait_for_load_state(
                "networkidle", timeout=config.NAV_TIMEOUT_SECONDS * 1000
            )
            self.list_page.wait_for_selector(
                self.selectors.list_table, timeout=config.LIST_TABLE_TIMEOUT_MS
            )
        except PWTimeout as exc:
            log_line(f"[LIST][ERROR] Next page did not load from {self.list_url}: {exc}")
            _crawl_event(
                "error",
                phase="paginate",
                error_code=ErrorCode.MISSING_ELEMENT,
                url=self.list_url,
                error=str(exc),
            )
            return False
        except PWError as exc:
            log_line(f"[LIST][ERROR] Pagination failed on {self.list_url}: {exc}")
            _crawl_event(
                "error",
                phase="paginate",
                error_code=ErrorCode.NAVIGATION,
                url=self.list_url,
                error=str(exc),
            )
            return False
        return True

    def crawl(self, unit: Unit) -> UnitCrawlResult:
        result = UnitCrawlResult(unit=unit)
        links: List[RecordLink] = []
        state = CrawlState.LIST_LOADED

        while state is not CrawlState.DONE:
            if state is CrawlState.LIST_LOADED:
                links = self.read_links()
                result.pages += 1
                state = CrawlState.ROWS_EXTRACTED
            elif state is CrawlState.ROWS_EXTRACTED:
                if not links:
                    log_line(
                        f"[LIST] No links on page {result.pages} of unit {unit.selector_value}; "
                        "moving to the next unit."
                    )
                    state = CrawlState.DONE
                    continue
                for link in links:
                    self.process_link(unit, link, result)
                state = CrawlState.PAGINATING
            elif state is CrawlState.PAGINATING:
                state = CrawlState.LIST_LOADED if self.advance_page() else CrawlState.DONE

        _crawl_event(
            "unit",
            step="done",
            unit=unit.selector_value,
            pages=result.pages,
            records=result.records_seen,
            committed=result.committed,
        )
        return result


__all__ = ["CrawlState", "PaginationCrawler", "UnitCrawlResult"]

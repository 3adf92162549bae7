"""Enumeration and selection of SEI organizational units."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from playwright.sync_api import Error as PWError, TimeoutError as PWTimeout

from . import config
from .error_codes import ErrorCode
from .extractor import OUTER_HTML_JS
from .logging_utils import _crawl_event
from .models import Unit
from .pagination import PaginationCrawler, UnitCrawlResult
from .parser import parse_unit_options
from .selectors_sei import SEI_SELECTORS, SeiSelectors
from .utils import log_line


@dataclass
class UnitIterationSummary:
    units_total: int = 0
    units_skipped: int = 0
    units_empty: int = 0
    results: List[UnitCrawlResult] = field(default_factory=list)

    @property
    def units_visited(self) -> int:
        return len(self.results)


class UnitIterator:
    def __init__(
        self,
        page,
        crawler: PaginationCrawler,
        *,
        selectors: SeiSelectors = SEI_SELECTORS,
        skip_index: Optional[int] = None,
    ) -> None:
        self.page = page
        self.crawler = crawler
        self.selectors = selectors
        self.skip_index = config.SKIP_UNIT_INDEX if skip_index is None else skip_index

    def enumerate(self) -> List[Unit]:
        """Read the unit selector once, keeping document order as the ordinal."""

        select_html = self.page.eval_on_selector(self.selectors.unit_select, OUTER_HTML_JS)
        units = parse_unit_options(select_html or "", selectors=self.selectors)
        log_line(f"[UNITS] Found {len(units)} units.")
        return units

    def should_skip(self, unit: Unit) -> bool:
        return unit.ordinal_index == self.skip_index

    def select(self, unit: Unit) -> bool:
        """Select ``unit`` and wait for its list. ``False`` means there is nothing to crawl."""

        log_line(
            f"[UNITS] Selecting unit {unit.label or unit.selector_value} "
            f"(value {unit.selector_value}, index {unit.ordinal_index})."
        )
        try:
            self.page.locator(self.selectors.unit_select).select_option(unit.selector_value)
            self.page.wait_for_selector(
                self.selectors.list_table, timeout=config.LIST_TABLE_TIMEOUT_MS
            )
        except PWTimeout:
            log_line(
                f"[UNITS] No process table for unit {unit.selector_value}; moving to the next unit."
            )
            return False
        except PWError as exc:
            log_line(f"[UNITS][ERROR] Could not select unit {unit.selector_value}: {exc}")
            _crawl_event(
                "error",
                phase="units",
                error_code=ErrorCode.NAVIGATION,
                unit=unit.selector_value,
                index=unit.ordinal_index,
                error=str(exc),
            )
            return False
        return True

    def run(self) -> UnitIterationSummary:
        units = self.enumerate()
        summary = UnitIterationSummary(units_total=len(units))
        for unit in units:
            if self.should_skip(unit):
                log_line(f"[UNITS] Skipping unit at index {unit.ordinal_index} ({unit.selector_value}).")
                summary.units_skipped += 1
                continue
            if not self.select(unit):
                summary.units_empty += 1
                continue
            summary.results.append(self.crawler.crawl(unit))
        return summary


__all__ = ["UnitIterator", "UnitIterationSummary"]

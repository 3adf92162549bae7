"""Playwright-driven crawler for SEI inbound processes.

Workflow:

- Clear the ``processos`` table.
- Restore saved cookies and open the SIP login page; log in only when the
  login form is still shown, then save the fresh cookies.
- Wait for the unit selector (``#selInfraUnidades``). If it never shows up the
  run is aborted; this is the only fatal path.
- For every unit except ordinal 48, select it and walk the
  ``#tblProcessosRecebidos`` pages. Each process is opened in a second tab,
  its "Consultar Andamento" history is read and the row is committed.

Run with ``python -m app.crawler.run``.
"""

from __future__ import annotations

import argparse
import time
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

from playwright.sync_api import Error as PWError, TimeoutError as PWTimeout, sync_playwright

from . import config
from .config_validation import validate_runtime_config
from .error_codes import ErrorCode
from .export_excel import export_processos_to_excel
from .extractor import RecordExtractor
from .logging_utils import _crawl_event
from .pagination import PaginationCrawler
from .selectors_sei import SEI_SELECTORS, SeiSelectors
from .session_store import SessionStore
from .staging_store import StagingStore
from .state import KeyValueStore
from .units import UnitIterationSummary, UnitIterator
from .utils import ensure_dirs, log_line, setup_run_logger

STATUS_COMPLETED = "completed"
STATUS_ABORTED = "aborted"


@dataclass
class CrawlSummary:
    status: str
    logged_in: bool = False
    units_total: int = 0
    units_skipped: int = 0
    units_empty: int = 0
    units_visited: int = 0
    pages: int = 0
    records_seen: int = 0
    records_committed: int = 0
    navigation_failures: int = 0
    commit_failures: int = 0
    rows_in_table: int = 0

    def absorb(self, units: UnitIterationSummary) -> None:
        self.units_total = units.units_total
        self.units_skipped = units.units_skipped
        self.units_empty = units.units_empty
        self.units_visited = units.units_visited
        for result in units.results:
            self.pages += result.pages
            self.records_seen += result.records_seen
            self.records_committed += result.committed
            self.navigation_failures += result.navigation_failures
            self.commit_failures += result.commit_failures


class CrawlOrchestrator:
    """Compose session handling, unit iteration, pagination and persistence."""

    def __init__(
        self,
        session_store: SessionStore,
        staging: StagingStore,
        *,
        selectors: SeiSelectors = SEI_SELECTORS,
        extractor: Optional[RecordExtractor] = None,
        portal_url: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.session_store = session_store
        self.staging = staging
        self.selectors = selectors
        self.extractor = extractor or RecordExtractor(selectors)
        self.portal_url = portal_url or config.PORTAL_URL
        self.sleep = sleep

    def load_portal(self, page) -> bool:
        try:
            _crawl_event("nav", step="goto", target="portal", url=self.portal_url)
            page.goto(
                self.portal_url,
                wait_until="networkidle",
                timeout=config.NAV_TIMEOUT_SECONDS * 1000,
            )
            return True
        except PWError as exc:
            log_line(f"[NAV][ERROR] goto({self.portal_url!r}) failed: {exc}")
            _crawl_event(
                "error",
                phase="nav",
                step="portal",
                error_code=ErrorCode.PORTAL_UNAVAILABLE,
                url=self.portal_url,
                error=str(exc),
            )
            return False

    def authenticate(self, page) -> bool:
        """Log in when the login form is shown. Returns ``True`` if a login was submitted."""

        if not page.locator(self.selectors.login_submit).is_visible():
            log_line("[AUTH] Session restored; already logged in.")
            return False

        log_line("[AUTH] Login required.")
        if not config.has_credentials():
            log_line("[AUTH][ERROR] SEI_USERNAME/SEI_PASSWORD are not configured.")
            _crawl_event("error", phase="auth", error_code=ErrorCode.SESSION, error="missing_credentials")
            return False

        try:
            page.locator(self.selectors.username_input).fill(config.SEI_USERNAME)
            page.locator(self.selectors.password_input).fill(config.SEI_PASSWORD)
            page.locator(self.selectors.orgao_select).select_option(label=config.SEI_ORGAO_LABEL)
            page.locator(self.selectors.login_submit).click()
            page.wait_for_load_state("networkidle", timeout=config.NAV_TIMEOUT_SECONDS * 1000)
        except PWError as exc:
            log_line(f"[AUTH][ERROR] Login form submission failed: {exc}")
            _crawl_event("error", phase="auth", error_code=ErrorCode.SESSION, error=str(exc))
            return False

        self.session_store.save(page.context)
        return True

    def wait_for_portal(self, page) -> bool:
        try:
            page.wait_for_selector(
                self.selectors.unit_select, timeout=config.PORTAL_READY_TIMEOUT_MS
            )
        except PWTimeout as exc:
            log_line(f"[RUN][ERROR] Unit selector never appeared; aborting run: {exc}")
            _crawl_event(
                "error",
                phase="run",
                error_code=ErrorCode.PORTAL_UNAVAILABLE,
                url=getattr(page, "url", ""),
                error=str(exc),
            )
            return False
        log_line("[RUN] Portal loaded.")
        return True

    def run(self, page, detail_page) -> CrawlSummary:
        self.staging.clear()
        self.session_store.restore(page.context)

        if not self.load_portal(page):
            return self._finish(CrawlSummary(status=STATUS_ABORTED))
        logged_in = self.authenticate(page)
        if not self.wait_for_portal(page):
            return self._finish(CrawlSummary(status=STATUS_ABORTED, logged_in=logged_in))

        crawler = PaginationCrawler(
            page,
            detail_page,
            self.extractor,
            self.staging,
            selectors=self.selectors,
            sleep=self.sleep,
        )
        units = UnitIterator(page, crawler, selectors=self.selectors).run()
        self.staging.finalize()

        summary = CrawlSummary(status=STATUS_COMPLETED, logged_in=logged_in)
        summary.absorb(units)
        return self._finish(summary)

    def _finish(self, summary: CrawlSummary) -> CrawlSummary:
        summary.rows_in_table = self.staging.count()
        _crawl_event("summary", **asdict(summary))
        return summary


def run_crawl(
    *,
    headless: Optional[bool] = None,
    staging_mode: Optional[str] = None,
    export_path: Optional[str] = None,
) -> CrawlSummary:
    """Launch Chromium and run one full crawl."""

    ensure_dirs()
    setup_run_logger()
    headless = config.HEADLESS if headless is None else headless

    store = KeyValueStore(config.COOKIE_DIR).open()
    staging = StagingStore(mode=staging_mode).open()
    try:
        orchestrator = CrawlOrchestrator(SessionStore(store), staging)
        with sync_playwright() as pw:
            browser = pw.chromium.launch(
                headless=headless,
                ignore_default_args=["--disable-extensions"],
            )
            context = browser.new_context(bypass_csp=True, accept_downloads=True)
            try:
                page = context.new_page()
                detail_page = context.new_page()
                summary = orchestrator.run(page, detail_page)
            finally:
                context.close()
                browser.close()

        log_line(
            f"[RUN] {summary.status}: {summary.records_committed} records committed, "
            f"{summary.rows_in_table} rows in table, {summary.units_visited} units visited, "
            f"{summary.units_empty} empty, {summary.units_skipped} skipped."
        )
        if export_path and summary.status == STATUS_COMPLETED:
            export_processos_to_excel(export_path)
        return summary
    finally:
        staging.close()
        store.close()


def _cli_entrypoint(argv: Optional[List[str]] = None) -> int:  # pragma: no cover
    parser = argparse.ArgumentParser(description="Crawl SEI inbound processes into SQLite")
    parser.add_argument(
        "--headed",
        dest="headless",
        action="store_false",
        default=None,
        help="Show the browser window.",
    )
    parser.add_argument(
        "--staging-mode",
        choices=list(config.STAGING_MODES),
        default=None,
        help="per_record promotes every record; batch promotes once at the end.",
    )
    parser.add_argument(
        "--export-xlsx",
        default=None,
        help="Write the processos table to this Excel file after a completed run.",
    )
    args = parser.parse_args(argv)

    validate_runtime_config("cli", staging_mode=args.staging_mode)
    summary = run_crawl(
        headless=args.headless,
        staging_mode=args.staging_mode,
        export_path=args.export_xlsx,
    )
    return 0 if summary.status == STATUS_COMPLETED else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(_cli_entrypoint())

__all__ = ["CrawlOrchestrator", "CrawlSummary", "run_crawl", "_cli_entrypoint"]

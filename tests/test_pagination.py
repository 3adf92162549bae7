from __future__ import annotations

from pathlib import Path

import pytest
from playwright.sync_api import Error as PWError, TimeoutError as PWTimeout

from app.crawler import config
from app.crawler.extractor import RecordExtractor
from app.crawler.models import Unit
from app.crawler.pagination import PaginationCrawler
from app.crawler.staging_store import StagingStore
from tests.playwright_fakes import (
    HISTORY_TABLE_HTML,
    FakeDetailPage,
    FakePortal,
    detail_url,
    list_row,
)

UNIT = Unit(selector_value="1001", ordinal_index=1)


@pytest.fixture
def staging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "processos.db")
    store = StagingStore(mode="per_record").open()
    store.clear()
    yield store
    store.close()


def _crawler(
    pages,
    detail: FakeDetailPage,
    staging: StagingStore,
    sleeps=None,
    portal_cls=FakePortal,
):
    portal = portal_cls({UNIT.selector_value: pages})
    portal.logged_in = True
    portal.goto("portal")
    portal.locator("#selInfraUnidades").select_option(UNIT.selector_value)
    sleep = sleeps.append if sleeps is not None else (lambda _s: None)
    return portal, PaginationCrawler(portal, detail, RecordExtractor(), staging, sleep=sleep)


def test_empty_list_goes_straight_to_done(staging: StagingStore) -> None:
    detail = FakeDetailPage()
    _, crawler = _crawler([[]], detail, staging)

    result = crawler.crawl(UNIT)

    assert result.pages == 1
    assert result.records_seen == 0
    assert detail.goto_calls == []
    assert staging.count() == 0


def test_walks_pages_forward_in_row_order(staging: StagingStore) -> None:
    history = {detail_url(i): HISTORY_TABLE_HTML for i in range(1, 6)}
    detail = FakeDetailPage(history)
    pages = [[list_row(1), list_row(2)], [list_row(3), list_row(4)], [list_row(5)]]
    portal, crawler = _crawler(pages, detail, staging)

    result = crawler.crawl(UNIT)

    assert result.pages == 3
    assert result.committed == 5
    assert portal.page_index == 2
    assert detail.goto_calls == [detail_url(i) for i in range(1, 6)]
    names = [
        row["nome_processo"]
        for row in staging.conn.execute("SELECT nome_processo FROM processos ORDER BY id")
    ]
    assert names == [f"00012.{i:06d}/2024-11" for i in range(1, 6)]


def test_record_is_skipped_after_three_failed_navigations(staging: StagingStore) -> None:
    history = {detail_url(1): HISTORY_TABLE_HTML, detail_url(2): HISTORY_TABLE_HTML}
    detail = FakeDetailPage(history, goto_failures={detail_url(1): 99})
    sleeps: list[float] = []
    _, crawler = _crawler([[list_row(1), list_row(2)]], detail, staging, sleeps)

    result = crawler.crawl(UNIT)

    assert detail.goto_calls.count(detail_url(1)) == 3
    assert sleeps == [1.0, 1.0]
    assert result.navigation_failures == 1
    assert result.committed == 1


def test_record_without_history_is_still_committed(staging: StagingStore) -> None:
    detail = FakeDetailPage({detail_url(1): None})
    _, crawler = _crawler([[list_row(1, tooltip="Tipo X")]], detail, staging)

    result = crawler.crawl(UNIT)

    assert result.committed == 1
    row = staging.conn.execute("SELECT * FROM processos").fetchone()
    assert row["descricao"] == "Tipo X"
    assert row["data_recebimento"] is None


def test_full_record_maps_history_cells_onto_columns(staging: StagingStore) -> None:
    detail = FakeDetailPage({detail_url(1): HISTORY_TABLE_HTML})
    _, crawler = _crawler([[list_row(1, tooltip="Tipo X")]], detail, staging)

    crawler.crawl(UNIT)

    row = staging.conn.execute("SELECT * FROM processos").fetchone()
    assert tuple(row)[1:] == (
        "00012.000001/2024-11",
        "Tipo X",
        "10/01/2024 09:15",
        "SESAPI-GAB",
        "maria.silva",
        "Processo recebido na unidade",
        12,
    )


class _StallingPortal(FakePortal):
    """Next page is clicked but its table never renders."""

    def wait_for_selector(self, selector: str, timeout=None):
        if selector == "#tblProcessosRecebidos" and self.page_index > 0:
            raise PWTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return super().wait_for_selector(selector, timeout)


class _DetachedNextPortal(FakePortal):
    """The next-page control is visible but detached when clicked."""

    def _click(self, selector: str) -> None:
        if selector == "#pagingNext":
            raise PWError("Element is not attached to the DOM")
        super()._click(selector)


def test_unreadable_list_ends_unit_and_next_unit_still_runs(staging: StagingStore) -> None:
    detail = FakeDetailPage({detail_url(7): HISTORY_TABLE_HTML})
    portal = FakePortal({UNIT.selector_value: None, "1002": [[list_row(7)]]})
    portal.logged_in = True
    portal.goto("portal")
    crawler = PaginationCrawler(portal, detail, RecordExtractor(), staging, sleep=lambda _s: None)

    portal.locator("#selInfraUnidades").select_option(UNIT.selector_value)
    broken = crawler.crawl(UNIT)

    assert broken.pages == 1
    assert broken.records_seen == 0
    assert detail.goto_calls == []

    portal.locator("#selInfraUnidades").select_option("1002")
    result = crawler.crawl(Unit(selector_value="1002", ordinal_index=2))

    assert result.committed == 1
    assert staging.count() == 1


@pytest.mark.parametrize("portal_cls", [_StallingPortal, _DetachedNextPortal])
def test_failed_page_turn_ends_unit_after_committing_current_page(
    staging: StagingStore, portal_cls
) -> None:
    history = {detail_url(1): HISTORY_TABLE_HTML, detail_url(2): HISTORY_TABLE_HTML}
    detail = FakeDetailPage(history)
    _, crawler = _crawler([[list_row(1)], [list_row(2)]], detail, staging, portal_cls=portal_cls)

    result = crawler.crawl(UNIT)

    assert result.pages == 1
    assert result.committed == 1
    assert detail.goto_calls == [detail_url(1)]
    assert staging.count() == 1

from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.crawler.session_store import SessionStore
from app.crawler.state import KeyValueStore
from tests.playwright_fakes import SESSION_COOKIE, FakeContext


def test_restore_without_saved_cookies_returns_none(tmp_path: Path) -> None:
    context = FakeContext()

    with KeyValueStore(tmp_path / "cookie_storage") as store:
        assert SessionStore(store).restore(context) is None

    assert context.added == []


def test_save_then_restore_round_trips_cookies(tmp_path: Path) -> None:
    directory = tmp_path / "cookie_storage"

    with KeyValueStore(directory) as store:
        saved = SessionStore(store).save(FakeContext([SESSION_COOKIE]))
    assert saved == 1

    payload = json.loads((directory / "cookies.json").read_text(encoding="utf-8"))
    assert payload == [SESSION_COOKIE]

    fresh = FakeContext()
    with KeyValueStore(directory) as store:
        restored = SessionStore(store).restore(fresh)

    assert restored == [SESSION_COOKIE]
    assert fresh.added == [SESSION_COOKIE]


def test_save_overwrites_previous_session(tmp_path: Path) -> None:
    other = dict(SESSION_COOKIE, value="zzz")

    with KeyValueStore(tmp_path) as store:
        sessions = SessionStore(store)
        sessions.save(FakeContext([SESSION_COOKIE, dict(SESSION_COOKIE, name="extra")]))
        sessions.save(FakeContext([other]))

        assert sessions.load() == [other]


def test_corrupt_cookie_file_is_treated_as_absent(tmp_path: Path) -> None:
    (tmp_path / "cookies.json").write_text("{not json", encoding="utf-8")

    with KeyValueStore(tmp_path) as store:
        assert SessionStore(store).restore(FakeContext()) is None


def test_non_list_payload_is_ignored(tmp_path: Path) -> None:
    with KeyValueStore(tmp_path) as store:
        store.set("cookies", {"name": "PHPSESSID"})
        assert SessionStore(store).load() is None
        assert store.get("cookies") is None
        assert not (tmp_path / "cookies.json").exists()


def test_save_failure_is_not_fatal(tmp_path: Path) -> None:
    class _Exploding(FakeContext):
        def cookies(self):
            raise RuntimeError("context closed")

    with KeyValueStore(tmp_path) as store:
        assert SessionStore(store).save(_Exploding()) == 0


def test_closed_store_refuses_access(tmp_path: Path) -> None:
    store = KeyValueStore(tmp_path)

    with pytest.raises(RuntimeError):
        store.get("cookies")

    store.open()
    store.set("cookies", [])
    store.delete("cookies")
    assert store.get("cookies") is None
    store.close()
    assert store.is_open is False

"""Staging-then-promote persistence for extracted records."""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from . import config, db
from .error_codes import ErrorCode
from .logging_utils import _crawl_event
from .models import ExtractedRecord
from .utils import log_line


class StagingStore:
    """Sole writer of the ``processos`` table.

    In ``per_record`` mode every :meth:`commit` creates the staging table,
    inserts the record into it, copies the staging rows into ``processos`` and
    drops the staging table. Insert, promote and drop share one transaction,
    so a failure in any of them leaves neither table changed and the record is
    lost (at-most-once).

    In ``batch`` mode :meth:`commit` only inserts into the staging table and
    :meth:`finalize` promotes everything once at the end of the run.
    """

    def __init__(self, db_path: Optional[Path] = None, *, mode: Optional[str] = None) -> None:
        self.db_path = db_path
        self.mode = (mode or config.STAGING_MODE).strip().lower()
        self.batch = config.is_batch_staging(self.mode)
        self.committed = 0
        self.failed = 0
        self._conn: Optional[sqlite3.Connection] = None

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> "StagingStore":
        if self._conn is None:
            self._conn = db.get_connection(self.db_path)
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "StagingStore":
        return self.open()

    def __exit__(self, *_exc: object) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("StagingStore is not open")
        return self._conn

    # -- steps -------------------------------------------------------------

    def _create_tables(self, conn: sqlite3.Connection) -> None:
        conn.execute(db.create_table_sql(db.MAIN_TABLE))
        conn.execute(db.create_table_sql(db.STAGING_TABLE))

    def _insert_staging(self, conn: sqlite3.Connection, record: ExtractedRecord) -> None:
        conn.execute(db.insert_sql(db.STAGING_TABLE), record.as_row())

    def _promote(self, conn: sqlite3.Connection) -> int:
        cursor = conn.execute(db.promote_sql())
        return max(0, cursor.rowcount)

    def _drop_staging(self, conn: sqlite3.Connection) -> None:
        conn.execute(f"DROP TABLE IF EXISTS {db.STAGING_TABLE}")

    def _log_failure(self, step: str, exc: Exception, **fields: object) -> None:
        log_line(f"[DB][ERROR] {step} failed: {exc}")
        _crawl_event(
            "error",
            phase="persist",
            step=step,
            error_code=ErrorCode.PERSISTENCE,
            error=str(exc),
            mode=self.mode,
            **fields,
        )

    # -- public API --------------------------------------------------------

    def clear(self) -> bool:
        """Empty ``processos`` and discard any staging table left by a previous run."""

        conn = self.conn
        try:
            with conn:
                conn.execute(db.create_table_sql(db.MAIN_TABLE))
                conn.execute(f"DELETE FROM {db.MAIN_TABLE}")
                conn.execute(f"DROP TABLE IF EXISTS {db.STAGING_TABLE}")
        except sqlite3.Error as exc:
            self._log_failure("clear", exc)
            return False
        log_line(f"[DB] Table {db.MAIN_TABLE} cleared.")
        return True

    def commit(self, record: ExtractedRecord) -> bool:
        """Persist ``record``. Returns ``False`` (after logging) when it was dropped."""

        conn = self.conn
        try:
            self._create_tables(conn)
        except sqlite3.Error as exc:
            self.failed += 1
            self._log_failure("create", exc, nome_processo=record.nome_processo)
            return False

        step = "insert"
        try:
            with conn:
                self._insert_staging(conn, record)
                if not self.batch:
                    step = "promote"
                    self._promote(conn)
                    step = "drop"
                    self._drop_staging(conn)
        except sqlite3.Error as exc:
            self.failed += 1
            self._log_failure(step, exc, nome_processo=record.nome_processo)
            return False

        self.committed += 1
        _crawl_event(
            "persist",
            step="committed",
            nome_processo=record.nome_processo,
            staged_only=self.batch,
        )
        return True

    def finalize(self) -> int:
        """Promote staged rows in batch mode. Returns the number of rows promoted."""

        if not self.batch:
            return 0
        conn = self.conn
        if not db.table_exists(conn, db.STAGING_TABLE):
            log_line("[DB] Nothing staged; skipping promote.")
            return 0
        step = "promote"
        try:
            with conn:
                promoted = self._promote(conn)
                step = "drop"
                self._drop_staging(conn)
        except sqlite3.Error as exc:
            self._log_failure(step, exc, staged=self.committed)
            return 0
        log_line(f"[DB] Promoted {promoted} staged records into {db.MAIN_TABLE}.")
        return promoted

    def count(self) -> int:
        return db.count_rows(self.conn, db.MAIN_TABLE)


__all__ = ["StagingStore"]

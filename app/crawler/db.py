"""SQLite helpers for the SEI crawler.

This module defines the database path, connection helper and the DDL for the
``processos`` table and its ``processos_temp`` staging twin.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from . import config

MAIN_TABLE = "processos"
STAGING_TABLE = "processos_temp"

_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    nome_processo    TEXT,
    descricao        TEXT,
    data_recebimento TEXT,
    unidade          TEXT,
    usuario          TEXT,
    detalhes         TEXT,
    quantidade_dias  INTEGER
);
"""

_COLUMN_LIST = ", ".join(config.RECORD_COLUMNS)


def get_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """Return a SQLite connection to the crawler database.

    The parent directory is created if missing. ``config.DB_PATH`` is read at
    call time so tests can redirect it.
    """

    path = Path(db_path or config.DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def create_table_sql(table: str) -> str:
    return _TABLE_DDL.format(table=table)


def insert_sql(table: str) -> str:
    placeholders = ", ".join("?" for _ in config.RECORD_COLUMNS)
    return f"INSERT INTO {table} ({_COLUMN_LIST}) VALUES ({placeholders})"


def promote_sql() -> str:
    return (
        f"INSERT INTO {MAIN_TABLE} ({_COLUMN_LIST}) "
        f"SELECT {_COLUMN_LIST} FROM {STAGING_TABLE} ORDER BY id"
    )


def initialize_schema(conn: sqlite3.Connection) -> None:
    """Create the main table if it does not yet exist. Safe to call repeatedly."""

    with conn:
        conn.execute(create_table_sql(MAIN_TABLE))


def count_rows(conn: sqlite3.Connection, table: str = MAIN_TABLE) -> int:
    cursor = conn.execute(f"SELECT COUNT(*) AS cnt FROM {table}")
    return int(cursor.fetchone()["cnt"])


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    cursor = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    )
    return cursor.fetchone() is not None


__all__ = [
    "MAIN_TABLE",
    "STAGING_TABLE",
    "get_connection",
    "initialize_schema",
    "count_rows",
    "table_exists",
]

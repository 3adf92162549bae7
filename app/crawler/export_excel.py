"""Excel export of the crawled processes."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import pandas as pd

from . import config, db
from .utils import log_line


def load_processos_frame(db_path: Optional[Path] = None) -> pd.DataFrame:
    """Return the ``processos`` table as a DataFrame ordered by id."""

    conn = db.get_connection(db_path)
    try:
        db.initialize_schema(conn)
        return pd.read_sql_query(f"SELECT * FROM {db.MAIN_TABLE} ORDER BY id", conn)
    finally:
        conn.close()


def export_processos_to_excel(
    dest_path: Optional[str] = None, *, db_path: Optional[Path] = None
) -> str:
    """Write all processes plus a per-unit summary sheet to an Excel workbook."""

    df = load_processos_frame(db_path)
    if df.empty:
        df = pd.DataFrame([{"info": "No processes in the last run"}])
        per_unit = pd.DataFrame()
    else:
        per_unit = (
            df.groupby("unidade", dropna=False)
            .agg(processos=("id", "count"), dias_max=("quantidade_dias", "max"))
            .reset_index()
            .sort_values("processos", ascending=False)
        )

    if not dest_path:
        os.makedirs(config.EXPORTS_DIR, exist_ok=True)
        dest_path = str(config.EXPORTS_DIR / "processos.xlsx")

    with pd.ExcelWriter(dest_path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Processos")
        if not per_unit.empty:
            per_unit.to_excel(writer, index=False, sheet_name="Por_Unidade")

    log_line(f"[EXPORT] Wrote {dest_path}")
    return dest_path


__all__ = ["export_processos_to_excel", "load_processos_frame"]

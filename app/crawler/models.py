from __future__ import annotations

"""Value types passed between the crawler stages."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple

from . import config
from .error_codes import ErrorCode
from .logging_utils import _crawl_event

_INTEGER_RE = re.compile(r"^-?\d+$")


@dataclass(frozen=True)
class Unit:
    selector_value: str
    ordinal_index: int
    label: str = ""


@dataclass(frozen=True)
class RecordLink:
    target_url: str
    label: str
    tooltip_raw: str = ""


class ExtractionOutcome(str, Enum):
    OK = "ok"
    NO_TABLE = "no_table"
    FAILED = "failed"


@dataclass
class HistoryExtraction:
    """Cells read from the history table, with the reason when there are none."""

    outcome: ExtractionOutcome
    cells: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok(cls, cells: Sequence[str]) -> "HistoryExtraction":
        return cls(ExtractionOutcome.OK, list(cells))

    @classmethod
    def no_table(cls) -> "HistoryExtraction":
        return cls(ExtractionOutcome.NO_TABLE)

    @classmethod
    def failed(cls, error: str) -> "HistoryExtraction":
        return cls(ExtractionOutcome.FAILED, error=error)


def _coerce_day_count(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    if _INTEGER_RE.match(text):
        return int(text)
    _crawl_event(
        "error",
        phase="schema",
        error_code=ErrorCode.SCHEMA,
        field="quantidade_dias",
        value=raw,
    )
    return None


@dataclass(frozen=True)
class ExtractedRecord:
    """One row of the ``processos`` table.

    Values map positionally: the list label and tooltip come first, followed
    by the history cells. Missing cells are ``None``; cells beyond the last
    column are dropped.
    """

    nome_processo: Optional[str] = None
    descricao: Optional[str] = None
    data_recebimento: Optional[str] = None
    unidade: Optional[str] = None
    usuario: Optional[str] = None
    detalhes: Optional[str] = None
    quantidade_dias: Optional[int] = None

    @classmethod
    def from_values(cls, values: Sequence[Any]) -> "ExtractedRecord":
        padded: List[Any] = list(values[: len(config.RECORD_COLUMNS)])
        padded += [None] * (len(config.RECORD_COLUMNS) - len(padded))
        padded[-1] = _coerce_day_count(padded[-1])
        return cls(*padded)

    @classmethod
    def from_extraction(
        cls, link: RecordLink, tooltip_text: str, history: HistoryExtraction
    ) -> "ExtractedRecord":
        return cls.from_values([link.label, tooltip_text, *history.cells])

    def as_row(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, column) for column in config.RECORD_COLUMNS)


__all__ = [
    "Unit",
    "RecordLink",
    "ExtractionOutcome",
    "HistoryExtraction",
    "ExtractedRecord",
]

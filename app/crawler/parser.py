"""HTML parsing helpers for SEI list, unit selector and history markup."""
from __future__ import annotations

import re
from typing import List

from bs4 import BeautifulSoup

from .models import RecordLink, Unit
from .selectors_sei import SEI_SELECTORS, SeiSelectors
from .utils import normalize_url

# Either a single-quoted segment or a trailing comma-free run; an apostrophe
# ends the run only when it opens a closed quoted pair ("Sant'Ana" stays whole).
_TOOLTIP_RE = re.compile(r"'([^']*)'|(\w+(?:[^,']|'(?![^']*'))*)$")


def _soup(markup: str) -> BeautifulSoup:
    # html5lib builds the same tree as the browser (implicit tbody included).
    return BeautifulSoup(markup or "", "html5lib")


def parse_tooltip(raw: str | None) -> str:
    """Return the tooltip text carried by an ``onmouseover`` handler.

    The last match wins: ``infraTooltipMostrar('Descricao','Tipo')`` yields
    ``Tipo``. Returns an empty string when nothing matches.
    """

    if not raw:
        return ""
    matches = [match.group(0) for match in _TOOLTIP_RE.finditer(raw)]
    if not matches:
        return ""
    return matches[-1].replace("'", "").strip()


def parse_history_row(table_html: str, *, selectors: SeiSelectors = SEI_SELECTORS) -> List[str]:
    """Return the trimmed cell texts of the history table's second body row."""

    soup = _soup(table_html)
    row = soup.select_one(selectors.history_row)
    if row is None:
        return []
    return [cell.get_text().strip() for cell in row.find_all("td")]


def parse_record_links(
    table_html: str,
    *,
    page_url: str,
    selectors: SeiSelectors = SEI_SELECTORS,
) -> List[RecordLink]:
    """Extract one :class:`RecordLink` per list row that has a link in its third cell."""

    soup = _soup(table_html)
    links: List[RecordLink] = []
    for row in soup.select(selectors.list_row):
        cells = row.find_all("td")
        if len(cells) <= selectors.list_link_cell_index:
            continue
        anchor = cells[selectors.list_link_cell_index].find("a")
        if anchor is None:
            continue
        target_url = normalize_url(anchor.get("href", ""), page_url=page_url)
        if not target_url:
            continue
        links.append(
            RecordLink(
                target_url=target_url,
                label=anchor.get_text().strip(),
                tooltip_raw=anchor.get(selectors.list_link_attribute) or "",
            )
        )
    return links


def parse_unit_options(select_html: str, *, selectors: SeiSelectors = SEI_SELECTORS) -> List[Unit]:
    """Return the unit selector's options in document order (1-based ordinals)."""

    soup = _soup(select_html)
    units: List[Unit] = []
    for index, option in enumerate(soup.select(selectors.unit_option), start=1):
        label = " ".join(option.get_text().split())
        value = option.get("value")
        units.append(
            Unit(
                selector_value=value if value is not None else label,
                ordinal_index=index,
                label=label,
            )
        )
    return units


__all__ = [
    "parse_tooltip",
    "parse_history_row",
    "parse_record_links",
    "parse_unit_options",
]

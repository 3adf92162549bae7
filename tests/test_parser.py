from __future__ import annotations

import pytest

from app.crawler import parser
from tests.playwright_fakes import HISTORY_TABLE_HTML, detail_url, list_row, list_table

PAGE_URL = "https://sei.pi.gov.br/sei/controlador.php?acao=procedimento_controlar"


def test_history_row_returns_second_body_row_cells_trimmed() -> None:
    cells = parser.parse_history_row(HISTORY_TABLE_HTML)

    assert cells == [
        "10/01/2024 09:15",
        "SESAPI-GAB",
        "maria.silva",
        "Processo recebido na unidade",
        "12",
    ]


def test_history_row_without_tbody_markup_still_uses_second_row() -> None:
    markup = (
        '<table id="tblHistorico">'
        "<tr><th>Data</th></tr>"
        "<tr><td>01/02/2024</td><td> GAB </td></tr>"
        "</table>"
    )

    assert parser.parse_history_row(markup) == ["01/02/2024", "GAB"]


def test_history_row_with_single_row_is_empty() -> None:
    markup = '<table id="tblHistorico"><tbody><tr><th>Data</th></tr></tbody></table>'

    assert parser.parse_history_row(markup) == []


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("return infraTooltipMostrar('FooBar');", "FooBar"),
        ("return infraTooltipMostrar('Especificação','Administrativo: Diárias');", "Administrativo: Diárias"),
        ("infraTooltipMostrar('  Ofício 12  ')", "Ofício 12"),
        ("alpha, beta gamma", "beta gamma"),
        ("solicitacao de compra", "solicitacao de compra"),
        ("Hospital Sant'Ana Teresina", "Hospital SantAna Teresina"),
        ("copo d'agua", "copo dagua"),
        ("alpha, Sant'Ana", "SantAna"),
        (",,,", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_parse_tooltip(raw, expected) -> None:
    assert parser.parse_tooltip(raw) == expected


def test_record_links_keep_document_order_and_drop_rows_without_anchor() -> None:
    rows = [
        list_row(1, tooltip="Tipo A"),
        "<tr><td>x</td><td>y</td><td>sem link</td></tr>",
        "<tr><td>only two</td><td>cells</td></tr>",
        list_row(2, label="  00012.000002/2024-11  "),
    ]

    links = parser.parse_record_links(list_table(rows), page_url=PAGE_URL)

    assert [link.target_url for link in links] == [detail_url(1), detail_url(2)]
    assert links[0].label == "00012.000001/2024-11"
    assert links[1].label == "00012.000002/2024-11"
    assert "infraTooltipMostrar" in links[0].tooltip_raw
    assert parser.parse_tooltip(links[0].tooltip_raw) == "Tipo A"


def test_record_links_empty_table() -> None:
    assert parser.parse_record_links(list_table([]), page_url=PAGE_URL) == []


def test_unit_options_are_numbered_from_one() -> None:
    markup = (
        '<select id="selInfraUnidades">'
        '<option value="110000001">SESAPI-GAB</option>'
        '<option value="110000002" selected>SESAPI-PROTOCOLO</option>'
        "<option>SEM VALOR</option>"
        "</select>"
    )

    units = parser.parse_unit_options(markup)

    assert [(u.selector_value, u.ordinal_index) for u in units] == [
        ("110000001", 1),
        ("110000002", 2),
        ("SEM VALOR", 3),
    ]
    assert units[1].label == "SESAPI-PROTOCOLO"

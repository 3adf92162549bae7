from __future__ import annotations

"""Selectors for the SEI login page, process list and process detail view."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SeiSelectors:
    """DOM identities the crawler depends on.

    The detail view is split across two frames: the tree frame carries the
    "Consultar Andamento" link and the view frame renders the history table
    once that link is clicked.
    """

    login_submit: str = "#sbmLogin"
    username_input: str = "#txtUsuario"
    password_input: str = "#pwdSenha"
    orgao_select: str = "#selOrgao"

    unit_select: str = "#selInfraUnidades"
    unit_option: str = "option"

    list_table: str = "#tblProcessosRecebidos"
    list_row: str = "tbody tr"
    list_link_cell_index: int = 2
    list_link_attribute: str = "onmouseover"
    next_page: str = "#pagingNext"

    tree_frame: str = "#ifrArvore"
    progress_trigger: str = "#divConsultarAndamento a"
    view_frame: str = "#ifrVisualizacao"
    history_table: str = "#tblHistorico"
    history_row: str = "tbody tr:nth-child(2)"


SEI_SELECTORS = SeiSelectors()

__all__ = ["SeiSelectors", "SEI_SELECTORS"]

# -*- coding: utf-8 -*-
"""view_creatives.py - Criativos: filtros (oferta/status/fonte/copy), cadastro, arquivamento e métricas diárias."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List

import pandas as pd
import streamlit as st

from archive import archive_criativo, restore_criativo
from data import create_criativo, upsert_metrica_diaria
from page_helpers import lookup_names
from queries import invalidate, load_copywriters, load_criativos_com_medias, load_metricas_criativo, load_ofertas
from schema import ARQUIVADO, STATUS_CRIATIVO, STATUS_LABEL
from state import FilterState, flash, show_flash
from ui import render_download_compact, render_empty_state, render_trend_chart, st_dataframe_safe
from utils import today_local

logger = logging.getLogger(__name__)

PAGE = "criativos"
FONTES = ["facebook", "google", "tiktok", "youtube", "outro"]

_COLS = {
    "nome": "Criativo",
    "oferta_nome": "Oferta",
    "status_label": "Status",
    "fonte": "Fonte",
    "copy_responsavel": "Copy",
    "investimento": "Investimento",
    "faturamento": "Faturamento",
    "roas": "ROAS",
    "cpc": "CPC",
    "ic": "IC",
}


def filter_creatives(df: pd.DataFrame, fonte: str = "all", copy_responsavel: str = "all", q: str = "") -> pd.DataFrame:
    if df is None or df.empty:
        return df
    mask = pd.Series(True, index=df.index)
    if fonte and fonte != "all":
        mask &= df["fonte"] == fonte
    if copy_responsavel and copy_responsavel != "all":
        mask &= df["copy_responsavel"] == copy_responsavel
    if q:
        mask &= df["nome"].fillna("").astype(str).str.lower().str.contains(q.lower(), regex=False)
    return df[mask]


def metric_form_row(criativo_id: str, dia: date, values: Dict) -> Dict:
    """Linha para upsert de metricas_diarias; campos vazios viram zero."""
    row = {"criativo_id": criativo_id, "data": dia}
    for c in ("investimento", "faturamento"):
        row[c] = float(values.get(c) or 0)
    for c in ("impressoes", "cliques", "ics", "vendas"):
        row[c] = int(values.get(c) or 0)
    return row


def _offer_options(engine) -> Dict[str, str]:
    df = load_ofertas(engine)
    if df is None or df.empty:
        return {}
    return {str(r["id"]): str(r["nome"]) for r in df.to_dict(orient="records")}


def _create_form(engine, offers: Dict[str, str], copys: List[str]) -> None:
    with st.expander("➕ Novo criativo", expanded=False):
        if not offers:
            st.info("Cadastre uma oferta antes de criar criativos.")
            return
        with st.form("criativo_new", clear_on_submit=True):
            nome = st.text_input("Nome")
            c1, c2, c3 = st.columns(3)
            oferta_id = c1.selectbox("Oferta", list(offers), format_func=offers.get)
            fonte = c2.selectbox("Fonte", FONTES)
            copy = c3.selectbox("Copy", [""] + copys)
            if st.form_submit_button("Criar criativo", type="primary"):
                try:
                    cr = create_criativo(engine, {
                        "nome": nome,
                        "oferta_id": oferta_id,
                        "fonte": fonte,
                        "copy_responsavel": copy or None,
                    })
                except ValueError as e:
                    st.error(str(e))
                    return
                except Exception as e:
                    logger.error(f"create criativo failed: {e}")
                    st.error("Não foi possível criar o criativo.")
                    return
                flash(f'Criativo "{cr["nome"]}" criado.')
                invalidate()
                st.rerun()


def _toggle_archive(engine, cr: Dict) -> None:
    arquivar = cr.get("status") != ARQUIVADO
    try:
        if arquivar:
            archive_criativo(engine, cr["id"])
        else:
            restore_criativo(engine, cr["id"])
    except Exception as e:
        logger.error(f"archive toggle {cr['id']} failed: {e}")
        st.toast("Não foi possível atualizar o criativo.", icon="⚠️")
        return
    flash(f'Criativo "{cr["nome"]}" ' + ("arquivado." if arquivar else "restaurado."))
    invalidate()
    st.rerun()


def _metrics_panel(engine, cr: Dict) -> None:
    st.markdown(f"<div class='of-sec-title'>📅 Métricas diárias · {cr['nome']}</div>", unsafe_allow_html=True)
    with st.form(f"metricas_{cr['id']}"):
        c = st.columns(7)
        dia = c[0].date_input("Data", value=today_local(), format="DD/MM/YYYY")
        values = {
            "investimento": c[1].number_input("Investimento", min_value=0.0, step=1.0),
            "faturamento": c[2].number_input("Faturamento", min_value=0.0, step=1.0),
            "impressoes": c[3].number_input("Impressões", min_value=0, step=1),
            "cliques": c[4].number_input("Cliques", min_value=0, step=1),
            "ics": c[5].number_input("ICs", min_value=0, step=1),
            "vendas": c[6].number_input("Vendas", min_value=0, step=1),
        }
        if st.form_submit_button("Salvar dia", type="primary"):
            try:
                upsert_metrica_diaria(engine, metric_form_row(cr["id"], dia, values))
            except Exception as e:
                logger.error(f"upsert metricas {cr['id']} failed: {e}")
                st.error("Não foi possível salvar as métricas.")
                return
            flash(f"Métricas de {dia.strftime('%d/%m/%Y')} salvas.")
            invalidate()
            st.rerun()

    hist = load_metricas_criativo(engine, cr["id"])
    if hist is None or hist.empty:
        st.caption("Sem métricas registradas.")
        return
    render_trend_chart(hist, "investimento", "Investimento")
    st_dataframe_safe(hist.drop(columns=["id", "criativo_id"], errors="ignore"), use_container_width=True, hide_index=True)


def page_creatives(engine) -> None:
    show_flash()
    st.markdown("<div class='of-sec-title'>🎬 Criativos</div>", unsafe_allow_html=True)

    offers = _offer_options(engine)
    copys = lookup_names(load_copywriters(engine))
    _create_form(engine, offers, copys)

    sv = FilterState.get(PAGE)
    r = st.columns([3, 2, 1.4, 1.4, 1.6], gap="small")
    q = r[0].text_input("Buscar", sv.get("q", ""), placeholder="Buscar criativo...", key=f"{PAGE}_q", label_visibility="collapsed")
    offer_opts = ["all"] + list(offers)
    oferta_id = r[1].selectbox(
        "Oferta", offer_opts,
        index=offer_opts.index(sv["oferta"]) if sv.get("oferta") in offer_opts else 0,
        format_func=lambda x: "Todas Ofertas" if x == "all" else offers[x],
        key=f"{PAGE}_oferta", label_visibility="collapsed",
    )
    status_opts = ["all"] + list(STATUS_CRIATIVO)
    status = r[2].selectbox(
        "Status", status_opts,
        index=status_opts.index(sv["status"]) if sv.get("status") in status_opts else 0,
        format_func=lambda x: "Todos Status" if x == "all" else STATUS_LABEL[x],
        key=f"{PAGE}_status", label_visibility="collapsed",
    )
    fonte_opts = ["all"] + FONTES
    fonte = r[3].selectbox("Fonte", fonte_opts, format_func=lambda x: "Todas Fontes" if x == "all" else x, key=f"{PAGE}_fonte", label_visibility="collapsed")
    copy_opts = ["all"] + copys
    copy = r[4].selectbox("Copy", copy_opts, format_func=lambda x: "Todos Copys" if x == "all" else x, key=f"{PAGE}_copy", label_visibility="collapsed")
    FilterState.update(PAGE, q=q or "", oferta=oferta_id, status=status)

    df = load_criativos_com_medias(engine, None if oferta_id == "all" else oferta_id, status)
    df = filter_creatives(df, fonte, copy, q or "")
    n = 0 if df is None else len(df)
    st.caption(f"{n} criativo(s)")
    if n == 0:
        render_empty_state("Nenhum criativo encontrado.", "Altere a busca ou os filtros de oferta, status, fonte e copy.")
        return

    view = df.copy()
    view["oferta_nome"] = view["oferta_id"].astype(str).map(offers).fillna("-")
    view["status_label"] = view["status"].map(STATUS_LABEL).fillna(view["status"])
    table = view[list(_COLS)].rename(columns=_COLS)
    st_dataframe_safe(table, use_container_width=True, hide_index=True)
    render_download_compact(table, "criativos", "criativos", PAGE)

    st.divider()
    records = view.to_dict(orient="records")
    by_id = {str(x["id"]): x for x in records}
    sel = st.selectbox("Criativo", list(by_id), format_func=lambda x: f"{by_id[x]['nome']} ({by_id[x]['oferta_nome']})", key=f"{PAGE}_sel")
    cr = by_id[sel]
    label = "↩️ Restaurar criativo" if cr.get("status") == ARQUIVADO else "🗄️ Arquivar criativo"
    if st.button(label, key=f"{PAGE}_toggle_{sel}"):
        _toggle_archive(engine, cr)
    _metrics_panel(engine, cr)

# -*- coding: utf-8 -*-
"""view_offers.py - Ofertas ativas: listagem com filtros, cadastro, troca de status e arquivamento."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import pandas as pd
import streamlit as st

from archive import archive_oferta
from data import create_oferta, update_oferta
from metrics import DEFAULT_THRESHOLDS, parse_thresholds
from page_helpers import filter_offers, lookup_names, render_offer_filters
from queries import invalidate, load_criativos_count, load_metricas_agregadas, load_nichos, load_ofertas, load_paises
from schema import ARQUIVADO, STATUS_LABEL, STATUS_OFERTA
from state import FilterState, flash, show_flash
from ui import render_empty_state, render_offer_card

logger = logging.getLogger(__name__)

PAGE = "ofertas"
ACTIVE_STATUS = [s for s in STATUS_OFERTA if s != ARQUIVADO]


def active_offers(df: pd.DataFrame, status: str = "all") -> pd.DataFrame:
    """Tira as arquivadas (elas têm página própria) e aplica o filtro de status."""
    if df is None or df.empty:
        return df
    out = df[df["status"] != ARQUIVADO]
    if status and status != "all":
        out = out[out["status"] == status]
    return out


def build_thresholds(values: Dict[str, float]) -> Optional[Dict[str, Dict[str, float]]]:
    """Monta o blob de thresholds a partir dos campos do formulário. Igual ao padrão vira None."""
    out = {}
    for metric in DEFAULT_THRESHOLDS:
        verde, amarelo = values.get(f"{metric}_verde"), values.get(f"{metric}_amarelo")
        if verde is None or amarelo is None:
            continue
        out[metric] = {"verde": float(verde), "amarelo": float(amarelo)}
    if not out or parse_thresholds(out) == parse_thresholds(None):
        return None
    return out


def _threshold_inputs(prefix: str, current=None) -> Dict[str, float]:
    th = parse_thresholds(current)
    values = {}
    cols = st.columns(3)
    for col, metric in zip(cols, ("roas", "cpc", "ic")):
        with col:
            st.caption(metric.upper() + (" (maior é melhor)" if metric == "roas" else " (menor é melhor)"))
            values[f"{metric}_verde"] = st.number_input("Verde", value=float(th[metric]["verde"]), step=0.1, key=f"{prefix}_{metric}_v")
            values[f"{metric}_amarelo"] = st.number_input("Amarelo", value=float(th[metric]["amarelo"]), step=0.1, key=f"{prefix}_{metric}_a")
    return values


def _create_form(engine) -> None:
    nichos = lookup_names(load_nichos(engine))
    paises = lookup_names(load_paises(engine))
    with st.expander("➕ Nova oferta", expanded=False):
        with st.form("oferta_new", clear_on_submit=True):
            nome = st.text_input("Nome")
            c1, c2, c3 = st.columns(3)
            nicho = c1.selectbox("Nicho", [""] + nichos)
            pais = c2.selectbox("País", [""] + paises)
            status = c3.selectbox("Status", ACTIVE_STATUS, format_func=STATUS_LABEL.get)
            st.markdown("**Thresholds**")
            th_values = _threshold_inputs("new")
            if st.form_submit_button("Criar oferta", type="primary"):
                try:
                    oferta = create_oferta(engine, {
                        "nome": nome,
                        "nicho": nicho or None,
                        "pais": pais or None,
                        "status": status,
                        "thresholds": build_thresholds(th_values),
                    })
                except ValueError as e:
                    st.error(str(e))
                    return
                except Exception as e:
                    logger.error(f"create oferta failed: {e}")
                    st.error("Não foi possível criar a oferta.")
                    return
                flash(f'"{oferta["nome"]}" criada.')
                invalidate()
                st.rerun()


@st.dialog("Arquivar Oferta")
def _archive_dialog(engine, oferta: Dict, n_criativos: int) -> None:
    st.write(f'Arquivar "{oferta["nome"]}"?')
    if n_criativos:
        st.caption("Os criativos ainda não arquivados desta oferta serão arquivados junto e poderão ser restaurados com ela.")
    c1, c2 = st.columns(2)
    if c1.button("Cancelar", use_container_width=True, key="archive_cancel"):
        st.rerun()
    if c2.button("Arquivar", type="primary", use_container_width=True, key="archive_ok"):
        try:
            with st.spinner("Arquivando..."):
                archive_oferta(engine, oferta["id"])
        except Exception as e:
            logger.error(f"archive {oferta['id']} failed: {e}")
            st.error("Não foi possível arquivar a oferta.")
            return
        flash(f'"{oferta["nome"]}" foi arquivada.')
        invalidate()
        st.rerun()


@st.dialog("Editar Oferta")
def _edit_dialog(engine, oferta: Dict) -> None:
    cur = oferta.get("status") if oferta.get("status") in ACTIVE_STATUS else ACTIVE_STATUS[0]
    status = st.selectbox("Status", ACTIVE_STATUS, index=ACTIVE_STATUS.index(cur), format_func=STATUS_LABEL.get, key="edit_status")
    st.markdown("**Thresholds**")
    th_values = _threshold_inputs("edit", oferta.get("thresholds"))
    if st.button("Salvar", type="primary", use_container_width=True, key="edit_ok"):
        try:
            update_oferta(engine, oferta["id"], {"status": status, "thresholds": build_thresholds(th_values)})
        except Exception as e:
            logger.error(f"update {oferta['id']} failed: {e}")
            st.error("Não foi possível salvar a oferta.")
            return
        flash(f'"{oferta["nome"]}" atualizada.')
        invalidate()
        st.rerun()


def page_offers(engine) -> None:
    show_flash()
    st.markdown("<div class='of-sec-title'>🎯 Ofertas</div>", unsafe_allow_html=True)
    _create_form(engine)

    f = render_offer_filters(engine, PAGE, placeholder="Buscar oferta...", default_periodo="all", show_all_option=True)
    sv = FilterState.get(PAGE, "all")
    status_opts = ["all"] + ACTIVE_STATUS
    status = f["extra_col"].selectbox(
        "Status",
        status_opts,
        index=status_opts.index(sv["status"]) if sv.get("status") in status_opts else 0,
        format_func=lambda x: "Todos Status" if x == "all" else STATUS_LABEL[x],
        key=f"{PAGE}_status",
        label_visibility="collapsed",
    )
    FilterState.update(PAGE, status=status)

    ofertas = active_offers(load_ofertas(engine), status)
    filtered = filter_offers(ofertas, f["q"], f["nicho"], f["pais"], f["periodo"])
    n = 0 if filtered is None else len(filtered)
    st.caption(f"{n} oferta(s)")
    if n == 0:
        render_empty_state("Nenhuma oferta encontrada.")
        return

    metrics = load_metricas_agregadas(engine)
    counts = load_criativos_count(engine)

    cols = st.columns(3, gap="medium")
    for i, oferta in enumerate(filtered.to_dict(orient="records")):
        oid = str(oferta["id"])
        with cols[i % 3]:
            render_offer_card(oferta, metrics.get(oid), counts.get(oid, 0))
            b1, b2 = st.columns(2)
            if b1.button("✏️ Editar", key=f"edit_{oid}", use_container_width=True):
                _edit_dialog(engine, oferta)
            if b2.button("🗄️ Arquivar", key=f"archive_{oid}", use_container_width=True):
                _archive_dialog(engine, oferta, counts.get(oid, 0))

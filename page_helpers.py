# -*- coding: utf-8 -*-
"""page_helpers.py - Shared filters (period selector, search/niche/country bar) and listing predicate."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from database import get_engine
from queries import load_nichos, load_paises
from state import FilterState
from ui import render_hero
from utils import BUILD_TAG, PERIODO_LABELS, PERIODO_TIPOS, init_page, make_periodo, to_local_naive

logger = logging.getLogger(__name__)

ALL = "all"


def _is_all(value) -> bool:
    return value is None or value == "" or value == ALL


def filter_offers(df: pd.DataFrame, q: str = "", nicho: str = ALL, pais: str = ALL, periodo: Optional[Dict] = None) -> pd.DataFrame:
    """Filtro da listagem feito no cliente: nome contém a busca, nicho/país iguais e,
    fora do período 'all', archived_at (ou updated_at) dentro de [início 00:00, fim 23:59:59.999999]."""
    if df is None or df.empty:
        return df

    mask = pd.Series(True, index=df.index)
    needle = (q or "").lower()
    if needle:
        mask &= df["nome"].fillna("").astype(str).str.lower().str.contains(needle, regex=False)
    if not _is_all(nicho):
        mask &= df["nicho"] == nicho
    if not _is_all(pais):
        mask &= df["pais"] == pais

    if periodo and periodo.get("tipo") != ALL:
        empty = pd.Series(pd.NaT, index=df.index)
        ts = to_local_naive(df.get("archived_at", empty)).fillna(to_local_naive(df.get("updated_at", empty)))
        start = pd.Timestamp(periodo["data_inicio"])
        end = pd.Timestamp(periodo["data_fim"]) + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
        mask &= ts.notna() & (ts >= start) & (ts <= end)

    return df[mask]


def lookup_names(df: Optional[pd.DataFrame]) -> List[str]:
    if df is None or df.empty or "nome" not in df.columns:
        return []
    return [str(x) for x in df["nome"].dropna().tolist() if str(x).strip()]


def render_periodo_filter(col, value: Dict, *, key: str, show_all_option: bool = False) -> Dict:
    """Seletor de período. 'custom' parte das datas atuais; escolher só o início vale como início e fim."""
    tipos = [t for t in PERIODO_TIPOS if show_all_option or t != ALL]
    cur = value.get("tipo") if value.get("tipo") in tipos else tipos[0]
    tipo = col.selectbox("Período", tipos, index=tipos.index(cur), format_func=PERIODO_LABELS.get, key=f"{key}_tipo")

    if tipo != "custom":
        return make_periodo(tipo)

    picked = col.date_input(
        "Intervalo",
        value=(value["data_inicio"], value["data_fim"]),
        format="DD/MM/YYYY",
        key=f"{key}_range",
    )
    if isinstance(picked, (tuple, list)):
        if len(picked) >= 2:
            return make_periodo("custom", picked[0], picked[1])
        if len(picked) == 1:
            return make_periodo("custom", picked[0], picked[0])
        return {**value, "tipo": "custom"}
    return make_periodo("custom", picked, picked)


def render_offer_filters(engine, page: str, *, placeholder: str = "Buscar oferta...", default_periodo: str = "7d", show_all_option: bool = False) -> Dict:
    """Barra de filtros (busca, nicho, país, período). Estado persiste por página no session_state."""
    sv = FilterState.get(page, default_periodo)
    nichos = lookup_names(load_nichos(engine))
    paises = lookup_names(load_paises(engine))

    r = st.columns([3, 1.4, 1.4, 1.6, 1.6], gap="small")
    q = r[0].text_input("Buscar", sv.get("q", ""), placeholder=placeholder, key=f"{page}_q", label_visibility="collapsed")

    nicho_opts = [ALL] + nichos
    nicho = r[1].selectbox(
        "Nicho",
        nicho_opts,
        index=nicho_opts.index(sv["nicho"]) if sv.get("nicho") in nicho_opts else 0,
        format_func=lambda x: "Todos Nichos" if x == ALL else x,
        key=f"{page}_nicho",
        label_visibility="collapsed",
    )
    pais_opts = [ALL] + paises
    pais = r[2].selectbox(
        "País",
        pais_opts,
        index=pais_opts.index(sv["pais"]) if sv.get("pais") in pais_opts else 0,
        format_func=lambda x: "Todos Países" if x == ALL else x,
        key=f"{page}_pais",
        label_visibility="collapsed",
    )
    periodo = render_periodo_filter(r[3], sv["periodo"], key=f"{page}_periodo", show_all_option=show_all_option)

    FilterState.update(page, q=q or "", nicho=nicho, pais=pais, periodo=periodo)
    return {"q": q or "", "nicho": nicho, "pais": pais, "periodo": periodo, "extra_col": r[4]}


def start_page(page_title: str):
    """Configuração comum das páginas: layout, CSS, cabeçalho e engine (para a página se o banco não estiver configurado)."""
    init_page(page_title)
    render_hero(BUILD_TAG)
    try:
        return get_engine()
    except Exception as e:
        logger.error(f"engine init failed: {e}")
        st.error(f"Não foi possível conectar ao banco: {e}")
        st.stop()

# -*- coding: utf-8 -*-
"""view_overview.py - Visão geral: KPIs do período, tabela por oferta e tendência diária."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from metrics import add_rates, totals
from page_helpers import render_periodo_filter
from queries import load_metricas_oferta_join
from state import FilterState, show_flash
from ui import render_download_compact, render_empty_state, render_kpi_row, render_trend_chart, st_dataframe_safe, style_by_thresholds
from utils import format_currency, format_date, format_number, format_ratio

PAGE = "overview"

_TABLE_COLS = {
    "oferta_nome": "Oferta",
    "oferta_nicho": "Nicho",
    "oferta_pais": "País",
    "investimento": "Investimento",
    "faturamento": "Faturamento",
    "roas": "ROAS",
    "cpc": "CPC",
    "ic": "IC",
}


def summarize_by_offer(df: pd.DataFrame) -> pd.DataFrame:
    """Agrupa as linhas diárias (já com join da oferta) em uma linha por oferta, com taxas e thresholds."""
    if df is None or df.empty:
        return pd.DataFrame()
    keys = ["oferta_id", "oferta_nome", "oferta_nicho", "oferta_pais"]
    d = df.copy()
    for k in keys:
        d[k] = d[k].fillna("")
    sums = d.groupby(keys, as_index=False)[["investimento", "faturamento", "impressoes", "cliques", "ics", "vendas"]].sum()
    th = d.drop_duplicates("oferta_id").set_index("oferta_id")["oferta_thresholds"]
    sums["thresholds"] = sums["oferta_id"].map(th)
    return add_rates(sums).sort_values("investimento", ascending=False).reset_index(drop=True)


def daily_series(df: pd.DataFrame) -> pd.DataFrame:
    if df is None or df.empty:
        return pd.DataFrame(columns=["data", "investimento", "faturamento", "roas"])
    ts = df.groupby("data", as_index=False)[["investimento", "faturamento", "impressoes", "cliques", "ics", "vendas"]].sum()
    return add_rates(ts).sort_values("data")


def page_overview(engine) -> None:
    show_flash()

    sv = FilterState.get(PAGE, "7d")
    c1, c2 = st.columns([3, 1])
    with c1:
        st.markdown("<div class='of-sec-title'>📊 Visão geral</div>", unsafe_allow_html=True)
    periodo = render_periodo_filter(c2, sv["periodo"], key=f"{PAGE}_periodo")
    FilterState.update(PAGE, periodo=periodo)
    d1, d2 = periodo["data_inicio"], periodo["data_fim"]
    c1.caption(f"Período: {format_date(d1)} ~ {format_date(d2)}")

    with st.spinner("Carregando métricas..."):
        df = load_metricas_oferta_join(engine, d1, d2)

    if df is None or df.empty:
        render_empty_state("Nenhuma métrica no período.", "Importe métricas em Configurações ou escolha outro período.")
        return

    t = totals(df)
    render_kpi_row([
        ("Investimento", format_currency(t["investimento"])),
        ("Faturamento", format_currency(t["faturamento"])),
        ("ROAS", format_ratio(t["roas"])),
        ("CPC", format_currency(t["cpc"]) if t["cpc"] is not None else "-"),
        ("IC", format_currency(t["ic"]) if t["ic"] is not None else "-"),
        ("Vendas", format_number(t["vendas"])),
    ])

    st.divider()
    st.markdown("<div class='of-sec-title'>Por oferta</div>", unsafe_allow_html=True)
    by_offer = summarize_by_offer(df)
    view = by_offer[["thresholds"] + list(_TABLE_COLS)].copy()
    styled = style_by_thresholds(view).hide(["thresholds"], axis="columns").format(
        {"investimento": format_currency, "faturamento": format_currency, "roas": format_ratio, "cpc": format_currency, "ic": format_currency},
        na_rep="-",
    )
    st_dataframe_safe(styled, use_container_width=True, hide_index=True, column_config={k: st.column_config.Column(v) for k, v in _TABLE_COLS.items()})
    render_download_compact(by_offer.drop(columns=["thresholds"]).rename(columns=_TABLE_COLS), f"ofertas_{d1}_{d2}", "ofertas", PAGE)

    st.divider()
    st.markdown("<div class='of-sec-title'>📈 Tendência diária</div>", unsafe_allow_html=True)
    ts = daily_series(df)
    metric = st.radio("Métrica", ["investimento", "faturamento", "roas"], horizontal=True, format_func=lambda m: _TABLE_COLS[m], key=f"{PAGE}_trend", label_visibility="collapsed")
    render_trend_chart(ts, metric, _TABLE_COLS[metric])

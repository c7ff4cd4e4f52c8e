# -*- coding: utf-8 -*-
"""ui.py - UI components (cards/KPIs/charts/downloads) for the Streamlit dashboard."""

from __future__ import annotations

import io
from html import escape
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st
import altair as alt

from metrics import classify, parse_thresholds
from schema import STATUS_LABEL
from utils import format_currency, format_date, format_ratio

try:
    alt.data_transformers.disable_max_rows()
except AttributeError:
    pass

_ST_DATAFRAME = st.dataframe

_METRIC_LABEL = {"roas": "ROAS", "cpc": "CPC", "ic": "IC"}


def st_dataframe_safe(df, **kwargs):
    """st.dataframe com fallback para versões sem hide_index/column_config."""
    try:
        return _ST_DATAFRAME(df, **kwargs)
    except TypeError:
        kwargs.pop("hide_index", None)
        kwargs.pop("column_config", None)
        return _ST_DATAFRAME(df, **kwargs)


def render_hero(build_tag: str = "") -> None:
    st.markdown(
        f"""
        <div class="of-topbar">
          <div>
            <div class="of-brand">📊 Painel de Ofertas</div>
            <div class="of-sub">{escape(build_tag)}</div>
          </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_empty_state(msg: str, sub: str = "Altere a busca ou os filtros de período, nicho e país.") -> None:
    st.markdown(
        f"""
        <div class='of-empty'>
            <div class='icon'>📭</div>
            <div class='msg'>{escape(msg)}</div>
            <div class='sub'>{escape(sub)}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def _kpi_html(label: str, value: str) -> str:
    return f"<div class='kpi'><div class='k'>{escape(label)}</div><div class='v'>{escape(value)}</div></div>"


def render_kpi_row(items: List[tuple]) -> None:
    st.markdown("<div class='kpi-row'>" + "".join(_kpi_html(k, v) for k, v in items) + "</div>", unsafe_allow_html=True)


def format_metric(metric: str, value) -> str:
    if metric == "roas":
        return format_ratio(value)
    if value is None or pd.isna(value):
        return "-"
    return format_currency(value)


def metric_chip(metric: str, value, thresholds=None) -> str:
    cls = classify(metric, value, thresholds)
    return f"<span class='chip {cls}'>{_METRIC_LABEL[metric]} {escape(format_metric(metric, value))}</span>"


def render_offer_card(oferta: Dict, metrics: Optional[Dict] = None, creatives_count: Optional[int] = None) -> None:
    """Card de oferta: nome, nicho/país, status e os indicadores coloridos pelos thresholds da oferta."""
    thresholds = parse_thresholds(oferta.get("thresholds"))
    metrics = metrics or {}
    chips = "".join(metric_chip(m, metrics.get(m), thresholds) for m in ("roas", "cpc", "ic"))

    meta = [str(x) for x in (oferta.get("nicho"), oferta.get("pais")) if x and not pd.isna(x)]
    meta.append(STATUS_LABEL.get(oferta.get("status"), str(oferta.get("status") or "")))
    if oferta.get("archived_at") is not None and not pd.isna(oferta.get("archived_at")):
        meta.append(f"arquivada em {format_date(oferta.get('archived_at'))}")
    if creatives_count is not None:
        meta.append(f"{int(creatives_count)} criativo(s)")

    invest = metrics.get("investimento")
    invest_html = f"<div class='meta'>Investimento {escape(format_currency(invest))}</div>" if invest else ""

    st.markdown(
        f"""
        <div class='of-card'>
          <div class='t'>{escape(str(oferta.get('nome', '')))}</div>
          <div class='meta'>{escape(' · '.join(meta))}</div>
          {invest_html}
          <div class='chips'>{chips}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def style_by_thresholds(df: pd.DataFrame, thresholds_col: str = "thresholds"):
    """Styler que pinta as colunas roas/cpc/ic de cada linha conforme os thresholds da própria linha."""
    colors = {"verde": "background-color: rgba(34,197,94,.14)", "amarelo": "background-color: rgba(234,179,8,.18)", "vermelho": "background-color: rgba(239,68,68,.14)", "neutro": ""}
    cols = [c for c in ("roas", "cpc", "ic") if c in df.columns]

    def _row(r: pd.Series) -> List[str]:
        th = r.get(thresholds_col)
        return [colors[classify(c, r[c], th)] if c in cols else "" for c in r.index]

    return df.style.apply(_row, axis=1)


def render_trend_chart(ts: pd.DataFrame, y_col: str, y_title: str = "", *, x_col: str = "data", y_format: str = ",.2f", height: int = 300) -> None:
    if ts is None or ts.empty or x_col not in ts.columns or y_col not in ts.columns:
        return

    d = ts[[x_col, y_col]].copy()
    d[x_col] = pd.to_datetime(d[x_col], errors="coerce")
    d[y_col] = pd.to_numeric(d[y_col], errors="coerce")
    d = d.dropna(subset=[x_col]).sort_values(x_col).reset_index(drop=True)
    d["_dt_str"] = d[x_col].dt.strftime("%d/%m/%Y")

    chart = (
        alt.Chart(d)
        .mark_line(point=True, strokeWidth=3)
        .encode(
            x=alt.X(f"{x_col}:T", title=None, axis=alt.Axis(format="%d/%m", labelAngle=0)),
            y=alt.Y(f"{y_col}:Q", title=y_title or None, axis=alt.Axis(format=y_format)),
            tooltip=[alt.Tooltip("_dt_str:N", title="Data"), alt.Tooltip(f"{y_col}:Q", title=y_title or y_col, format=y_format)],
        )
        .properties(height=height)
    )
    st.altair_chart(chart, use_container_width=True)


def df_to_xlsx_bytes(df: pd.DataFrame, sheet_name: str = "dados") -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()


def render_download_compact(df: pd.DataFrame, filename_base: str, sheet_name: str, key_prefix: str) -> None:
    if df is None or df.empty:
        return
    c1, c2, c3 = st.columns([1, 1, 8])
    with c1:
        st.download_button("CSV", data=df.to_csv(index=False).encode("utf-8-sig"), file_name=f"{filename_base}.csv", mime="text/csv", key=f"{key_prefix}_csv", use_container_width=True)
    with c2:
        st.download_button(
            "XLSX",
            data=df_to_xlsx_bytes(df, sheet_name),
            file_name=f"{filename_base}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            key=f"{key_prefix}_xlsx",
            use_container_width=True,
        )
    with c3:
        st.caption("Download")

"""Leituras com cache (st.cache_data) usadas pelas páginas. Qualquer mutação chama invalidate()."""

import os
from datetime import date
from typing import Dict, Optional

import pandas as pd
import streamlit as st

import data

CACHE_TTL = int(os.getenv("CACHE_TTL_SECONDS", "120"))


def invalidate() -> None:
    st.cache_data.clear()


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_ofertas(_engine, status: Optional[str] = None) -> pd.DataFrame:
    return data.fetch_ofertas(_engine, status)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_ofertas_arquivadas(_engine) -> pd.DataFrame:
    return data.fetch_ofertas_arquivadas(_engine)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_criativos_com_medias(_engine, oferta_id=None, status=None) -> pd.DataFrame:
    return data.fetch_criativos_com_medias(_engine, oferta_id, status)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_criativos_count(_engine) -> Dict[str, int]:
    return data.count_criativos_por_oferta(_engine)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_metricas_agregadas(_engine, d1: Optional[date] = None, d2: Optional[date] = None) -> Dict[str, dict]:
    df = data.fetch_metricas_agregadas_por_oferta(_engine, d1, d2)
    if df is None or df.empty:
        return {}
    return {str(r["oferta_id"]): r for r in df.to_dict(orient="records")}


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_metricas_oferta_join(_engine, d1: date, d2: date, status_oferta: Optional[str] = None) -> pd.DataFrame:
    return data.fetch_metricas_diarias_oferta_com_join(_engine, d1, d2, status_oferta)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_metricas_criativo(_engine, criativo_id: str, d1: Optional[date] = None, d2: Optional[date] = None) -> pd.DataFrame:
    return data.fetch_metricas_diarias(_engine, criativo_id, d1, d2)


@st.cache_data(ttl=600, show_spinner=False)
def load_nichos(_engine) -> pd.DataFrame:
    return data.fetch_nichos(_engine)


@st.cache_data(ttl=600, show_spinner=False)
def load_copywriters(_engine) -> pd.DataFrame:
    return data.fetch_copywriters(_engine)


@st.cache_data(ttl=600, show_spinner=False)
def load_paises(_engine) -> pd.DataFrame:
    return data.fetch_paises(_engine)

import os
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

import pandas as pd
import streamlit as st

from styles import apply_global_css

logger = logging.getLogger(__name__)

APP_TIMEZONE = os.getenv("APP_TIMEZONE", "America/Sao_Paulo")
BUILD_TAG = os.getenv("APP_BUILD", "v1.4 (arquivamento conjunto de criativos)")

# 'all' começa no início dos dados do painel
ALL_START = date(2020, 1, 1)

PERIODO_TIPOS = ("all", "today", "7d", "30d", "custom")
PERIODO_LABELS = {
    "all": "Todos Períodos",
    "today": "Hoje",
    "7d": "Últimos 7 dias",
    "30d": "Últimos 30 dias",
    "custom": "Personalizado",
}


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")


# inicialização comum das páginas
def init_page(page_title: str = "Painel de Ofertas") -> None:
    setup_logging()
    st.set_page_config(page_title=page_title, page_icon="📊", layout="wide", initial_sidebar_state="expanded")
    apply_global_css()


def today_local() -> date:
    return datetime.now(ZoneInfo(APP_TIMEZONE)).date()


# lógica de datas
def get_date_range(tipo: str, today: Optional[date] = None) -> Tuple[date, date]:
    """Período simbólico -> (início, fim) inclusivos, fim sempre hoje. Tipo desconhecido vale 'all'."""
    d2 = today or today_local()
    if tipo == "today":
        return d2, d2
    if tipo == "7d":
        return d2 - timedelta(days=6), d2
    if tipo == "30d":
        return d2 - timedelta(days=29), d2
    return ALL_START, d2


def make_periodo(tipo: str = "7d", data_inicio: Optional[date] = None, data_fim: Optional[date] = None, today: Optional[date] = None) -> dict:
    if tipo == "custom":
        d1 = data_inicio or today or today_local()
        # só a data inicial escolhida: vale como início e fim
        d2 = data_fim or d1
        return {"tipo": "custom", "data_inicio": d1, "data_fim": d2}
    if tipo not in PERIODO_TIPOS:
        raise ValueError(f"período inválido: {tipo}")
    d1, d2 = get_date_range(tipo, today)
    return {"tipo": tipo, "data_inicio": d1, "data_fim": d2}


def to_local_naive(values: pd.Series) -> pd.Series:
    """Timestamps gravados em UTC -> hora local sem fuso. Valores sem fuso são lidos como UTC."""
    s = pd.to_datetime(values, errors="coerce", utc=True)
    return s.dt.tz_convert(APP_TIMEZONE).dt.tz_localize(None)


def _safe_float(x, default: float = 0.0) -> float:
    try:
        if x is None or pd.isna(x) or x == "":
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def _br(num_str: str) -> str:
    return num_str.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(val) -> str:
    return f"R$ {_br(f'{_safe_float(val):,.2f}')}"


def format_number(val) -> str:
    return _br(f"{int(round(_safe_float(val))):,}")


def format_ratio(val, suffix: str = "x") -> str:
    if val is None or pd.isna(val):
        return "-"
    return f"{_br(f'{float(val):,.2f}')}{suffix}"


def format_date(val) -> str:
    ts = pd.to_datetime(val, errors="coerce")
    return "-" if pd.isna(ts) else ts.strftime("%d/%m/%Y")

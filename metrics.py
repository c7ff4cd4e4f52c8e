# -*- coding: utf-8 -*-
"""metrics.py - Indicadores de performance (ROAS, CPC, IC) e faixas de cor por oferta."""

from __future__ import annotations

import json
import math
from typing import Dict, Optional

import numpy as np
import pandas as pd

VERDE = "verde"
AMARELO = "amarelo"
VERMELHO = "vermelho"
NEUTRO = "neutro"

DEFAULT_THRESHOLDS: Dict[str, Dict[str, float]] = {
    "roas": {"verde": 1.3, "amarelo": 1.1},
    "ic": {"verde": 50, "amarelo": 60},
    "cpc": {"verde": 1.5, "amarelo": 2.0},
}

# ROAS: quanto maior melhor. IC e CPC são custos: quanto menor melhor.
HIGHER_IS_BETTER = {"roas": True, "ic": False, "cpc": False}

_SUM_COLS = ["investimento", "faturamento", "impressoes", "cliques", "ics", "vendas"]


def _valid_band(band) -> bool:
    if not isinstance(band, dict):
        return False
    try:
        float(band["verde"])
        float(band["amarelo"])
    except (KeyError, TypeError, ValueError):
        return False
    return True


def parse_thresholds(raw) -> Dict[str, Dict[str, float]]:
    """Lê o blob `thresholds` da oferta. Cada indicador cai no padrão de forma independente."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = None
    if not raw or not isinstance(raw, dict):
        return {k: dict(v) for k, v in DEFAULT_THRESHOLDS.items()}

    out = {}
    for key, default in DEFAULT_THRESHOLDS.items():
        band = raw.get(key)
        if _valid_band(band):
            out[key] = {"verde": float(band["verde"]), "amarelo": float(band["amarelo"])}
        else:
            out[key] = dict(default)
    return out


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def classify(metric: str, value, thresholds=None) -> str:
    if _is_missing(value):
        return NEUTRO
    band = parse_thresholds(thresholds)[metric]
    v = float(value)
    if HIGHER_IS_BETTER[metric]:
        if v >= band["verde"]:
            return VERDE
        return AMARELO if v >= band["amarelo"] else VERMELHO
    if v <= band["verde"]:
        return VERDE
    return AMARELO if v <= band["amarelo"] else VERMELHO


def _num(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series(0.0, index=df.index)
    return pd.to_numeric(df[col], errors="coerce").fillna(0.0)


def add_rates(df: pd.DataFrame) -> pd.DataFrame:
    if df is None or df.empty:
        return df
    out = df.copy()
    for c in _SUM_COLS:
        out[c] = _num(out, c)
    out["roas"] = out["faturamento"] / out["investimento"].replace(0, np.nan)
    out["cpc"] = out["investimento"] / out["cliques"].replace(0, np.nan)
    out["ic"] = out["investimento"] / out["ics"].replace(0, np.nan)
    out["ctr"] = (out["cliques"] / out["impressoes"].replace(0, np.nan)) * 100
    return out


def _safe_div(a: float, b: float) -> Optional[float]:
    return None if not b else float(a) / float(b)


def totals(df: Optional[pd.DataFrame]) -> Dict[str, Optional[float]]:
    """Soma o período e recalcula as taxas sobre os totais (não a média das taxas)."""
    if df is None or df.empty:
        sums = {c: 0.0 for c in _SUM_COLS}
    else:
        sums = {c: float(_num(df, c).sum()) for c in _SUM_COLS}
    return {
        **sums,
        "roas": _safe_div(sums["faturamento"], sums["investimento"]),
        "cpc": _safe_div(sums["investimento"], sums["cliques"]),
        "ic": _safe_div(sums["investimento"], sums["ics"]),
        "ctr": None if not sums["impressoes"] else sums["cliques"] / sums["impressoes"] * 100.0,
    }

# -*- coding: utf-8 -*-
"""
import_metrics.py - Importa métricas diárias (CSV/XLSX) para metricas_diarias ou metricas_diarias_oferta.
- Nomes de coluna tolerantes: maiúsculas, espaços, "_" e acentos comuns são ignorados na comparação
- A linha pode apontar a entidade pelo id ou pelo nome (criativo/oferta)
- Reimportar o mesmo dia sobrescreve (upsert por entidade + data)

Uso:
    python import_metrics.py metricas.xlsx --nivel criativo
    python import_metrics.py metricas.csv --nivel oferta --dry-run
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import unicodedata
from typing import Dict, List, Optional

import pandas as pd
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from database import get_database_url, make_engine
from data import fetch_criativos, fetch_ofertas, upsert_metrica_diaria, upsert_metrica_diaria_oferta
from schema import METRIC_COLUMNS

logger = logging.getLogger(__name__)

NIVEIS = ("criativo", "oferta")
_BLANK = ("", "nan", "None", "<NA>")

_METRIC_ALIASES: Dict[str, List[str]] = {
    "investimento": ["investimento", "gasto", "spend", "custo", "valor_gasto"],
    "faturamento": ["faturamento", "receita", "revenue", "vendas_valor"],
    "impressoes": ["impressoes", "impressions", "imp"],
    "cliques": ["cliques", "clicks", "clk"],
    "ics": ["ics", "ic", "checkouts", "initiate_checkout", "finalizacoes"],
    "vendas": ["vendas", "conversoes", "purchases", "compras"],
}


def _norm(s) -> str:
    s = unicodedata.normalize("NFKD", str(s)).encode("ascii", "ignore").decode("ascii")
    return s.lower().replace(" ", "").replace("_", "").replace("-", "")


def _find_col(df: pd.DataFrame, cands: List[str]) -> Optional[str]:
    wanted = [_norm(c) for c in cands]
    for c in df.columns:
        if _norm(c) in wanted:
            return c
    return None


def _parse_dates(values: pd.Series) -> pd.Series:
    iso = pd.to_datetime(values, errors="coerce", format="ISO8601")
    br = pd.to_datetime(values, errors="coerce", format="%d/%m/%Y")
    return iso.fillna(br).dt.date


def normalize_metricas_columns(df: pd.DataFrame, nivel: str = "criativo") -> pd.DataFrame:
    """Devolve colunas padronizadas: <nivel>_id ou <nivel>_nome, data e as seis métricas (ausentes = 0)."""
    if nivel not in NIVEIS:
        raise ValueError(f"nivel inválido: {nivel!r} (use {', '.join(NIVEIS)})")
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    id_col = _find_col(df, [f"{nivel}_id", f"id_{nivel}", f"{nivel}id"])
    name_col = _find_col(df, [nivel, f"{nivel}_nome", f"nome_{nivel}", f"{nivel}s"])
    date_col = _find_col(df, ["data", "date", "dia"])

    if not date_col or not (id_col or name_col):
        raise ValueError(f"Planilha sem colunas obrigatórias (data e {nivel}_id ou {nivel}). Disponíveis: {list(df.columns)}")

    out = pd.DataFrame(index=df.index)
    if id_col:
        out[f"{nivel}_id"] = df[id_col].astype(str).str.strip()
    if name_col:
        out[f"{nivel}_nome"] = df[name_col].astype(str).str.strip()
    out["data"] = _parse_dates(df[date_col])

    for metric in METRIC_COLUMNS:
        col = _find_col(df, _METRIC_ALIASES[metric])
        values = pd.to_numeric(df[col], errors="coerce").fillna(0) if col else pd.Series(0, index=df.index)
        out[metric] = values.astype(float) if metric in ("investimento", "faturamento") else values.astype("int64")

    out = out.dropna(subset=["data"])
    return out.reset_index(drop=True)


def _resolve_ids(engine, df: pd.DataFrame, nivel: str) -> pd.DataFrame:
    """Completa <nivel>_id a partir do nome e descarta linhas cujo id não existe no banco."""
    key, name = f"{nivel}_id", f"{nivel}_nome"
    out = df.copy()
    ref = fetch_criativos(engine) if nivel == "criativo" else fetch_ofertas(engine)
    known = set() if ref.empty else {str(i) for i in ref["id"]}

    ids = out[key].where(~out[key].isin(_BLANK)) if key in out.columns else pd.Series(None, index=out.index, dtype=object)
    if name in out.columns and ids.isna().any():
        by_name = {} if ref.empty else {str(n).strip().lower(): str(i) for n, i in zip(ref["nome"], ref["id"])}
        ids = ids.fillna(out[name].str.lower().map(by_name))
    out[key] = ids.where(ids.isin(known))

    missing = out[out[key].isna()]
    if not missing.empty:
        label = name if name in missing.columns else key
        sample = sorted(df.loc[missing.index, label].astype(str).unique())[:10] if label in df.columns else []
        logger.warning(f"{len(missing)} linha(s) sem {nivel} correspondente ignoradas: {sample}")
    return out.dropna(subset=[key])


def import_metricas(engine, df: pd.DataFrame, nivel: str = "criativo", dry_run: bool = False) -> int:
    """Normaliza, resolve ids e faz upsert linha a linha. Devolve quantas linhas foram (ou seriam) gravadas."""
    rows = _resolve_ids(engine, normalize_metricas_columns(df, nivel), nivel)
    key = f"{nivel}_id"
    rows = rows.drop_duplicates(subset=[key, "data"], keep="last")
    if dry_run:
        logger.info(f"[dry-run] {len(rows)} linha(s) de {nivel} seriam importadas")
        return len(rows)

    upsert = upsert_metrica_diaria if nivel == "criativo" else upsert_metrica_diaria_oferta
    n = 0
    for r in rows.to_dict(orient="records"):
        upsert(engine, {key: r[key], "data": r["data"], **{m: r[m] for m in METRIC_COLUMNS}})
        n += 1
    logger.info(f"{n} linha(s) de {nivel} importadas")
    return n


def read_metrics_file(path_or_buffer, filename: Optional[str] = None) -> pd.DataFrame:
    name = (filename or str(path_or_buffer)).lower()
    if name.endswith((".xlsx", ".xlsm")):
        return pd.read_excel(path_or_buffer, engine="openpyxl")
    if name.endswith(".csv"):
        return pd.read_csv(path_or_buffer, sep=None, engine="python", encoding="utf-8-sig")
    raise ValueError(f"Formato não suportado: {name} (use .csv ou .xlsx)")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(override=True)
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper(), format="[%(asctime)s] %(levelname)s %(message)s", datefmt="%H:%M:%S")

    parser = argparse.ArgumentParser(description="Importa métricas diárias de CSV/XLSX")
    parser.add_argument("arquivo", type=str)
    parser.add_argument("--nivel", choices=NIVEIS, default="criativo")
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args(argv)

    try:
        df = read_metrics_file(args.arquivo)
        engine = make_engine(get_database_url())
        n = import_metricas(engine, df, args.nivel, dry_run=args.dry_run)
    except (ValueError, RuntimeError, OSError, SQLAlchemyError) as e:
        logger.error(f"❌ {e}")
        return 1
    logger.info(f"🎉 concluído: {n} linha(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())

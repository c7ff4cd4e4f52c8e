# -*- coding: utf-8 -*-
"""data.py - Acesso a dados: ofertas, criativos, métricas diárias e cadastros auxiliares.

Leituras de listas devolvem DataFrame; leituras de uma linha e mutações devolvem dict.
Erros do banco sobem para quem chamou (a página mostra o toast).
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Optional, Union

import pandas as pd
import sqlalchemy as sa

from database import sql_read, sql_first, sql_exec, sql_write
from metrics import add_rates
from schema import (
    ARQUIVADO,
    METRIC_COLUMNS,
    copywriters,
    criativos,
    metricas_diarias,
    metricas_diarias_oferta,
    nichos,
    ofertas,
    paises,
    utcnow,
)

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str, None]


class RecordNotFound(LookupError):
    pass


def _skip(value) -> bool:
    """None, vazio e 'all' desligam o filtro."""
    return value is None or value == "" or value == "all"


def _as_date(value: DateLike) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _one(rows: list, table: str, key) -> dict:
    if not rows:
        raise RecordNotFound(f"{table}: registro {key} não encontrado")
    return rows[0]


def _get_by_id(engine, table: sa.Table, id_: str) -> dict:
    row = sql_first(engine, sa.select(table).where(table.c.id == id_))
    if row is None:
        raise RecordNotFound(f"{table.name}: registro {id_} não encontrado")
    return row


def _insert(engine, table: sa.Table, values: dict) -> dict:
    rows = sql_write(engine, sa.insert(table).values(**values).returning(table))
    return _one(rows, table.name, values.get("id"))


def _update(engine, table: sa.Table, id_: str, updates: dict) -> dict:
    values = {**updates, "updated_at": utcnow()}
    stmt = sa.update(table).where(table.c.id == id_).values(**values).returning(table)
    return _one(sql_write(engine, stmt), table.name, id_)


def _delete(engine, table: sa.Table, id_: str) -> None:
    sql_exec(engine, sa.delete(table).where(table.c.id == id_))


def _require_nome(values: dict) -> dict:
    nome = str(values.get("nome") or "").strip()
    if not nome:
        raise ValueError("nome é obrigatório")
    return {**values, "nome": nome}


def _upsert(engine, table: sa.Table, row: dict, conflict_cols: tuple) -> dict:
    dialect = engine.dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"upsert não suportado para o dialeto {dialect}")

    stmt = insert(table).values(**row)
    set_ = {c: stmt.excluded[c] for c in row if c not in conflict_cols and c not in ("id", "created_at")}
    set_["updated_at"] = utcnow()
    stmt = stmt.on_conflict_do_update(index_elements=list(conflict_cols), set_=set_).returning(table)
    return _one(sql_write(engine, stmt), table.name, tuple(row.get(c) for c in conflict_cols))


# ==================== OFERTAS ====================

def fetch_ofertas(engine, status: Optional[str] = None) -> pd.DataFrame:
    stmt = sa.select(ofertas).order_by(ofertas.c.created_at.desc())
    if not _skip(status):
        stmt = stmt.where(ofertas.c.status == status)
    return sql_read(engine, stmt)


def fetch_ofertas_arquivadas(engine) -> pd.DataFrame:
    stmt = (
        sa.select(ofertas)
        .where(ofertas.c.status == ARQUIVADO)
        .order_by(ofertas.c.archived_at.desc(), ofertas.c.updated_at.desc())
    )
    return sql_read(engine, stmt)


def fetch_oferta_by_id(engine, id_: str) -> dict:
    return _get_by_id(engine, ofertas, id_)


def create_oferta(engine, oferta: dict) -> dict:
    return _insert(engine, ofertas, _require_nome(oferta))


def update_oferta(engine, id_: str, updates: dict) -> dict:
    return _update(engine, ofertas, id_, updates)


def delete_oferta(engine, id_: str) -> None:
    _delete(engine, ofertas, id_)
    logger.info(f"oferta {id_} excluída")


# ==================== CRIATIVOS ====================

def fetch_criativos(
    engine,
    oferta_id: Optional[str] = None,
    status: Optional[str] = None,
    fonte: Optional[str] = None,
    copy_responsavel: Optional[str] = None,
) -> pd.DataFrame:
    stmt = sa.select(criativos).order_by(criativos.c.created_at.desc())
    if oferta_id:
        stmt = stmt.where(criativos.c.oferta_id == oferta_id)
    if not _skip(status):
        stmt = stmt.where(criativos.c.status == status)
    if not _skip(fonte):
        stmt = stmt.where(criativos.c.fonte == fonte)
    if not _skip(copy_responsavel):
        stmt = stmt.where(criativos.c.copy_responsavel == copy_responsavel)
    return sql_read(engine, stmt)


def fetch_criativos_com_medias(engine, oferta_id: Optional[str] = None, status: Optional[str] = None) -> pd.DataFrame:
    """Criativos com as métricas somadas de todo o histórico e as taxas derivadas."""
    md = metricas_diarias
    sums = (
        sa.select(md.c.criativo_id, *[sa.func.sum(md.c[c]).label(c) for c in METRIC_COLUMNS])
        .group_by(md.c.criativo_id)
        .subquery()
    )
    stmt = sa.select(
        criativos,
        *[sa.func.coalesce(sums.c[c], 0).label(c) for c in METRIC_COLUMNS],
    ).select_from(criativos.outerjoin(sums, sums.c.criativo_id == criativos.c.id))
    if oferta_id:
        stmt = stmt.where(criativos.c.oferta_id == oferta_id)
    if not _skip(status):
        stmt = stmt.where(criativos.c.status == status)
    stmt = stmt.order_by(criativos.c.created_at.desc())
    return add_rates(sql_read(engine, stmt))


def fetch_criativo_by_id(engine, id_: str) -> dict:
    return _get_by_id(engine, criativos, id_)


def create_criativo(engine, criativo: dict) -> dict:
    if not criativo.get("oferta_id"):
        raise ValueError("oferta_id é obrigatório")
    return _insert(engine, criativos, _require_nome(criativo))


def update_criativo(engine, id_: str, updates: dict) -> dict:
    return _update(engine, criativos, id_, updates)


def delete_criativo(engine, id_: str) -> None:
    _delete(engine, criativos, id_)
    logger.info(f"criativo {id_} excluído")


def count_criativos_por_oferta(engine) -> Dict[str, int]:
    stmt = sa.select(criativos.c.oferta_id, sa.func.count().label("n")).group_by(criativos.c.oferta_id)
    df = sql_read(engine, stmt)
    if df.empty:
        return {}
    return {str(k): int(v) for k, v in zip(df["oferta_id"], df["n"])}


# ==================== MÉTRICAS DIÁRIAS ====================

def _metric_row(row: dict, key_col: str) -> dict:
    if not row.get(key_col):
        raise ValueError(f"{key_col} é obrigatório")
    d = _as_date(row.get("data"))
    if d is None:
        raise ValueError("data é obrigatória")
    return {**row, "data": d}


def _date_window(stmt, col, data_inicio: DateLike, data_fim: DateLike):
    d1, d2 = _as_date(data_inicio), _as_date(data_fim)
    if d1 is not None:
        stmt = stmt.where(col >= d1)
    if d2 is not None:
        stmt = stmt.where(col <= d2)
    return stmt


def fetch_metricas_diarias(
    engine, criativo_id: Optional[str] = None, data_inicio: DateLike = None, data_fim: DateLike = None
) -> pd.DataFrame:
    md = metricas_diarias
    stmt = sa.select(md).order_by(md.c.data.desc())
    if criativo_id:
        stmt = stmt.where(md.c.criativo_id == criativo_id)
    return sql_read(engine, _date_window(stmt, md.c.data, data_inicio, data_fim))


def create_metrica_diaria(engine, metrica: dict) -> dict:
    return _insert(engine, metricas_diarias, _metric_row(metrica, "criativo_id"))


def update_metrica_diaria(engine, id_: str, updates: dict) -> dict:
    if "data" in updates:
        updates = {**updates, "data": _as_date(updates["data"])}
    return _update(engine, metricas_diarias, id_, updates)


def upsert_metrica_diaria(engine, metrica: dict) -> dict:
    return _upsert(engine, metricas_diarias, _metric_row(metrica, "criativo_id"), ("criativo_id", "data"))


# ==================== MÉTRICAS DIÁRIAS OFERTA ====================

def fetch_metricas_diarias_oferta(
    engine, oferta_id: Optional[str] = None, data_inicio: DateLike = None, data_fim: DateLike = None
) -> pd.DataFrame:
    mdo = metricas_diarias_oferta
    stmt = sa.select(mdo).order_by(mdo.c.data.desc())
    if oferta_id:
        stmt = stmt.where(mdo.c.oferta_id == oferta_id)
    return sql_read(engine, _date_window(stmt, mdo.c.data, data_inicio, data_fim))


def upsert_metrica_diaria_oferta(engine, metrica: dict) -> dict:
    return _upsert(engine, metricas_diarias_oferta, _metric_row(metrica, "oferta_id"), ("oferta_id", "data"))


def fetch_metricas_diarias_oferta_com_join(
    engine, data_inicio: DateLike = None, data_fim: DateLike = None, status_oferta: Optional[str] = None
) -> pd.DataFrame:
    """Métricas por oferta/dia com os dados da oferta. Sem status informado, ofertas arquivadas ficam de fora."""
    mdo = metricas_diarias_oferta
    stmt = (
        sa.select(
            mdo,
            ofertas.c.nome.label("oferta_nome"),
            ofertas.c.nicho.label("oferta_nicho"),
            ofertas.c.pais.label("oferta_pais"),
            ofertas.c.status.label("oferta_status"),
            ofertas.c.thresholds.label("oferta_thresholds"),
        )
        .select_from(mdo.outerjoin(ofertas, ofertas.c.id == mdo.c.oferta_id))
        .order_by(mdo.c.data.desc())
    )
    if not _skip(status_oferta):
        stmt = stmt.where(ofertas.c.status == status_oferta)
    else:
        stmt = stmt.where(sa.or_(ofertas.c.status.is_(None), ofertas.c.status != ARQUIVADO))
    return sql_read(engine, _date_window(stmt, mdo.c.data, data_inicio, data_fim))


def fetch_metricas_agregadas_por_oferta(engine, data_inicio: DateLike = None, data_fim: DateLike = None) -> pd.DataFrame:
    mdo = metricas_diarias_oferta
    stmt = sa.select(mdo.c.oferta_id, *[sa.func.sum(mdo.c[c]).label(c) for c in METRIC_COLUMNS]).group_by(mdo.c.oferta_id)
    df = sql_read(engine, _date_window(stmt, mdo.c.data, data_inicio, data_fim))
    return add_rates(df)


# ==================== NICHOS / COPYWRITERS / PAÍSES ====================

def _fetch_lookup(engine, table: sa.Table) -> pd.DataFrame:
    return sql_read(engine, sa.select(table).order_by(table.c.nome.asc()))


def fetch_nichos(engine) -> pd.DataFrame:
    return _fetch_lookup(engine, nichos)


def create_nicho(engine, nome: str) -> dict:
    return _insert(engine, nichos, _require_nome({"nome": nome}))


def delete_nicho(engine, id_: str) -> None:
    _delete(engine, nichos, id_)


def fetch_copywriters(engine) -> pd.DataFrame:
    return _fetch_lookup(engine, copywriters)


def create_copywriter(engine, nome: str) -> dict:
    return _insert(engine, copywriters, _require_nome({"nome": nome}))


def delete_copywriter(engine, id_: str) -> None:
    _delete(engine, copywriters, id_)


def fetch_paises(engine) -> pd.DataFrame:
    return _fetch_lookup(engine, paises)


def create_pais(engine, nome: str, codigo: Optional[str] = None) -> dict:
    codigo = (codigo or "").strip().upper() or None
    return _insert(engine, paises, _require_nome({"nome": nome, "codigo": codigo}))


def delete_pais(engine, id_: str) -> None:
    _delete(engine, paises, id_)

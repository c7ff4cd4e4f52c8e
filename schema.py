# -*- coding: utf-8 -*-
"""schema.py - Table definitions (SQLAlchemy Core) for the offers dashboard.

The hosted Postgres (Supabase) is the source of truth; these definitions are
used to bootstrap an empty database and to build typed queries in data.py.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import sqlalchemy as sa

# status de oferta / criativo
EM_TESTE = "em_teste"
ATIVO = "ativo"
PAUSADO = "pausado"
ARQUIVADO = "arquivado"

STATUS_OFERTA = (EM_TESTE, ATIVO, PAUSADO, ARQUIVADO)
STATUS_CRIATIVO = (EM_TESTE, ATIVO, PAUSADO, ARQUIVADO)

STATUS_LABEL = {
    EM_TESTE: "Em teste",
    ATIVO: "Ativo",
    PAUSADO: "Pausado",
    ARQUIVADO: "Arquivado",
}

METRIC_COLUMNS = ("investimento", "faturamento", "impressoes", "cliques", "ics", "vendas")


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


metadata = sa.MetaData()


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    ]


def _metric_columns():
    return [
        sa.Column("investimento", sa.Numeric(14, 2, asdecimal=False), nullable=False, server_default=sa.text("0")),
        sa.Column("faturamento", sa.Numeric(14, 2, asdecimal=False), nullable=False, server_default=sa.text("0")),
        sa.Column("impressoes", sa.BigInteger, nullable=False, server_default=sa.text("0")),
        sa.Column("cliques", sa.BigInteger, nullable=False, server_default=sa.text("0")),
        sa.Column("ics", sa.BigInteger, nullable=False, server_default=sa.text("0")),
        sa.Column("vendas", sa.BigInteger, nullable=False, server_default=sa.text("0")),
    ]


ofertas = sa.Table(
    "ofertas",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column("nome", sa.Text, nullable=False),
    sa.Column("nicho", sa.Text),
    sa.Column("pais", sa.Text),
    sa.Column("status", sa.String(20), nullable=False, default=EM_TESTE, server_default=EM_TESTE),
    sa.Column("thresholds", sa.JSON),
    *_timestamps(),
    sa.Column("archived_at", sa.DateTime(timezone=True)),
    sa.Index("idx_ofertas_status", "status"),
)

criativos = sa.Table(
    "criativos",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    # sem cascade: excluir oferta com criativos vinculados falha no banco
    sa.Column("oferta_id", sa.String(36), sa.ForeignKey("ofertas.id"), nullable=False),
    sa.Column("nome", sa.Text, nullable=False),
    sa.Column("status", sa.String(20), nullable=False, default=EM_TESTE, server_default=EM_TESTE),
    sa.Column("fonte", sa.Text),
    sa.Column("copy_responsavel", sa.Text),
    *_timestamps(),
    sa.Column("archived_at", sa.DateTime(timezone=True)),
    sa.Index("idx_criativos_oferta_archived", "oferta_id", "archived_at"),
)

metricas_diarias = sa.Table(
    "metricas_diarias",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column("criativo_id", sa.String(36), sa.ForeignKey("criativos.id", ondelete="CASCADE"), nullable=False),
    sa.Column("data", sa.Date, nullable=False),
    *_metric_columns(),
    *_timestamps(),
    sa.UniqueConstraint("criativo_id", "data", name="uq_metricas_diarias_criativo_data"),
)

metricas_diarias_oferta = sa.Table(
    "metricas_diarias_oferta",
    metadata,
    sa.Column("id", sa.String(36), primary_key=True, default=new_id),
    sa.Column("oferta_id", sa.String(36), sa.ForeignKey("ofertas.id", ondelete="CASCADE"), nullable=False),
    sa.Column("data", sa.Date, nullable=False),
    *_metric_columns(),
    *_timestamps(),
    sa.UniqueConstraint("oferta_id", "data", name="uq_metricas_diarias_oferta_data"),
)


def _lookup_table(name: str, *extra):
    return sa.Table(
        name,
        metadata,
        sa.Column("id", sa.String(36), primary_key=True, default=new_id),
        sa.Column("nome", sa.Text, nullable=False, unique=True),
        *extra,
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, default=utcnow, server_default=sa.func.now()),
    )


nichos = _lookup_table("nichos")
copywriters = _lookup_table("copywriters")
paises = _lookup_table("paises", sa.Column("codigo", sa.String(8)))

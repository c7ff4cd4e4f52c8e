# -*- coding: utf-8 -*-
"""archive.py - Arquivamento / restauração de ofertas junto com os seus criativos.

Ao arquivar uma oferta, os criativos dela que ainda não estavam arquivados recebem
exatamente o mesmo `archived_at` da oferta. Esse carimbo é o que identifica
"arquivado junto com a oferta" na hora de restaurar: criativos arquivados à mão,
antes ou depois, têm outro carimbo e continuam arquivados.

As duas etapas rodam em transações separadas. Se a segunda falhar a primeira não
é desfeita.
"""

from __future__ import annotations

import logging

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from data import fetch_oferta_by_id, update_criativo, update_oferta
from database import sql_exec, sql_scalar
from schema import ARQUIVADO, EM_TESTE, PAUSADO, criativos, utcnow

logger = logging.getLogger(__name__)


def archive_oferta(engine, oferta_id: str) -> dict:
    archived_at = utcnow()

    # 1. criativos ainda não arquivados herdam o carimbo da oferta
    stmt = (
        sa.update(criativos)
        .where(criativos.c.oferta_id == oferta_id)
        .where(criativos.c.status != ARQUIVADO)
        .values(status=ARQUIVADO, archived_at=archived_at, updated_at=archived_at)
    )
    try:
        n = sql_exec(engine, stmt)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao arquivar criativos da oferta {oferta_id}: {e}")
        raise
    logger.info(f"oferta {oferta_id}: {n} criativo(s) arquivado(s) junto")

    # 2. a oferta
    return update_oferta(engine, oferta_id, {"status": ARQUIVADO, "archived_at": archived_at})


def restore_oferta(engine, oferta_id: str, restore_creatives: bool = False) -> dict:
    if restore_creatives:
        oferta = fetch_oferta_by_id(engine, oferta_id)
        archived_at = oferta.get("archived_at")
        if archived_at:
            stmt = (
                sa.update(criativos)
                .where(criativos.c.oferta_id == oferta_id)
                .where(criativos.c.archived_at == archived_at)
                .values(status=EM_TESTE, archived_at=None, updated_at=utcnow())
            )
            try:
                n = sql_exec(engine, stmt)
            except SQLAlchemyError as e:
                logger.error(f"Erro ao restaurar criativos da oferta {oferta_id}: {e}")
                raise
            logger.info(f"oferta {oferta_id}: {n} criativo(s) restaurado(s)")

    return update_oferta(engine, oferta_id, {"status": PAUSADO, "archived_at": None})


def count_criativos_arquivados_com_oferta(engine, oferta_id: str) -> int:
    """Quantos criativos compartilham o carimbo de arquivamento da oferta. Só alimenta o diálogo."""
    oferta = fetch_oferta_by_id(engine, oferta_id)
    archived_at = oferta.get("archived_at")
    if not archived_at:
        return 0

    stmt = (
        sa.select(sa.func.count())
        .select_from(criativos)
        .where(criativos.c.oferta_id == oferta_id)
        .where(criativos.c.archived_at == archived_at)
    )
    try:
        return int(sql_scalar(engine, stmt) or 0)
    except SQLAlchemyError as e:
        logger.error(f"Erro ao contar criativos da oferta {oferta_id}: {e}")
        return 0


def archive_criativo(engine, criativo_id: str) -> dict:
    return update_criativo(engine, criativo_id, {"status": ARQUIVADO, "archived_at": utcnow()})


def restore_criativo(engine, criativo_id: str) -> dict:
    return update_criativo(engine, criativo_id, {"status": EM_TESTE, "archived_at": None})

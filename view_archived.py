# -*- coding: utf-8 -*-
"""view_archived.py - Ofertas arquivadas: filtros, restauração (com criativos) e exclusão permanente."""

from __future__ import annotations

import logging
from typing import Dict

import streamlit as st

from archive import count_criativos_arquivados_com_oferta, restore_oferta
from data import delete_oferta
from page_helpers import filter_offers, render_offer_filters
from queries import invalidate, load_criativos_count, load_metricas_agregadas, load_ofertas_arquivadas
from state import flash, show_flash
from ui import render_empty_state, render_offer_card

logger = logging.getLogger(__name__)

PAGE = "arquivadas"


def restore_message(nome: str, restore_creatives: bool, count: int) -> str:
    if restore_creatives and count > 0:
        return f'"{nome}" foi restaurada com {count} criativo(s).'
    return f'"{nome}" foi restaurada com status pausado.'


def can_delete(oferta: Dict, confirm_name: str) -> bool:
    return bool(oferta) and confirm_name == oferta.get("nome")


@st.dialog("Restaurar Oferta")
def _restore_dialog(engine, oferta: Dict, count: int) -> None:
    st.write(f'Tem certeza que deseja restaurar "{oferta["nome"]}"? A oferta será restaurada com status "Pausado".')

    restore_creatives = False
    if count > 0:
        restore_creatives = st.checkbox(f"Restaurar {count} criativo(s) arquivado(s) junto", value=True, key="restore_creatives")
        st.caption(
            "Apenas criativos que foram arquivados automaticamente com esta oferta serão restaurados. "
            "Criativos arquivados manualmente antes permanecerão arquivados."
        )

    c1, c2 = st.columns(2)
    if c1.button("Cancelar", use_container_width=True, key="restore_cancel"):
        st.rerun()
    if c2.button("Restaurar", type="primary", use_container_width=True, key="restore_ok"):
        do_creatives = restore_creatives and count > 0
        try:
            with st.spinner("Restaurando..."):
                restore_oferta(engine, oferta["id"], restore_creatives=do_creatives)
        except Exception as e:
            logger.error(f"restore {oferta['id']} failed: {e}")
            st.error("Não foi possível restaurar a oferta.")
            return
        flash(restore_message(oferta["nome"], do_creatives, count))
        invalidate()
        st.rerun()


@st.dialog("Excluir Oferta Permanentemente")
def _delete_dialog(engine, oferta: Dict) -> None:
    st.write("Esta ação não pode ser desfeita. Todos os dados da oferta serão perdidos permanentemente.")
    st.markdown(
        f"<div class='of-danger'>Você está prestes a excluir: <b>{oferta['nome']}</b><br/>"
        f"Para confirmar, digite exatamente o nome da oferta abaixo:<br/><code>{oferta['nome']}</code></div>",
        unsafe_allow_html=True,
    )
    confirm = st.text_input("Digite o nome da oferta para confirmar", placeholder="Digite o nome da oferta", key="delete_confirm_name")

    c1, c2 = st.columns(2)
    if c1.button("Cancelar", use_container_width=True, key="delete_cancel"):
        st.rerun()
    if c2.button("Excluir Permanentemente", type="primary", use_container_width=True, disabled=not can_delete(oferta, confirm), key="delete_ok"):
        try:
            with st.spinner("Excluindo..."):
                delete_oferta(engine, oferta["id"])
        except Exception as e:
            logger.error(f"delete {oferta['id']} failed: {e}")
            st.error("Não foi possível excluir a oferta. Verifique se não há criativos vinculados.")
            return
        flash(f'"{oferta["nome"]}" foi excluída permanentemente.')
        invalidate()
        st.rerun()


def _open_restore(engine, oferta: Dict) -> None:
    try:
        count = count_criativos_arquivados_com_oferta(engine, oferta["id"])
    except Exception as e:
        logger.error(f"count for {oferta['id']} failed: {e}")
        st.toast("Não foi possível carregar a oferta.", icon="⚠️")
        return
    _restore_dialog(engine, oferta, count)


def page_archived_offers(engine) -> None:
    show_flash()

    head_l, head_r = st.columns([5, 1])
    with head_r:
        if st.button("🔄 Atualizar", use_container_width=True, key="arch_refresh"):
            invalidate()
            flash("Lista de ofertas arquivadas foi atualizada.")
            st.rerun()

    f = render_offer_filters(engine, PAGE, placeholder="Buscar oferta arquivada...", default_periodo="all", show_all_option=True)

    ofertas = load_ofertas_arquivadas(engine)
    filtered = filter_offers(ofertas, f["q"], f["nicho"], f["pais"], f["periodo"])
    n = 0 if filtered is None else len(filtered)

    with head_l:
        st.markdown("<div class='of-sec-title'>🗄️ Ofertas Arquivadas</div>", unsafe_allow_html=True)
        st.caption(f"{n} oferta(s) arquivada(s)")

    if n == 0:
        render_empty_state("Nenhuma oferta arquivada encontrada.")
        return

    metrics = load_metricas_agregadas(engine)
    counts = load_criativos_count(engine)

    cols = st.columns(3, gap="medium")
    for i, oferta in enumerate(filtered.to_dict(orient="records")):
        with cols[i % 3]:
            render_offer_card(oferta, metrics.get(str(oferta["id"])), counts.get(str(oferta["id"]), 0))
            b1, b2 = st.columns(2)
            if b1.button("↩️ Restaurar", key=f"restore_{oferta['id']}", use_container_width=True, help="Restaurar oferta"):
                _open_restore(engine, oferta)
            if b2.button("🗑️ Excluir", key=f"delete_{oferta['id']}", use_container_width=True, help="Excluir permanentemente"):
                _delete_dialog(engine, oferta)

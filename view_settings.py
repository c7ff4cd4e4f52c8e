# -*- coding: utf-8 -*-
"""view_settings.py - Configurações: conexão, schema, cache, cadastros auxiliares e importação de métricas."""

from __future__ import annotations

import logging

import streamlit as st

import data
from database import db_ping, ensure_schema
from import_metrics import NIVEIS, import_metricas, read_metrics_file
from queries import invalidate, load_copywriters, load_nichos, load_paises
from state import flash, show_flash
from ui import st_dataframe_safe

logger = logging.getLogger(__name__)

_LOOKUPS = {
    "nichos": ("Nichos", load_nichos, data.create_nicho, data.delete_nicho),
    "copywriters": ("Copywriters", load_copywriters, data.create_copywriter, data.delete_copywriter),
    "paises": ("Países", load_paises, data.create_pais, data.delete_pais),
}


def _lookup_tab(engine, key: str) -> None:
    title, load, create, delete = _LOOKUPS[key]
    df = load(engine)

    with st.form(f"{key}_new", clear_on_submit=True):
        c1, c2, c3 = st.columns([3, 1.2, 1])
        nome = c1.text_input("Nome", key=f"{key}_nome")
        codigo = c2.text_input("Código", max_chars=8, key=f"{key}_codigo") if key == "paises" else None
        if c3.form_submit_button("Adicionar", use_container_width=True):
            try:
                row = create(engine, nome, codigo) if key == "paises" else create(engine, nome)
            except ValueError as e:
                st.error(str(e))
                return
            except Exception as e:
                logger.error(f"create {key} failed: {e}")
                st.error("Não foi possível adicionar (nome repetido?).")
                return
            flash(f'"{row["nome"]}" adicionado em {title}.')
            invalidate()
            st.rerun()

    if df is None or df.empty:
        st.caption("Nenhum cadastro.")
        return
    st_dataframe_safe(df.drop(columns=["id"], errors="ignore"), use_container_width=True, hide_index=True)

    opts = {str(r["id"]): str(r["nome"]) for r in df.to_dict(orient="records")}
    c1, c2 = st.columns([3, 1])
    sel = c1.selectbox("Remover", list(opts), format_func=opts.get, key=f"{key}_del_sel", label_visibility="collapsed")
    if c2.button("🗑️ Remover", use_container_width=True, key=f"{key}_del"):
        try:
            delete(engine, sel)
        except Exception as e:
            logger.error(f"delete {key} {sel} failed: {e}")
            st.error("Não foi possível remover.")
            return
        flash(f'"{opts[sel]}" removido.')
        invalidate()
        st.rerun()


def _import_section(engine) -> None:
    st.markdown("### 📥 Importar métricas diárias")
    st.caption("CSV ou XLSX com data, criativo (ou oferta) e as colunas investimento, faturamento, impressões, cliques, ICs e vendas.")
    up = st.file_uploader("Arquivo de métricas", type=["csv", "xlsx"])
    c1, c2, c3 = st.columns([1.2, 1, 2.2], gap="small")
    nivel = c1.selectbox("Nível", NIVEIS, label_visibility="collapsed")
    dry_run = c2.checkbox("Só validar", value=False)
    if c3.button("Importar", type="primary", disabled=up is None):
        try:
            df = read_metrics_file(up, filename=up.name)
            n = import_metricas(engine, df, nivel, dry_run=dry_run)
        except ValueError as e:
            st.error(str(e))
            return
        except Exception as e:
            logger.error(f"import failed: {e}")
            st.error(f"Falha na importação: {e}")
            return
        if dry_run:
            st.info(f"{n} linha(s) válidas.")
            return
        flash(f"{n} linha(s) importadas.")
        invalidate()
        st.rerun()


def page_settings(engine) -> None:
    show_flash()
    st.markdown("## ⚙️ Configurações")
    try:
        db_ping(engine)
        st.success("Conexão com o banco: OK ✅")
    except Exception as e:
        st.error(f"Falha na conexão com o banco: {e}")
        return

    colA, colB, _ = st.columns([1.2, 1.0, 2.2], gap="small")
    if colA.button("🧱 Criar tabelas", use_container_width=True):
        try:
            missing = ensure_schema(engine)
        except Exception as e:
            st.error(f"Falha ao criar tabelas: {e}")
            return
        flash(f"Tabelas criadas: {', '.join(missing)}" if missing else "Schema já estava completo.")
        invalidate()
        st.rerun()
    if colB.button("🧹 Limpar cache", use_container_width=True):
        invalidate()
        st.rerun()

    st.divider()
    st.markdown("### 🗂️ Cadastros")
    tabs = st.tabs([v[0] for v in _LOOKUPS.values()])
    for tab, key in zip(tabs, _LOOKUPS):
        with tab:
            _lookup_tab(engine, key)

    st.divider()
    _import_section(engine)

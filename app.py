# -*- coding: utf-8 -*-
"""
app.py - Painel de Ofertas (Visão geral)
- Páginas: Ofertas, Criativos, Ofertas arquivadas, Configurações (pasta pages/)
- Banco: DATABASE_URL (.env ou Streamlit secrets), Postgres/Supabase ou SQLite local

Executar: streamlit run app.py
"""

from page_helpers import start_page
from view_overview import page_overview

engine = start_page("Visão geral")
page_overview(engine)

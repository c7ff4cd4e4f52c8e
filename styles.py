# -*- coding: utf-8 -*-
"""styles.py - Global CSS for the Streamlit dashboard.

- Keeps ALL CSS in one place.
- utils.init_page() calls apply_global_css() once on each rerun.
"""

from __future__ import annotations

import streamlit as st

GLOBAL_UI_CSS = """
<style>
:root{
  --of-bg:#F6F7F9;
  --of-panel:#FFFFFF;
  --of-line:rgba(0,0,0,.08);
  --of-line2:rgba(0,0,0,.12);
  --of-text:#1A1C20;
  --of-muted:rgba(26,28,32,.62);
  --of-verde:#15803D;
  --of-verde-bg:rgba(34,197,94,.12);
  --of-amarelo:#A16207;
  --of-amarelo-bg:rgba(234,179,8,.16);
  --of-vermelho:#B91C1C;
  --of-vermelho-bg:rgba(239,68,68,.12);
  --of-shadow:0 2px 10px rgba(0,0,0,.06);
  --of-radius:10px;
}

/* Kill Streamlit chrome */
#MainMenu, footer {visibility:hidden;}
div[data-testid="stToolbar"]{visibility:hidden;height:0;}

html, body, [data-testid="stAppViewContainer"]{
  background: var(--of-bg) !important;
  color: var(--of-text);
}
.main .block-container{
  padding-top: 14px !important;
  padding-bottom: 40px !important;
  max-width: 1320px;
}

/* Topbar */
.of-topbar{
  display:flex; align-items:center; justify-content:space-between;
  border-bottom: 1px solid var(--of-line);
  padding: 6px 0 10px 0; margin-bottom: 12px;
}
.of-brand{font-weight:800; font-size:16px;}
.of-sub{font-weight:600; font-size:12px; color:var(--of-muted);}
.of-sec-title{font-size:16px; font-weight:900; margin:8px 0 8px 0; letter-spacing:-0.2px;}

/* KPI row */
.kpi-row{display:grid; grid-template-columns: repeat(auto-fit, minmax(150px, 1fr)); gap:10px;}
.kpi{
  background: var(--of-panel);
  border: 1px solid var(--of-line);
  border-radius: var(--of-radius);
  padding: 10px 12px;
}
.kpi .k{font-size:12px; color:var(--of-muted); font-weight:700;}
.kpi .v{margin-top:4px; font-size:18px; font-weight:900; letter-spacing:-.2px;}

/* Offer card */
.of-card{
  background: var(--of-panel);
  border: 1px solid var(--of-line);
  border-radius: var(--of-radius);
  box-shadow: var(--of-shadow);
  padding: 12px 14px; margin-bottom: 6px;
}
.of-card .t{font-size:15px; font-weight:800;}
.of-card .meta{font-size:12px; color:var(--of-muted); margin-top:2px;}
.of-card .chips{display:flex; gap:6px; flex-wrap:wrap; margin-top:10px;}

/* Traffic-light chips */
.chip{display:inline-block; padding:2px 8px; border-radius:999px; font-size:12px; font-weight:700;}
.chip.verde{background:var(--of-verde-bg); color:var(--of-verde);}
.chip.amarelo{background:var(--of-amarelo-bg); color:var(--of-amarelo);}
.chip.vermelho{background:var(--of-vermelho-bg); color:var(--of-vermelho);}
.chip.neutro{background:rgba(148,163,184,.18); color:rgb(51,65,85);}

/* Empty state */
.of-empty{text-align:center; padding:48px 0; color:var(--of-muted);}
.of-empty .icon{font-size:28px;}
.of-empty .msg{font-weight:800; margin-top:6px;}
.of-empty .sub{font-size:12px; margin-top:4px;}

/* Danger box (exclusão permanente) */
.of-danger{
  padding: 12px 14px; border-radius: var(--of-radius);
  background: var(--of-vermelho-bg); border: 1px solid rgba(239,68,68,.24);
  color: var(--of-vermelho); font-size: 13px;
}
.of-danger code{font-weight:800;}

[data-testid="stDataFrame"]{
  border: 1px solid var(--of-line);
  border-radius: 10px;
  overflow: hidden;
}
.stButton > button{border-radius: 8px; font-weight: 700;}
</style>
"""


def apply_global_css() -> None:
    """Inject global CSS (safe to call multiple times)."""
    st.markdown(GLOBAL_UI_CSS, unsafe_allow_html=True)

import streamlit as st

from utils import make_periodo


class FilterState:
    """Filtros de cada página guardados no session_state (uma chave por página)."""

    @staticmethod
    def _key(page: str) -> str:
        return f"filters_{page}"

    @staticmethod
    def init(page: str, periodo_tipo: str = "7d"):
        key = FilterState._key(page)
        if key not in st.session_state:
            st.session_state[key] = {
                "q": "",
                "nicho": "all",
                "pais": "all",
                "status": "all",
                "periodo": make_periodo(periodo_tipo),
            }

    @staticmethod
    def get(page: str, periodo_tipo: str = "7d") -> dict:
        FilterState.init(page, periodo_tipo)
        return st.session_state[FilterState._key(page)]

    @staticmethod
    def update(page: str, **kwargs):
        FilterState.init(page)
        st.session_state[FilterState._key(page)].update(kwargs)


def flash(msg: str, icon: str = "✅") -> None:
    """Toast que sobrevive ao st.rerun(): é mostrado no próximo carregamento da página."""
    st.session_state.setdefault("_flash", []).append((msg, icon))


def show_flash() -> None:
    for msg, icon in st.session_state.pop("_flash", []):
        st.toast(msg, icon=icon)

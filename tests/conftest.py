from datetime import date

import pytest

import data
from database import ensure_schema, make_engine


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def oferta(engine):
    return data.create_oferta(engine, {"nome": "Detox BR", "nicho": "Emagrecimento", "pais": "Brasil", "status": "ativo"})


@pytest.fixture
def make_criativo(engine):
    def _make(oferta_id, nome="CR01", **extra):
        return data.create_criativo(engine, {"oferta_id": oferta_id, "nome": nome, **extra})
    return _make


@pytest.fixture
def today():
    return date(2024, 3, 15)

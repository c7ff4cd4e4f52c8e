from datetime import date
from unittest import mock

import pandas as pd
import pytest

import data
from database import ensure_schema, make_engine
from import_metrics import import_metricas, main, normalize_metricas_columns, read_metrics_file


def test_normalize_tolerates_case_spaces_and_accents():
    df = pd.DataFrame({
        " Criativo ID ": ["abc"],
        "Data": ["2024-03-01"],
        "Investimento": ["12.5"],
        "Faturamento": [30],
        "Impressões": [1000],
        "Cliques": [40],
        "ICs": [3],
        "Vendas": [1],
    })
    out = normalize_metricas_columns(df, "criativo")
    row = out.iloc[0]
    assert row["criativo_id"] == "abc"
    assert row["data"] == date(2024, 3, 1)
    assert row["investimento"] == pytest.approx(12.5)
    assert row["impressoes"] == 1000
    assert row["ics"] == 3


def test_normalize_missing_metrics_are_zero_and_br_dates_parse():
    df = pd.DataFrame({"oferta": ["Detox BR"], "dia": ["05/03/2024"], "spend": [10]})
    out = normalize_metricas_columns(df, "oferta")
    row = out.iloc[0]
    assert row["oferta_nome"] == "Detox BR"
    assert row["data"] == date(2024, 3, 5)
    assert row["investimento"] == 10
    assert row["vendas"] == 0


def test_normalize_drops_rows_without_valid_date():
    df = pd.DataFrame({"criativo_id": ["a", "b"], "data": ["2024-03-01", "ontem"]})
    assert list(normalize_metricas_columns(df)["criativo_id"]) == ["a"]


def test_normalize_requires_date_and_entity_columns():
    with pytest.raises(ValueError):
        normalize_metricas_columns(pd.DataFrame({"data": ["2024-03-01"], "gasto": [1]}))
    with pytest.raises(ValueError):
        normalize_metricas_columns(pd.DataFrame({"criativo_id": ["a"]}))


def test_normalize_rejects_unknown_level():
    with pytest.raises(ValueError):
        normalize_metricas_columns(pd.DataFrame({"data": []}), "campanha")


def test_import_by_creative_name_and_upsert(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "VSL 01")
    df = pd.DataFrame({
        "criativo": ["vsl 01", "VSL 01", "Desconhecido"],
        "data": ["2024-03-01", "2024-03-02", "2024-03-01"],
        "investimento": [10, 20, 99],
        "cliques": [5, 8, 1],
    })
    assert import_metricas(engine, df, "criativo") == 2

    again = pd.DataFrame({"criativo_id": [cr["id"]], "data": ["2024-03-01"], "investimento": [15]})
    assert import_metricas(engine, again, "criativo") == 1

    m = data.fetch_metricas_diarias(engine, cr["id"]).set_index("data")
    assert len(m) == 2
    assert m.loc[date(2024, 3, 1), "investimento"] == pytest.approx(15)
    assert m.loc[date(2024, 3, 2), "cliques"] == 8


def test_import_offer_level(engine, oferta):
    df = pd.DataFrame({"oferta_id": [oferta["id"]], "data": ["2024-03-01"], "faturamento": [50]})
    assert import_metricas(engine, df, "oferta") == 1
    m = data.fetch_metricas_diarias_oferta(engine, oferta["id"])
    assert m.iloc[0]["faturamento"] == pytest.approx(50)


def test_dry_run_writes_nothing(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    df = pd.DataFrame({"criativo_id": [cr["id"]], "data": ["2024-03-01"]})
    assert import_metricas(engine, df, dry_run=True) == 1
    assert data.fetch_metricas_diarias(engine, cr["id"]).empty


def test_read_metrics_file_rejects_unknown_extension(tmp_path):
    p = tmp_path / "m.txt"
    p.write_text("x")
    with pytest.raises(ValueError):
        read_metrics_file(str(p))


def test_cli_imports_csv(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'painel.db'}"
    eng = make_engine(url)
    ensure_schema(eng)
    o = data.create_oferta(eng, {"nome": "Detox BR"})
    eng.dispose()

    csv = tmp_path / "metricas.csv"
    csv.write_text("oferta,data,investimento,faturamento\nDetox BR,2024-03-01,100,130\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", url)

    assert main([str(csv), "--nivel", "oferta"]) == 0

    eng = make_engine(url)
    m = data.fetch_metricas_diarias_oferta(eng, o["id"])
    assert len(m) == 1
    assert m.iloc[0]["investimento"] == pytest.approx(100)
    eng.dispose()


def test_cli_reports_bad_file(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'x.db'}")
    assert main([str(tmp_path / "nao_existe.csv")]) == 1


def test_unknown_ids_are_skipped_before_any_write(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    df = pd.DataFrame({"criativo_id": [cr["id"], "nao-existe"], "data": ["2024-03-01", "2024-03-01"], "investimento": [10, 20]})

    assert import_metricas(engine, df, "criativo") == 1

    m = data.fetch_metricas_diarias(engine, cr["id"])
    assert len(m) == 1
    assert m.iloc[0]["investimento"] == pytest.approx(10)


def test_cli_returns_error_code_on_store_failure(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'painel.db'}"
    eng = make_engine(url)
    ensure_schema(eng)
    eng.dispose()

    csv = tmp_path / "metricas.csv"
    csv.write_text("criativo_id,data,investimento\nqualquer,2024-03-01,10\n", encoding="utf-8")
    monkeypatch.setenv("DATABASE_URL", url)

    with mock.patch("import_metrics._resolve_ids", side_effect=lambda engine, df, nivel: df):
        assert main([str(csv)]) == 1

from datetime import date

import pandas as pd

from metrics import DEFAULT_THRESHOLDS
from styles import GLOBAL_UI_CSS
from view_archived import can_delete, restore_message
from view_creatives import filter_creatives, metric_form_row
from view_offers import active_offers, build_thresholds
from view_overview import daily_series, summarize_by_offer


def test_delete_requires_exact_name():
    oferta = {"id": "1", "nome": "Detox BR"}
    assert can_delete(oferta, "Detox BR")
    assert not can_delete(oferta, "detox br")
    assert not can_delete(oferta, "Detox BR ")
    assert not can_delete(oferta, "")
    assert not can_delete({}, "")


def test_restore_message():
    assert restore_message("Detox", True, 3) == '"Detox" foi restaurada com 3 criativo(s).'
    assert restore_message("Detox", False, 3) == '"Detox" foi restaurada com status pausado.'
    assert restore_message("Detox", True, 0) == '"Detox" foi restaurada com status pausado.'


def test_active_offers_hides_archived():
    df = pd.DataFrame({"nome": ["A", "B", "C"], "status": ["ativo", "arquivado", "pausado"]})
    assert list(active_offers(df)["nome"]) == ["A", "C"]
    assert list(active_offers(df, "pausado")["nome"]) == ["C"]


def test_build_thresholds_defaults_collapse_to_none():
    values = {f"{m}_{b}": v for m, band in DEFAULT_THRESHOLDS.items() for b, v in band.items()}
    assert build_thresholds(values) is None


def test_build_thresholds_custom():
    values = {"roas_verde": 2.0, "roas_amarelo": 1.5, "cpc_verde": 1.5, "cpc_amarelo": 2.0, "ic_verde": 50, "ic_amarelo": 60}
    th = build_thresholds(values)
    assert th["roas"] == {"verde": 2.0, "amarelo": 1.5}
    assert th["ic"] == {"verde": 50.0, "amarelo": 60.0}


def test_filter_creatives():
    df = pd.DataFrame({"nome": ["VSL 01", "UGC 02"], "fonte": ["facebook", "tiktok"], "copy_responsavel": ["Ana", None]})
    assert list(filter_creatives(df, fonte="tiktok")["nome"]) == ["UGC 02"]
    assert list(filter_creatives(df, copy_responsavel="Ana")["nome"]) == ["VSL 01"]
    assert list(filter_creatives(df, q="ugc")["nome"]) == ["UGC 02"]


def test_metric_form_row_coerces_types():
    row = metric_form_row("c1", date(2024, 3, 1), {"investimento": 10, "cliques": 4.0, "vendas": None})
    assert row == {
        "criativo_id": "c1", "data": date(2024, 3, 1),
        "investimento": 10.0, "faturamento": 0.0,
        "impressoes": 0, "cliques": 4, "ics": 0, "vendas": 0,
    }


def _joined():
    th = {"roas": {"verde": 2.0, "amarelo": 1.5}}
    return pd.DataFrame({
        "oferta_id": ["a", "a", "b"],
        "oferta_nome": ["A", "A", "B"],
        "oferta_nicho": ["Saúde", "Saúde", None],
        "oferta_pais": ["Brasil", "Brasil", "EUA"],
        "oferta_thresholds": [th, th, None],
        "data": [date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 1)],
        "investimento": [100.0, 100.0, 50.0],
        "faturamento": [150.0, 250.0, 40.0],
        "impressoes": [0, 0, 0],
        "cliques": [10, 10, 25],
        "ics": [2, 2, 0],
        "vendas": [1, 2, 0],
    })


def test_summarize_by_offer():
    out = summarize_by_offer(_joined()).set_index("oferta_id")
    assert out.loc["a", "investimento"] == 200.0
    assert out.loc["a", "roas"] == 2.0
    assert out.loc["a", "thresholds"] == {"roas": {"verde": 2.0, "amarelo": 1.5}}
    assert out.loc["b", "cpc"] == 2.0
    assert list(out.index) == ["a", "b"]


def test_daily_series():
    ts = daily_series(_joined())
    assert list(ts["investimento"]) == [150.0, 100.0]
    assert ts.iloc[1]["roas"] == 2.5


def test_kpi_row_fits_any_number_of_cards():
    rule = next(line for line in GLOBAL_UI_CSS.splitlines() if line.startswith(".kpi-row{"))
    assert "auto-fit" in rule
    assert "repeat(5" not in rule

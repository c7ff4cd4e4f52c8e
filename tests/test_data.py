from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

import data
from archive import archive_oferta


def _metric(criativo_id, dia, **kw):
    row = {"criativo_id": criativo_id, "data": dia, "investimento": 0, "faturamento": 0, "impressoes": 0, "cliques": 0, "ics": 0, "vendas": 0}
    row.update(kw)
    return row


def _metric_oferta(oferta_id, dia, **kw):
    row = {"oferta_id": oferta_id, "data": dia, "investimento": 0, "faturamento": 0, "impressoes": 0, "cliques": 0, "ics": 0, "vendas": 0}
    row.update(kw)
    return row


# ---- ofertas ----

def test_create_oferta_defaults(engine):
    o = data.create_oferta(engine, {"nome": "  Nova  "})
    assert o["nome"] == "Nova"
    assert o["status"] == "em_teste"
    assert len(o["id"]) == 36
    assert o["created_at"] is not None
    assert o["archived_at"] is None


def test_create_oferta_requires_nome(engine):
    with pytest.raises(ValueError):
        data.create_oferta(engine, {"nome": "   "})


def test_thresholds_round_trip(engine):
    th = {"roas": {"verde": 2.0, "amarelo": 1.5}}
    o = data.create_oferta(engine, {"nome": "X", "thresholds": th})
    assert data.fetch_oferta_by_id(engine, o["id"])["thresholds"] == th


def test_fetch_oferta_by_id_missing(engine):
    with pytest.raises(data.RecordNotFound):
        data.fetch_oferta_by_id(engine, "nao-existe")


def test_update_oferta_missing(engine):
    with pytest.raises(LookupError):
        data.update_oferta(engine, "nao-existe", {"status": "ativo"})


def test_update_oferta_changes_fields(engine, oferta):
    updated = data.update_oferta(engine, oferta["id"], {"status": "pausado", "nicho": "Saúde"})
    assert updated["status"] == "pausado"
    assert updated["nicho"] == "Saúde"
    assert updated["updated_at"] >= oferta["updated_at"]


def test_fetch_ofertas_status_filter(engine):
    data.create_oferta(engine, {"nome": "A", "status": "ativo"})
    data.create_oferta(engine, {"nome": "B", "status": "pausado"})
    assert set(data.fetch_ofertas(engine)["nome"]) == {"A", "B"}
    assert list(data.fetch_ofertas(engine, "ativo")["nome"]) == ["A"]
    assert set(data.fetch_ofertas(engine, "all")["nome"]) == {"A", "B"}


def test_fetch_ofertas_arquivadas(engine, oferta):
    data.create_oferta(engine, {"nome": "Ativa", "status": "ativo"})
    archive_oferta(engine, oferta["id"])
    df = data.fetch_ofertas_arquivadas(engine)
    assert list(df["id"]) == [oferta["id"]]


def test_delete_oferta(engine):
    o = data.create_oferta(engine, {"nome": "Apagar"})
    data.delete_oferta(engine, o["id"])
    with pytest.raises(data.RecordNotFound):
        data.fetch_oferta_by_id(engine, o["id"])


def test_delete_oferta_with_creatives_fails(engine, oferta, make_criativo):
    make_criativo(oferta["id"], "A")
    with pytest.raises(IntegrityError):
        data.delete_oferta(engine, oferta["id"])
    assert data.fetch_oferta_by_id(engine, oferta["id"])["nome"] == "Detox BR"


def test_delete_oferta_cascades_offer_metrics(engine):
    o = data.create_oferta(engine, {"nome": "Com métricas"})
    data.upsert_metrica_diaria_oferta(engine, _metric_oferta(o["id"], date(2024, 3, 1), investimento=10))
    data.delete_oferta(engine, o["id"])
    assert data.fetch_metricas_diarias_oferta(engine, o["id"]).empty


# ---- criativos ----

def test_create_criativo_requires_oferta(engine):
    with pytest.raises(ValueError):
        data.create_criativo(engine, {"nome": "Solto"})


def test_fetch_criativos_filters(engine, oferta, make_criativo):
    other = data.create_oferta(engine, {"nome": "Outra"})
    make_criativo(oferta["id"], "A", fonte="facebook", copy_responsavel="Ana")
    make_criativo(oferta["id"], "B", fonte="google", copy_responsavel="Bia", status="ativo")
    make_criativo(other["id"], "C", fonte="facebook", copy_responsavel="Ana")

    assert set(data.fetch_criativos(engine)["nome"]) == {"A", "B", "C"}
    assert set(data.fetch_criativos(engine, oferta["id"])["nome"]) == {"A", "B"}
    assert set(data.fetch_criativos(engine, fonte="facebook")["nome"]) == {"A", "C"}
    assert set(data.fetch_criativos(engine, copy_responsavel="Bia")["nome"]) == {"B"}
    assert set(data.fetch_criativos(engine, oferta["id"], status="ativo")["nome"]) == {"B"}


def test_delete_criativo_cascades_metrics(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    data.upsert_metrica_diaria(engine, _metric(cr["id"], date(2024, 3, 1), investimento=5))
    data.delete_criativo(engine, cr["id"])
    assert data.fetch_metricas_diarias(engine, cr["id"]).empty


def test_count_criativos_por_oferta(engine, oferta, make_criativo):
    other = data.create_oferta(engine, {"nome": "Outra"})
    make_criativo(oferta["id"], "A")
    make_criativo(oferta["id"], "B")
    make_criativo(other["id"], "C")
    assert data.count_criativos_por_oferta(engine) == {oferta["id"]: 2, other["id"]: 1}


def test_fetch_criativos_com_medias(engine, oferta, make_criativo):
    a = make_criativo(oferta["id"], "A")
    make_criativo(oferta["id"], "sem métricas")
    data.upsert_metrica_diaria(engine, _metric(a["id"], date(2024, 3, 1), investimento=100, faturamento=150, cliques=50, ics=4))
    data.upsert_metrica_diaria(engine, _metric(a["id"], date(2024, 3, 2), investimento=100, faturamento=110, cliques=50, ics=1))

    df = data.fetch_criativos_com_medias(engine, oferta["id"]).set_index("nome")
    assert df.loc["A", "investimento"] == pytest.approx(200)
    assert df.loc["A", "roas"] == pytest.approx(1.3)
    assert df.loc["A", "cpc"] == pytest.approx(2.0)
    assert df.loc["A", "ic"] == pytest.approx(40.0)
    assert df.loc["sem métricas", "investimento"] == 0
    assert df["roas"].isna()["sem métricas"]


# ---- métricas ----

def test_upsert_metrica_diaria_overwrites_same_day(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    first = data.upsert_metrica_diaria(engine, _metric(cr["id"], date(2024, 3, 1), investimento=10, cliques=3))
    second = data.upsert_metrica_diaria(engine, _metric(cr["id"], "2024-03-01", investimento=25, cliques=7))

    assert first["id"] == second["id"]
    df = data.fetch_metricas_diarias(engine, cr["id"])
    assert len(df) == 1
    assert df.iloc[0]["investimento"] == pytest.approx(25)
    assert df.iloc[0]["cliques"] == 7


def test_metrica_requires_date_and_key(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    with pytest.raises(ValueError):
        data.upsert_metrica_diaria(engine, _metric(cr["id"], None))
    with pytest.raises(ValueError):
        data.create_metrica_diaria(engine, _metric(None, date(2024, 3, 1)))


def test_create_and_update_metrica_diaria(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    m = data.create_metrica_diaria(engine, _metric(cr["id"], date(2024, 3, 1), vendas=1))
    updated = data.update_metrica_diaria(engine, m["id"], {"vendas": 3, "data": "2024-03-02"})
    assert updated["vendas"] == 3
    assert updated["data"] == date(2024, 3, 2)


def test_create_metrica_duplicate_day_fails(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    data.create_metrica_diaria(engine, _metric(cr["id"], date(2024, 3, 1)))
    with pytest.raises(IntegrityError):
        data.create_metrica_diaria(engine, _metric(cr["id"], date(2024, 3, 1)))


def test_fetch_metricas_diarias_date_window(engine, oferta, make_criativo):
    cr = make_criativo(oferta["id"], "A")
    for d in (1, 5, 10):
        data.upsert_metrica_diaria(engine, _metric(cr["id"], date(2024, 3, d)))
    df = data.fetch_metricas_diarias(engine, cr["id"], date(2024, 3, 5), date(2024, 3, 10))
    assert sorted(df["data"].astype(str)) == ["2024-03-05", "2024-03-10"]


def test_join_excludes_archived_offers_by_default(engine):
    ativa = data.create_oferta(engine, {"nome": "Ativa", "nicho": "Saúde", "status": "ativo"})
    velha = data.create_oferta(engine, {"nome": "Velha", "status": "ativo"})
    for o in (ativa, velha):
        data.upsert_metrica_diaria_oferta(engine, _metric_oferta(o["id"], date(2024, 3, 1), investimento=10))
    archive_oferta(engine, velha["id"])

    df = data.fetch_metricas_diarias_oferta_com_join(engine, date(2024, 3, 1), date(2024, 3, 1))
    assert list(df["oferta_nome"]) == ["Ativa"]
    assert df.iloc[0]["oferta_nicho"] == "Saúde"
    assert df.iloc[0]["oferta_status"] == "ativo"

    arch = data.fetch_metricas_diarias_oferta_com_join(engine, status_oferta="arquivado")
    assert list(arch["oferta_nome"]) == ["Velha"]


def test_join_respects_date_window(engine, oferta):
    for d in (1, 2, 3):
        data.upsert_metrica_diaria_oferta(engine, _metric_oferta(oferta["id"], date(2024, 3, d)))
    df = data.fetch_metricas_diarias_oferta_com_join(engine, date(2024, 3, 2), date(2024, 3, 3))
    assert len(df) == 2


def test_aggregates_per_offer(engine):
    a = data.create_oferta(engine, {"nome": "A"})
    b = data.create_oferta(engine, {"nome": "B"})
    data.upsert_metrica_diaria_oferta(engine, _metric_oferta(a["id"], date(2024, 3, 1), investimento=100, faturamento=120, cliques=10))
    data.upsert_metrica_diaria_oferta(engine, _metric_oferta(a["id"], date(2024, 3, 2), investimento=50, faturamento=90, cliques=5))
    data.upsert_metrica_diaria_oferta(engine, _metric_oferta(b["id"], date(2024, 3, 2), investimento=10))

    df = data.fetch_metricas_agregadas_por_oferta(engine).set_index("oferta_id")
    assert df.loc[a["id"], "investimento"] == pytest.approx(150)
    assert df.loc[a["id"], "roas"] == pytest.approx(1.4)
    assert df.loc[a["id"], "cpc"] == pytest.approx(10.0)

    only_day2 = data.fetch_metricas_agregadas_por_oferta(engine, date(2024, 3, 2), date(2024, 3, 2)).set_index("oferta_id")
    assert only_day2.loc[a["id"], "investimento"] == pytest.approx(50)


# ---- cadastros ----

def test_lookups_sorted_by_nome(engine):
    data.create_nicho(engine, "Saúde")
    data.create_nicho(engine, "Beleza")
    assert list(data.fetch_nichos(engine)["nome"]) == ["Beleza", "Saúde"]


def test_lookup_duplicate_nome_fails(engine):
    data.create_copywriter(engine, "Ana")
    with pytest.raises(IntegrityError):
        data.create_copywriter(engine, "Ana")


def test_lookup_requires_nome(engine):
    with pytest.raises(ValueError):
        data.create_nicho(engine, "")


def test_create_pais_uppercases_codigo(engine):
    p = data.create_pais(engine, "Brasil", " br ")
    assert p["codigo"] == "BR"
    data.delete_pais(engine, p["id"])
    assert data.fetch_paises(engine).empty


def test_delete_copywriter(engine):
    c = data.create_copywriter(engine, "Bia")
    data.delete_copywriter(engine, c["id"])
    assert data.fetch_copywriters(engine).empty

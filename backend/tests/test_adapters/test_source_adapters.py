"""Tests for the per-source record adapters and their registry."""

import pytest

from models.schemas.raw_record import RawRecord
from services.adapters import registry
from services.adapters.base import as_float, parse_year
from services.adapters.jne import JNEAdapter
from services.adapters.platform import PlatformAdapter

JNE_PAYLOAD = {
    "dni": "40506070",
    "birth_date": "1970-05-01",
    "education": [
        {"level": "Universitario", "degree": "Abogado", "institution": "UNMSM", "year": 1995},
    ],
    "experience": [
        {"organization": "Ministerio de Salud", "position": "Director", "start_year": 2001,
         "end_year": 2008},
    ],
    "political_trajectory": [
        {"party": "Partido X", "position": "Secretario de organización", "start_year": 2010},
    ],
    "penal_sentences_detail": [
        {"delito": "Colusión", "estado": "apelacion", "tipo_pena": "suspendida",
         "fecha_sentencia": "2019-08-12"},
    ],
    "civil_sentences_detail": [
        {"tipo": "alimentos", "descripcion": "Pensión", "estado": "firme",
         "fecha_sentencia": "2015-01-01"},
    ],
    "party_resignations_detail": [{"partido": "A"}, {"partido": "B"}],
    "assets": {"properties": 300000, "vehicles": 0, "savings": 1000, "total": 301000},
    "djhv_url": "https://plataformaelectoral.jne.gob.pe/hv/1",
}

PLATFORM_ROW = {
    "dni": "11112222",
    "education_details": [
        {"level": "Posgrado", "degree": "Magíster", "is_completed": True,
         "field_of_study": "Gestión Pública", "end_date": "2010-12-01", "is_verified": True},
    ],
    "experience_details": [
        {"position": "Gerente", "organization": "Empresa SAC", "start_date": "2011-03-01",
         "end_date": "2015-06-30"},
        {"position": "Asesor", "organization": "Congreso", "start_year": 2016,
         "end_year": 2019, "is_current": True},
    ],
    "political_trajectory": [
        {"position": "Regidor", "type": "cargo_electivo", "year_start": 2019, "year_end": 2022},
    ],
    "penal_sentences": [{"status": "firme", "description": "Peculado", "date": "2012-04-04"}],
    "civil_sentences": [],
    "party_resignations": 3,
    "assets_declaration": {
        "total_income": 110000, "public_salary": 60000, "private_salary": 50000,
        "other_public": 0, "vehicle_count": 1, "vehicle_total": 20000,
    },
    "data_verified": True,
    "data_source": "jne",
}


class TestHelpers:
    def test_parse_year(self):
        assert parse_year("2019-08-12") == 2019
        assert parse_year(2004) == 2004
        assert parse_year(2004.0) == 2004
        assert parse_year("sin fecha") is None
        assert parse_year(None) is None
        assert parse_year(True) is None

    def test_as_float_is_lenient(self):
        assert as_float("1,200.50") == 1200.5
        assert as_float("abc") == 0.0
        assert as_float(float("nan")) == 0.0
        assert as_float(None) == 0.0


class TestJNEAdapter:
    def setup_method(self):
        self.adapter = JNEAdapter()

    def test_maps_full_payload(self):
        record = self.adapter.adapt(JNE_PAYLOAD)
        assert isinstance(record, RawRecord)
        assert record.education[0].degree == "Abogado"
        assert record.experience[0].start_year == 2001
        assert record.trajectory[0].organization == "Partido X"
        assert record.penal_sentences[0].status == "apelacion"
        assert record.penal_sentences[0].year == 2019
        assert record.civil_sentences[0].kind == "alimentos"
        assert record.party_resignations == 2
        assert record.sentences_declared is True
        assert record.assets.real_estate_total == 300000
        assert record.assets.real_estate_count == 1
        assert record.assets.vehicle_count == 0
        assert record.declaration_url.endswith("/hv/1")
        assert record.verification.data_source == "jne"

    def test_legacy_declared_sentences(self):
        record = self.adapter.adapt({
            "declared_sentences": [
                {"type": "penal", "description": "Robo", "date": "2001-01-01"},
                {"type": "civil", "description": "Desalojo", "date": "2003-01-01"},
            ],
        })
        assert record.penal_sentences[0].status == "firme"
        assert record.civil_sentences[0].description == "Desalojo"

    def test_rehabilitated_sentence_is_served(self):
        record = self.adapter.adapt({
            "penal_sentences_detail": [{"delito": "Lesiones", "estado": "proceso",
                                        "rehabilitado": True}],
        })
        assert record.penal_sentences[0].status == "cumplida"

    @pytest.mark.parametrize("payload", [
        {}, None, {"education": None, "experience": "n/a", "assets": []},
        {"party_resignations": "dos"}, {"political_trajectory": [None, 3, "x"]},
    ])
    def test_never_fails_on_partial_payloads(self, payload):
        record = self.adapter.adapt(payload)
        assert isinstance(record, RawRecord)
        assert record.party_resignations >= 0


class TestPlatformAdapter:
    def setup_method(self):
        self.adapter = PlatformAdapter()

    def test_maps_alternate_key_names(self):
        record = self.adapter.adapt(PLATFORM_ROW)
        education = record.education[0]
        assert education.year == 2010
        assert education.field == "Gestión Pública"
        assert education.verified is True
        assert record.experience[0].start_year == 2011
        assert record.experience[0].end_year == 2015
        # is_current wins over a stale end year
        assert record.experience[1].end_year is None
        assert record.trajectory[0].kind == "cargo_electivo"
        assert record.trajectory[0].start_year == 2019
        assert record.party_resignations == 3
        assert record.sentences_declared is True
        assert record.assets.total_income == 110000
        assert record.verification.data_verified is True

    def test_missing_assets_stay_missing(self):
        record = self.adapter.adapt({"dni": "1"})
        assert record.assets is None
        assert record.sentences_declared is False

    def test_nested_zero_verification_wins(self):
        record = self.adapter.adapt({
            "verification": {"verification_level": 0, "coverage_level": 0, "sources_checked": []},
            "verification_level": 80,
            "coverage_level": 90,
            "sources_checked": ["jne"],
        })
        assert record.verification.verification_level == 0
        assert record.verification.coverage_level == 0
        assert record.verification.sources_checked == []

    def test_top_level_verification_fallback(self):
        record = self.adapter.adapt({"verification_level": 80, "coverage_level": 90})
        assert record.verification.verification_level == 80
        assert record.verification.coverage_level == 90

    @pytest.mark.parametrize("payload", [
        {}, None, {"education_details": [{"level": None}], "penal_sentences": None},
        {"assets_declaration": {"vehicle_count": "many"}},
    ])
    def test_never_fails_on_partial_payloads(self, payload):
        assert isinstance(self.adapter.adapt(payload), RawRecord)


class TestRegistry:
    def setup_method(self):
        registry.clear()

    def test_returns_cached_instance(self):
        assert registry.get_adapter("jne") is registry.get_adapter("jne")
        assert isinstance(registry.get_adapter("platform"), PlatformAdapter)

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            registry.get_adapter("sunat")

"""Shared test configuration, fixtures and pytest markers."""

import os

os.environ.setdefault("ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("RANKING_RATE_LIMIT", "1000/minute")
os.environ.setdefault("COMPOSITE_RATE_LIMIT", "1000/minute")

import pytest

from models.schemas.raw_record import (
    AssetDeclaration,
    RawCivilSentence,
    RawEducation,
    RawExperience,
    RawPenalSentence,
    RawRecord,
    RawTrajectory,
    VerificationMetadata,
)
from models.schemas.subject import Candidacy, Person
from models.schemas.taxonomy import Category
from services.repository import SubjectRepository


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "scenario: end-to-end scoring scenarios"
    )


def make_record(**overrides) -> RawRecord:
    """A well-documented congress candidate; override any field."""
    defaults = dict(
        education=[
            RawEducation(level="Universitario", degree="Abogado", institution="UNMSM",
                         year=1998, has_title=True, verified=True, field="Derecho"),
            RawEducation(level="Posgrado", degree="Maestro en Derecho Constitucional",
                         institution="PUCP", year=2004),
        ],
        experience=[
            RawExperience(position="Gerente General", organization="Estudio Perez SAC",
                          start_year=2005, end_year=2012),
            RawExperience(position="Director General", organization="Ministerio de Justicia",
                          start_year=2012, end_year=2016),
        ],
        trajectory=[
            RawTrajectory(position="Regidor", organization="Municipalidad de Lima",
                          kind="cargo_electivo", start_year=2019, end_year=2022,
                          is_elected=True),
        ],
        birth_date="1975-03-02",
        dni="12345678",
        plan_url="https://example.org/plan.pdf",
        declaration_url="https://example.org/djhv.pdf",
        sentences_declared=True,
        assets=AssetDeclaration(
            public_salary=60000, private_salary=50000, private_rent=10000,
            total_income=120000, vehicle_count=2, vehicle_total=80000,
            real_estate_count=1, real_estate_total=250000,
        ),
        verification=VerificationMetadata(data_verified=True, data_source="jne"),
    )
    defaults.update(overrides)
    return RawRecord(**defaults)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def full_record() -> RawRecord:
    return make_record()


@pytest.fixture
def empty_record() -> RawRecord:
    return RawRecord()


@pytest.fixture
def repository() -> SubjectRepository:
    """Two people, one of them running for two categories."""
    repo = SubjectRepository()
    repo.add_person(Person(person_id="p1", full_name="Ana Quispe", record=make_record()))
    repo.add_person(Person(
        person_id="p2",
        full_name="Luis Rojas",
        record=make_record(
            penal_sentences=[RawPenalSentence(description="Peculado", status="firme")],
            civil_sentences=[RawCivilSentence(kind="violencia familiar")],
            party_resignations=2,
        ),
    ))
    repo.add_candidacy(Candidacy(candidacy_id="c-p1-sen", person_id="p1",
                                 category=Category.SENADOR, region="lima", party="AP"))
    repo.add_candidacy(Candidacy(candidacy_id="c-p1-pres", person_id="p1",
                                 category=Category.PRESIDENTE, party="AP", plan_viability=70))
    repo.add_candidacy(Candidacy(candidacy_id="c-p2-sen", person_id="p2",
                                 category=Category.SENADOR, region="cusco", party="FP",
                                 has_red_flag=True))
    return repo

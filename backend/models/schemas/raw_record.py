"""Canonical raw subject record, as produced by the source adapters.

Nothing here is classified yet: every field carries the free text the
upstream registry handed over. Lists accept ``None`` and scalars are optional
so an adapter never has to invent a value.
"""

from pydantic import BaseModel, Field, field_validator


class RawEducation(BaseModel):
    level: str | None = None  # "Universitario", "Posgrado", "maestria"...
    degree: str | None = None
    field: str | None = None
    institution: str | None = None
    year: int | None = None
    is_completed: bool | None = None
    has_title: bool = False
    has_bachelor: bool = False
    verified: bool = False


class RawExperience(BaseModel):
    position: str | None = None
    organization: str | None = None
    sector: str | None = None  # "publico" | "privado" hint when the source has it
    start_year: int | None = None
    end_year: int | None = None
    is_current: bool = False


class RawTrajectory(BaseModel):
    position: str | None = None
    organization: str | None = None  # party or institution
    kind: str | None = None  # "cargo_electivo" | "cargo_publico" | "cargo_partidario"
    start_year: int | None = None
    end_year: int | None = None
    is_elected: bool = False


class RawPenalSentence(BaseModel):
    description: str | None = None
    status: str | None = None  # "firme", "en apelacion", "consentida"...
    modality: str | None = None  # "efectiva", "suspendida"...
    year: int | None = None


class RawCivilSentence(BaseModel):
    kind: str | None = None
    description: str | None = None
    status: str | None = None
    year: int | None = None


class AssetDeclaration(BaseModel):
    public_salary: float = 0.0
    public_rent: float = 0.0
    public_other: float = 0.0
    private_salary: float = 0.0
    private_rent: float = 0.0
    private_other: float = 0.0
    total_income: float | None = None
    vehicle_count: int = 0
    vehicle_total: float = 0.0
    real_estate_count: int = 0
    real_estate_total: float = 0.0


class VerificationMetadata(BaseModel):
    data_verified: bool = False
    data_source: str | None = None
    sources_checked: list[str] = []
    verification_level: float | None = None  # 0-100 when supplied upstream
    coverage_level: float | None = None  # 0-100 when supplied upstream


class RawRecord(BaseModel):
    """Source-independent raw record of one person."""

    education: list[RawEducation] = []
    experience: list[RawExperience] = []
    trajectory: list[RawTrajectory] = []
    penal_sentences: list[RawPenalSentence] = []
    civil_sentences: list[RawCivilSentence] = []
    party_resignations: int = Field(default=0, ge=0)
    sentences_declared: bool = False  # the sentence sections were filled in, even if empty
    assets: AssetDeclaration | None = None

    birth_date: str | None = None
    dni: str | None = None
    plan_url: str | None = None
    declaration_url: str | None = None

    verification: VerificationMetadata = VerificationMetadata()

    @field_validator(
        "education", "experience", "trajectory",
        "penal_sentences", "civil_sentences",
        mode="before",
    )
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("party_resignations", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        return 0 if value is None else value

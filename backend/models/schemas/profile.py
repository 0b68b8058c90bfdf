"""Classified, canonical projection of a raw record."""

from pydantic import BaseModel, Field

from models.schemas.taxonomy import (
    CivilType,
    EducationLevel,
    RoleType,
    SeniorityLevel,
)


class EducationDetail(BaseModel):
    level: EducationLevel = EducationLevel.SIN_INFORMACION
    field: str | None = None
    institution: str | None = None
    year: int | None = None
    verified: bool = False


class Experience(BaseModel):
    role: str = ""
    role_type: RoleType = RoleType.TECNICO_PROFESIONAL
    organization: str = ""
    start_year: int
    end_year: int | None = None  # None = still in the post
    is_leadership: bool = False
    seniority_level: SeniorityLevel = SeniorityLevel.INDIVIDUAL_CONTRIBUTOR


class PenalSentence(BaseModel):
    description: str = ""
    is_firm: bool = False
    year: int | None = None


class CivilSentence(BaseModel):
    type: CivilType = CivilType.OTHER
    description: str = ""
    year: int | None = None


class Profile(BaseModel):
    """Everything the pillar scorer needs about one person."""

    education: list[EducationDetail] = []
    experience: list[Experience] = []
    penal_sentences: list[PenalSentence] = []
    civil_sentences: list[CivilSentence] = []
    party_resignations: int = Field(default=0, ge=0)

    declaration_completeness: float = Field(default=0.0, ge=0, le=100)
    declaration_consistency: float = Field(default=0.0, ge=0, le=100)
    assets_quality: float = Field(default=0.0, ge=0, le=100)
    verification_level: float = Field(default=0.0, ge=0, le=100)
    coverage_level: float = Field(default=0.0, ge=0, le=100)

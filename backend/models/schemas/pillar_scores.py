"""Pillar scores and the breakdowns that explain them."""

from pydantic import BaseModel

from models.schemas.taxonomy import CivilType, Pillar


class EducationBreakdown(BaseModel):
    level: float = 0.0  # points for the highest level reached
    depth: float = 0.0  # bonus for further qualifying degrees
    total: float = 0.0


class LeadershipBreakdown(BaseModel):
    seniority: float = 0.0
    stability: float = 0.0
    total: float = 0.0


class CompetenceBreakdown(BaseModel):
    education: EducationBreakdown = EducationBreakdown()
    experience_total: float = 0.0
    experience_relevant: float = 0.0
    experience_raw_years: int = 0  # summed per-entry years, overlaps counted twice
    experience_unique_years: int = 0
    experience_has_overlap: bool = False
    leadership: LeadershipBreakdown = LeadershipBreakdown()
    total: float = 0.0


class CivilPenalty(BaseModel):
    type: CivilType
    count: int = 0
    penalty: float = 0.0
    capped: bool = False


class IntegrityBreakdown(BaseModel):
    base: float = 100.0
    penal_penalty: float = 0.0
    civil_penalties: list[CivilPenalty] = []
    total_civil_penalty: float = 0.0
    civil_penalties_capped: bool = False
    resignation_penalty: float = 0.0
    total: float = 100.0


class TransparencyBreakdown(BaseModel):
    completeness: float = 0.0
    consistency: float = 0.0
    assets_quality: float = 0.0
    total: float = 0.0


class ConfidenceBreakdown(BaseModel):
    verification: float = 0.0
    coverage: float = 0.0
    total: float = 0.0


class PillarScores(BaseModel):
    """Four bounded pillars plus the externally supplied plan viability."""

    competence: float = 0.0  # 0-100
    integrity: float = 100.0  # 0-100
    transparency: float = 0.0  # 0-100
    confidence: float = 0.0  # 0-100
    plan_viability: float | None = None  # 0-100, distinguished categories only

    competence_breakdown: CompetenceBreakdown = CompetenceBreakdown()
    integrity_breakdown: IntegrityBreakdown = IntegrityBreakdown()
    transparency_breakdown: TransparencyBreakdown = TransparencyBreakdown()
    confidence_breakdown: ConfidenceBreakdown = ConfidenceBreakdown()

    def pillar(self, pillar: Pillar) -> float:
        """Value of one pillar; a missing plan viability counts as zero."""
        value = getattr(self, pillar.value)
        return 0.0 if value is None else value

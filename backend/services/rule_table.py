"""Calibratable point budgets, penalty weights and caps used by the scorer.

A ``RuleTable`` is a plain value passed to the profile builder and the pillar
scorer. The defaults below reproduce the published reference scores of the
ranking platform; a YAML file can override any subset of them.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from models.schemas.taxonomy import (
    Category,
    CivilType,
    EducationLevel,
    RoleType,
    SeniorityLevel,
)

logger = logging.getLogger(__name__)


class Tier(BaseModel):
    """``points`` apply from ``min`` upwards (years or counts)."""

    min: int
    points: float


class CivilPenaltyRule(BaseModel):
    base: float
    cap: float


def tier_points(tiers: list[Tier], value: float) -> float:
    """Points of the highest tier whose threshold ``value`` reaches."""
    best: Tier | None = None
    for tier in tiers:
        if value >= tier.min and (best is None or tier.min > best.min):
            best = tier
    return best.points if best else 0.0


EDUCATION_POINTS: dict[EducationLevel, float] = {
    EducationLevel.SIN_INFORMACION: 0,
    EducationLevel.PRIMARIA: 2,
    EducationLevel.SECUNDARIA_INCOMPLETA: 4,
    EducationLevel.SECUNDARIA_COMPLETA: 6,
    EducationLevel.TECNICO_INCOMPLETO: 7,
    EducationLevel.TECNICO_COMPLETO: 10,
    EducationLevel.UNIVERSITARIO_INCOMPLETO: 9,
    EducationLevel.UNIVERSITARIO_COMPLETO: 14,
    EducationLevel.TITULO_PROFESIONAL: 16,
    EducationLevel.MAESTRIA: 18,
    EducationLevel.DOCTORADO: 22,
}

SENIORITY_POINTS: dict[SeniorityLevel, float] = {
    SeniorityLevel.DIRECCION: 14,
    SeniorityLevel.GERENCIA: 10,
    SeniorityLevel.JEFATURA: 8,
    SeniorityLevel.COORDINADOR: 6,
    SeniorityLevel.INDIVIDUAL_CONTRIBUTOR: 2,
}

# Points per year of tenure, by the category the person is running for
_EXECUTIVE_RELEVANCE: dict[RoleType, float] = {
    RoleType.ELECTIVO_ALTO: 3.0,
    RoleType.EJECUTIVO_PUBLICO_ALTO: 3.0,
    RoleType.EJECUTIVO_PRIVADO_ALTO: 2.8,
    RoleType.EJECUTIVO_PUBLICO_MEDIO: 2.0,
    RoleType.EJECUTIVO_PRIVADO_MEDIO: 1.8,
    RoleType.INTERNACIONAL: 1.8,
    RoleType.ELECTIVO_MEDIO: 1.5,
    RoleType.TECNICO_PROFESIONAL: 1.2,
    RoleType.ACADEMIA: 1.0,
    RoleType.PARTIDARIO: 0.6,
}
_LEGISLATIVE_RELEVANCE: dict[RoleType, float] = {
    RoleType.ELECTIVO_ALTO: 3.0,
    RoleType.EJECUTIVO_PUBLICO_ALTO: 2.6,
    RoleType.EJECUTIVO_PRIVADO_ALTO: 1.8,
    RoleType.EJECUTIVO_PUBLICO_MEDIO: 2.0,
    RoleType.EJECUTIVO_PRIVADO_MEDIO: 1.4,
    RoleType.INTERNACIONAL: 1.2,
    RoleType.ELECTIVO_MEDIO: 2.2,
    RoleType.TECNICO_PROFESIONAL: 1.6,
    RoleType.ACADEMIA: 1.4,
    RoleType.PARTIDARIO: 0.8,
}
_ANDEAN_RELEVANCE: dict[RoleType, float] = {
    RoleType.ELECTIVO_ALTO: 2.2,
    RoleType.EJECUTIVO_PUBLICO_ALTO: 2.2,
    RoleType.EJECUTIVO_PRIVADO_ALTO: 1.6,
    RoleType.EJECUTIVO_PUBLICO_MEDIO: 1.6,
    RoleType.EJECUTIVO_PRIVADO_MEDIO: 1.2,
    RoleType.INTERNACIONAL: 3.0,
    RoleType.ELECTIVO_MEDIO: 1.6,
    RoleType.TECNICO_PROFESIONAL: 1.6,
    RoleType.ACADEMIA: 1.8,
    RoleType.PARTIDARIO: 0.8,
}

RELEVANCE_BY_CATEGORY: dict[Category, dict[RoleType, float]] = {
    Category.PRESIDENTE: _EXECUTIVE_RELEVANCE,
    Category.VICEPRESIDENTE: _EXECUTIVE_RELEVANCE,
    Category.SENADOR: _LEGISLATIVE_RELEVANCE,
    Category.DIPUTADO: _LEGISLATIVE_RELEVANCE,
    Category.PARLAMENTO_ANDINO: _ANDEAN_RELEVANCE,
}

CIVIL_PENALTIES: dict[CivilType, CivilPenaltyRule] = {
    CivilType.VIOLENCE: CivilPenaltyRule(base=50, cap=70),
    CivilType.ALIMONY: CivilPenaltyRule(base=35, cap=50),
    CivilType.LABOR: CivilPenaltyRule(base=25, cap=40),
    CivilType.CONTRACTUAL: CivilPenaltyRule(base=15, cap=25),
    CivilType.OTHER: CivilPenaltyRule(base=10, cap=15),
}

# Weighted importance of each hoja de vida section for completeness
COMPLETENESS_SECTIONS: dict[str, float] = {
    "identificacion": 10,
    "estudios": 15,
    "experiencia_laboral": 15,
    "trayectoria_politica": 5,
    "sentencias": 10,
    "bienes_rentas": 30,
    "plan_gobierno": 10,
    "hoja_de_vida": 5,
}


class RuleTable(BaseModel):
    """Every constant the profile builder and the scorer depend on."""

    reference_year: int = 2026  # stands in for "now" so scoring stays pure

    # Competence: education
    education_points: dict[EducationLevel, float] = EDUCATION_POINTS
    education_depth_threshold: float = 10  # further degrees worth at least this count
    education_depth_step: float = 2
    education_verified_field_bonus: float = 1
    education_depth_max: float = 8
    education_max: float = 30

    # Competence: experience
    experience_total_tiers: list[Tier] = [
        Tier(min=2, points=6),
        Tier(min=5, points=12),
        Tier(min=8, points=16),
        Tier(min=11, points=20),
        Tier(min=15, points=25),
    ]
    experience_total_max: float = 25
    relevance_year_cap: int = 10  # years counted per entry
    relevance_unknown_points: float = 0.5
    relevance_by_category: dict[Category, dict[RoleType, float]] = RELEVANCE_BY_CATEGORY
    experience_relevant_max: float = 25

    # Competence: leadership
    seniority_points: dict[SeniorityLevel, float] = SENIORITY_POINTS
    leadership_seniority_max: float = 14
    stability_tiers: list[Tier] = [
        Tier(min=2, points=2),
        Tier(min=4, points=4),
        Tier(min=7, points=6),
    ]
    leadership_stability_max: float = 6
    leadership_max: float = 20
    competence_max: float = 100

    # Integrity
    penal_single_firm: float = 70
    penal_multiple_firm: float = 85
    penal_pending_each: float = 35
    penal_max: float = 85
    civil_penalties: dict[CivilType, CivilPenaltyRule] = CIVIL_PENALTIES
    civil_repeat_factor: float = 0.5  # each repeat of a type costs this share of the previous one
    civil_max: float = 85
    resignation_tiers: list[Tier] = [
        Tier(min=1, points=5),
        Tier(min=2, points=10),
        Tier(min=4, points=15),
    ]

    # Transparency and confidence budgets (points out of 100)
    transparency_completeness_points: float = 35
    transparency_consistency_points: float = 35
    transparency_assets_points: float = 30
    confidence_verification_points: float = 50
    confidence_coverage_points: float = 50

    # Profile builder
    completeness_sections: dict[str, float] = COMPLETENESS_SECTIONS
    missing_assets_quality: float = 0
    undeclared_income_consistency: float = 0.15
    income_tolerance: float = 0.10
    earliest_year: int = 1940
    verification_base: float = 50
    verification_verified_bonus: float = 30
    verification_source_bonus: float = 20
    verified_sources: list[str] = ["jne", "jne_api", "voto_informado", "onpe", "reniec"]
    known_registries: list[str] = [
        "jne", "onpe", "reniec", "poder_judicial", "sunat", "contraloria", "congreso",
    ]

    def relevance_table(self, category: Category) -> dict[RoleType, float]:
        return self.relevance_by_category.get(category, {})


DEFAULT_RULES = RuleTable()


def read_yaml(path: str | Path) -> dict:
    """Read a YAML overrides file; an empty file yields an empty dict."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}")
    return data


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_rule_table(path: str | Path | None = None, **overrides: Any) -> RuleTable:
    """Default rule table, updated from the ``scoring`` section of a YAML file.

    Nested mappings are merged key by key, so a file may override a single
    civil penalty or a single relevance entry. Keyword overrides apply last.
    """
    data = DEFAULT_RULES.model_dump(mode="json")
    if path:
        scoring = read_yaml(path).get("scoring") or {}
        data = _merge(data, scoring)
        logger.info("Loaded scoring overrides from %s (%d keys)", path, len(scoring))
    data.update(overrides)
    return RuleTable.model_validate(data)

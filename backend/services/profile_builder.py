"""Build a classified Profile out of a canonical RawRecord."""

import logging

from models.schemas.profile import (
    CivilSentence,
    EducationDetail,
    Experience,
    PenalSentence,
    Profile,
)
from models.schemas.raw_record import AssetDeclaration, RawRecord
from models.schemas.taxonomy import SentenceStatus
from services import classifier
from services.rule_table import DEFAULT_RULES, RuleTable

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _plausible_year(year: int | None, rules: RuleTable) -> int | None:
    if year is None or not rules.earliest_year <= year <= rules.reference_year + 1:
        return None
    return year


# ---------------------------------------------------------------------------
# Entry classification
# ---------------------------------------------------------------------------

def build_education(record: RawRecord, rules: RuleTable) -> list[EducationDetail]:
    details = []
    for entry in record.education:
        details.append(EducationDetail(
            level=classifier.classify(entry, "education"),
            field=entry.field or entry.degree,
            institution=entry.institution,
            year=_plausible_year(entry.year, rules),
            verified=entry.verified,
        ))
    return details


def _span(start: int | None, end: int | None, is_current: bool,
          rules: RuleTable) -> tuple[int, int | None]:
    """Start/end years with a missing start pinned to the reference year."""
    start_year = _plausible_year(start, rules) or rules.reference_year
    end_year = None if is_current else _plausible_year(end, rules)
    if end_year is not None and end_year < start_year:
        end_year = start_year
    return start_year, end_year


def build_experience(record: RawRecord, rules: RuleTable) -> list[Experience]:
    """Work entries followed by political trajectory entries."""
    experience = []
    for entry in record.experience:
        seniority = classifier.classify(entry, "seniority")
        start_year, end_year = _span(entry.start_year, entry.end_year, entry.is_current, rules)
        experience.append(Experience(
            role=entry.position or "",
            role_type=classifier.classify(entry, "role"),
            organization=entry.organization or "",
            start_year=start_year,
            end_year=end_year,
            is_leadership=classifier.is_leadership(seniority),
            seniority_level=seniority,
        ))

    for entry in record.trajectory:
        role_type, seniority = classifier.classify_trajectory(entry)
        start_year, end_year = _span(entry.start_year, entry.end_year, False, rules)
        experience.append(Experience(
            role=entry.position or "",
            role_type=role_type,
            organization=entry.organization or "Gobierno",
            start_year=start_year,
            end_year=end_year,
            is_leadership=classifier.is_leadership(seniority),
            seniority_level=seniority,
        ))
    return experience


def build_sentences(record: RawRecord) -> tuple[list[PenalSentence], list[CivilSentence]]:
    penal = [
        PenalSentence(
            description=s.description or "",
            is_firm=classifier.classify(s, "firmness") == SentenceStatus.FIRME,
            year=s.year,
        )
        for s in record.penal_sentences
    ]
    civil = [
        CivilSentence(
            type=classifier.classify(s, "civil_type"),
            description=s.description or s.kind or "",
            year=s.year,
        )
        for s in record.civil_sentences
    ]
    return penal, civil


# ---------------------------------------------------------------------------
# Declaration quality
# ---------------------------------------------------------------------------

def compute_declaration_completeness(record: RawRecord, rules: RuleTable = DEFAULT_RULES) -> float:
    """Score 0-100 based on the weighted importance of declared sections."""
    present = {
        "identificacion": bool(record.dni or record.birth_date),
        "estudios": bool(record.education),
        "experiencia_laboral": bool(record.experience),
        "trayectoria_politica": bool(record.trajectory),
        "sentencias": record.sentences_declared,
        "bienes_rentas": record.assets is not None,
        "plan_gobierno": bool(record.plan_url),
        "hoja_de_vida": bool(record.declaration_url),
    }
    weights = rules.completeness_sections
    total_weight = sum(weights.values())
    if total_weight <= 0:
        return 0.0
    found_weight = sum(w for name, w in weights.items() if present.get(name))
    return round(found_weight / total_weight * 100, 1)


def _income_sources(assets: AssetDeclaration) -> list[float]:
    return [
        assets.public_salary, assets.public_rent, assets.public_other,
        assets.private_salary, assets.private_rent, assets.private_other,
    ]


def _income_check(assets: AssetDeclaration, rules: RuleTable) -> float:
    """1.0 when the declared total matches the sum of the sources."""
    sources_sum = sum(_income_sources(assets))
    total = assets.total_income or 0.0
    if sources_sum <= 0 and total <= 0:
        return rules.undeclared_income_consistency
    if total <= 0:
        return 0.5
    ratio = abs(sources_sum - total) / total
    if ratio <= rules.income_tolerance:
        return 1.0
    return _clamp(1.0 - ratio, 0.0, 1.0)


def compute_declaration_consistency(record: RawRecord, rules: RuleTable = DEFAULT_RULES) -> float:
    """Percentage of the applicable plausibility checks that pass.

    A record with nothing to check scores 0, not 100.
    """
    checks: list[float] = []
    low, high = rules.earliest_year, rules.reference_year + 1

    study_years = [e.year for e in record.education if e.year is not None]
    if study_years:
        checks.append(float(all(low <= y <= high for y in study_years)))

    ranges = [
        (e.start_year, e.end_year) for e in record.experience
        if e.start_year is not None
    ]
    if ranges:
        checks.append(float(all(
            low <= start <= high and (end is None or start <= end <= high)
            for start, end in ranges
        )))

    if record.experience:
        checks.append(float(all(
            e.position and e.organization and e.start_year is not None
            for e in record.experience
        )))
    if record.education:
        checks.append(float(all(e.level and e.institution for e in record.education)))
    if record.trajectory:
        checks.append(float(all(
            t.position and t.start_year is not None for t in record.trajectory
        )))
    if record.assets is not None:
        checks.append(_income_check(record.assets, rules))

    if not checks:
        return 0.0
    return round(sum(checks) / len(checks) * 100, 1)


def _property_detail(count: int, total: float) -> float:
    if count > 0 and total > 0:
        return 1.0
    if count == 0 and total <= 0:
        return 0.5  # declared as none
    return 0.0


def compute_assets_quality(record: RawRecord, rules: RuleTable = DEFAULT_RULES) -> float:
    """Score 0-100 for how detailed and coherent the asset declaration is.

    Income granularity is worth 50, vehicle and real-estate detail 15 each,
    and a declared income total 20. A missing declaration takes the floor.
    """
    assets = record.assets
    if assets is None:
        return _clamp(rules.missing_assets_quality)

    sources = sum(1 for amount in _income_sources(assets) if amount > 0)
    granularity = min(sources * 10, 50)
    detail = 15 * (
        _property_detail(assets.vehicle_count, assets.vehicle_total)
        + _property_detail(assets.real_estate_count, assets.real_estate_total)
    )
    declared_total = 20 if (assets.total_income or 0) > 0 else 0
    return _clamp(granularity + detail + declared_total)


def compute_verification_level(record: RawRecord, rules: RuleTable = DEFAULT_RULES) -> float:
    meta = record.verification
    if meta.verification_level is not None:
        return _clamp(meta.verification_level)
    level = rules.verification_base
    if meta.data_verified:
        level += rules.verification_verified_bonus
    if meta.data_source and meta.data_source.lower() in rules.verified_sources:
        level += rules.verification_source_bonus
    return _clamp(level)


def compute_coverage_level(record: RawRecord, rules: RuleTable = DEFAULT_RULES) -> float:
    """Share of known registries checked, or the verification level if none were."""
    meta = record.verification
    if meta.coverage_level is not None:
        return _clamp(meta.coverage_level)
    known = {r.lower() for r in rules.known_registries}
    checked = {s.lower() for s in meta.sources_checked} & known
    if not checked or not known:
        return compute_verification_level(record, rules)
    return round(len(checked) / len(known) * 100, 1)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def build_profile(record: RawRecord, rules: RuleTable | None = None) -> Profile:
    """Classify every entry of a raw record and derive its quality metrics."""
    rules = rules or DEFAULT_RULES
    penal, civil = build_sentences(record)
    profile = Profile(
        education=build_education(record, rules),
        experience=build_experience(record, rules),
        penal_sentences=penal,
        civil_sentences=civil,
        party_resignations=record.party_resignations,
        declaration_completeness=compute_declaration_completeness(record, rules),
        declaration_consistency=compute_declaration_consistency(record, rules),
        assets_quality=compute_assets_quality(record, rules),
        verification_level=compute_verification_level(record, rules),
        coverage_level=compute_coverage_level(record, rules),
    )
    logger.debug(
        "Built profile: %d education, %d experience, %d penal, %d civil",
        len(profile.education), len(profile.experience),
        len(profile.penal_sentences), len(profile.civil_sentences),
    )
    return profile

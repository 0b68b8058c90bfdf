"""Pillar scoring: competence, integrity, transparency and confidence.

All functions are pure. The rule table is always passed in; nothing reads
module state or the clock.
"""

import math
from collections import Counter

from models.schemas.pillar_scores import (
    CivilPenalty,
    CompetenceBreakdown,
    ConfidenceBreakdown,
    EducationBreakdown,
    IntegrityBreakdown,
    LeadershipBreakdown,
    PillarScores,
    TransparencyBreakdown,
)
from models.schemas.profile import CivilSentence, EducationDetail, Experience, Profile
from models.schemas.taxonomy import Category, CivilType, Pillar
from services.rule_table import DEFAULT_RULES, RuleTable, tier_points


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative budgets."""
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Competence
# ---------------------------------------------------------------------------

def score_education(education: list[EducationDetail], rules: RuleTable) -> EducationBreakdown:
    """Highest level reached plus a bonus for further qualifying degrees."""
    if not education:
        return EducationBreakdown()

    points = sorted(
        ((rules.education_points.get(e.level, 0.0), e) for e in education),
        key=lambda item: item[0],
        reverse=True,
    )
    level = points[0][0]

    depth = 0.0
    for value, _ in points[1:]:
        if value >= rules.education_depth_threshold:
            depth += rules.education_depth_step
    if any(
        e.verified and e.field and value >= rules.education_depth_threshold
        for value, e in points
    ):
        depth += rules.education_verified_field_bonus
    depth = min(depth, rules.education_depth_max)

    return EducationBreakdown(
        level=level,
        depth=depth,
        total=min(level + depth, rules.education_max),
    )


def _entry_years(entry: Experience, rules: RuleTable) -> int:
    end = entry.end_year if entry.end_year is not None else rules.reference_year
    return max(0, end - entry.start_year)


def experience_years(experience: list[Experience], rules: RuleTable) -> tuple[int, int]:
    """(raw, unique) tenure years; unique merges overlapping entries."""
    raw = sum(_entry_years(e, rules) for e in experience)

    intervals = sorted(
        (e.start_year, e.end_year if e.end_year is not None else rules.reference_year)
        for e in experience
    )
    unique = 0
    current_start = current_end = None
    for start, end in intervals:
        if end <= start:
            continue
        if current_end is None or start > current_end:
            if current_end is not None:
                unique += current_end - current_start
            current_start, current_end = start, end
        else:
            current_end = max(current_end, end)
    if current_end is not None:
        unique += current_end - current_start
    return raw, unique


def score_experience_relevance(experience: list[Experience], category: Category,
                               rules: RuleTable) -> float:
    table = rules.relevance_table(category)
    relevance = 0.0
    for entry in experience:
        years = min(_entry_years(entry, rules), rules.relevance_year_cap)
        relevance += years * table.get(entry.role_type, rules.relevance_unknown_points)
    return min(relevance, rules.experience_relevant_max)


def score_leadership(experience: list[Experience], rules: RuleTable) -> LeadershipBreakdown:
    leading = [e for e in experience if e.is_leadership]
    if not leading:
        return LeadershipBreakdown()

    seniority = max(rules.seniority_points.get(e.seniority_level, 0.0) for e in leading)
    seniority = min(seniority, rules.leadership_seniority_max)
    years = sum(_entry_years(e, rules) for e in leading)
    stability = min(tier_points(rules.stability_tiers, years), rules.leadership_stability_max)
    return LeadershipBreakdown(
        seniority=seniority,
        stability=stability,
        total=min(seniority + stability, rules.leadership_max),
    )


def score_competence(profile: Profile, category: Category,
                     rules: RuleTable = DEFAULT_RULES) -> CompetenceBreakdown:
    education = score_education(profile.education, rules)
    raw_years, unique_years = experience_years(profile.experience, rules)
    experience_total = min(
        tier_points(rules.experience_total_tiers, unique_years), rules.experience_total_max
    )
    breakdown = CompetenceBreakdown(
        education=education,
        experience_total=experience_total,
        experience_relevant=score_experience_relevance(profile.experience, category, rules),
        experience_raw_years=raw_years,
        experience_unique_years=unique_years,
        experience_has_overlap=raw_years > unique_years,
        leadership=score_leadership(profile.experience, rules),
    )
    breakdown.total = competence_from_breakdown(breakdown, rules)
    return breakdown


def competence_from_breakdown(breakdown: CompetenceBreakdown,
                              rules: RuleTable = DEFAULT_RULES) -> float:
    total = (
        breakdown.education.total
        + breakdown.experience_total
        + breakdown.experience_relevant
        + breakdown.leadership.total
    )
    return clamp(total, 0.0, min(100.0, rules.competence_max))


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------

def penal_penalty(firm: int, pending: int, rules: RuleTable) -> float:
    """Firm sentences set the floor; each pending one adds until the cap."""
    if firm >= 2:
        penalty = rules.penal_multiple_firm
    elif firm == 1:
        penalty = rules.penal_single_firm
    else:
        penalty = 0.0
    penalty = min(penalty, rules.penal_max)
    if pending > 0 and penalty < rules.penal_max:
        penalty += min(pending * rules.penal_pending_each, rules.penal_max - penalty)
    return penalty


def civil_penalties(sentences: list[CivilSentence], rules: RuleTable) -> list[CivilPenalty]:
    """Per-type penalty with diminishing repeats and a per-type cap."""
    counts = Counter(s.type for s in sentences)
    penalties = []
    for civil_type in CivilType:
        count = counts.get(civil_type, 0)
        if not count:
            continue
        rule = rules.civil_penalties.get(civil_type) or rules.civil_penalties[CivilType.OTHER]
        uncapped = sum(
            rule.base * rules.civil_repeat_factor ** i for i in range(count)
        )
        penalties.append(CivilPenalty(
            type=civil_type,
            count=count,
            penalty=min(uncapped, rule.cap),
            capped=uncapped > rule.cap,
        ))
    return penalties


def score_integrity(profile: Profile, rules: RuleTable = DEFAULT_RULES) -> IntegrityBreakdown:
    firm = sum(1 for s in profile.penal_sentences if s.is_firm)
    pending = len(profile.penal_sentences) - firm

    per_type = civil_penalties(profile.civil_sentences, rules)
    civil_sum = sum(p.penalty for p in per_type)

    breakdown = IntegrityBreakdown(
        base=100.0,
        penal_penalty=penal_penalty(firm, pending, rules),
        civil_penalties=per_type,
        total_civil_penalty=min(civil_sum, rules.civil_max),
        civil_penalties_capped=civil_sum > rules.civil_max,
        resignation_penalty=tier_points(rules.resignation_tiers, profile.party_resignations),
    )
    breakdown.total = integrity_from_breakdown(breakdown)
    return breakdown


def integrity_from_breakdown(breakdown: IntegrityBreakdown) -> float:
    return clamp(
        breakdown.base
        - breakdown.penal_penalty
        - breakdown.total_civil_penalty
        - breakdown.resignation_penalty
    )


# ---------------------------------------------------------------------------
# Transparency and confidence
# ---------------------------------------------------------------------------

def score_transparency(profile: Profile, rules: RuleTable = DEFAULT_RULES) -> TransparencyBreakdown:
    breakdown = TransparencyBreakdown(
        completeness=round_half_up(
            profile.declaration_completeness / 100 * rules.transparency_completeness_points),
        consistency=round_half_up(
            profile.declaration_consistency / 100 * rules.transparency_consistency_points),
        assets_quality=round_half_up(
            profile.assets_quality / 100 * rules.transparency_assets_points),
    )
    breakdown.total = transparency_from_breakdown(breakdown)
    return breakdown


def transparency_from_breakdown(breakdown: TransparencyBreakdown) -> float:
    return clamp(breakdown.completeness + breakdown.consistency + breakdown.assets_quality)


def score_confidence(profile: Profile, rules: RuleTable = DEFAULT_RULES) -> ConfidenceBreakdown:
    breakdown = ConfidenceBreakdown(
        verification=round_half_up(
            profile.verification_level / 100 * rules.confidence_verification_points),
        coverage=round_half_up(
            profile.coverage_level / 100 * rules.confidence_coverage_points),
    )
    breakdown.total = confidence_from_breakdown(breakdown)
    return breakdown


def confidence_from_breakdown(breakdown: ConfidenceBreakdown) -> float:
    return clamp(breakdown.verification + breakdown.coverage)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def score(profile: Profile, category: Category, rules: RuleTable | None = None,
          plan_viability: float | None = None) -> PillarScores:
    """Compute all four pillars of a profile for the category being run for.

    ``plan_viability`` is scored upstream and only carried through; it takes
    part in the composite of distinguished categories.
    """
    rules = rules or DEFAULT_RULES
    competence = score_competence(profile, category, rules)
    integrity = score_integrity(profile, rules)
    transparency = score_transparency(profile, rules)
    confidence = score_confidence(profile, rules)
    return PillarScores(
        competence=competence.total,
        integrity=integrity.total,
        transparency=transparency.total,
        confidence=confidence.total,
        plan_viability=None if plan_viability is None else clamp(plan_viability),
        competence_breakdown=competence,
        integrity_breakdown=integrity,
        transparency_breakdown=transparency,
        confidence_breakdown=confidence,
    )


def pillars_from_breakdowns(scores: PillarScores,
                            rules: RuleTable | None = None) -> dict[Pillar, float]:
    """Re-derive every pillar from the sub-totals stored in its breakdown."""
    rules = rules or DEFAULT_RULES
    return {
        Pillar.COMPETENCE: competence_from_breakdown(scores.competence_breakdown, rules),
        Pillar.INTEGRITY: integrity_from_breakdown(scores.integrity_breakdown),
        Pillar.TRANSPARENCY: transparency_from_breakdown(scores.transparency_breakdown),
        Pillar.CONFIDENCE: confidence_from_breakdown(scores.confidence_breakdown),
        Pillar.PLAN_VIABILITY: scores.plan_viability or 0.0,
    }

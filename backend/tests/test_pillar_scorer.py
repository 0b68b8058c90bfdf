"""Tests for the four pillar scores and their breakdowns."""

import pytest

from models.schemas.profile import (
    CivilSentence,
    EducationDetail,
    Experience,
    PenalSentence,
    Profile,
)
from models.schemas.taxonomy import (
    Category,
    CivilType,
    EducationLevel,
    Pillar,
    RoleType,
    SeniorityLevel,
)
from services.pillar_scorer import (
    experience_years,
    penal_penalty,
    pillars_from_breakdowns,
    round_half_up,
    score,
    score_integrity,
)
from services.profile_builder import build_profile
from services.rule_table import DEFAULT_RULES, load_rule_table


def _job(start, end, role_type=RoleType.TECNICO_PROFESIONAL,
         seniority=SeniorityLevel.INDIVIDUAL_CONTRIBUTOR, leadership=False):
    return Experience(role="x", role_type=role_type, organization="y", start_year=start,
                      end_year=end, seniority_level=seniority, is_leadership=leadership)


def _penal(firm):
    return PenalSentence(description="x", is_firm=firm)


def _civil(civil_type):
    return CivilSentence(type=civil_type)


def test_round_half_up():
    assert round_half_up(17.5) == 18
    assert round_half_up(16.5) == 17
    assert round_half_up(24.0) == 24
    assert round_half_up(0.49) == 0


@pytest.mark.scenario
class TestReferenceProfiles:
    def test_empty_record(self, empty_record):
        scores = score(build_profile(empty_record), Category.DIPUTADO)
        assert scores.competence == 0
        assert scores.integrity == 100
        assert scores.transparency == 0
        assert scores.confidence == 50
        assert scores.plan_viability is None

    def test_well_documented_senator(self, full_record):
        scores = score(build_profile(full_record), Category.SENADOR)
        breakdown = scores.competence_breakdown
        assert breakdown.education.total == 21
        assert breakdown.experience_unique_years == 14
        assert breakdown.experience_total == 20
        assert breakdown.experience_relevant == 25
        assert breakdown.leadership.total == 20
        assert scores.competence == 86
        assert scores.integrity == 100
        assert scores.transparency == 94
        assert scores.confidence == 100

    def test_plan_viability_is_carried_and_clamped(self, full_record):
        profile = build_profile(full_record)
        assert score(profile, Category.PRESIDENTE, plan_viability=70).plan_viability == 70
        assert score(profile, Category.PRESIDENTE, plan_viability=130).plan_viability == 100


class TestCompetence:
    def test_overlapping_posts_count_once(self):
        jobs = [_job(2010, 2018), _job(2015, 2020)]
        assert experience_years(jobs, DEFAULT_RULES) == (13, 10)

        breakdown = score(Profile(experience=jobs), Category.SENADOR).competence_breakdown
        assert breakdown.experience_has_overlap
        assert breakdown.experience_raw_years == 13
        assert breakdown.experience_unique_years == 10
        assert breakdown.experience_total == 16

    def test_open_post_runs_to_reference_year(self):
        jobs = [_job(2018, 2024), _job(2020, None)]
        assert experience_years(jobs, DEFAULT_RULES) == (12, 8)

    def test_relevance_depends_on_category(self):
        jobs = [_job(2016, 2020, role_type=RoleType.INTERNACIONAL)]
        andean = score(Profile(experience=jobs), Category.PARLAMENTO_ANDINO)
        senate = score(Profile(experience=jobs), Category.SENADOR)
        assert andean.competence_breakdown.experience_relevant == 12
        assert senate.competence_breakdown.experience_relevant == pytest.approx(4.8)

    def test_relevance_caps_years_per_entry(self):
        jobs = [_job(1990, 2020, role_type=RoleType.ACADEMIA)]
        breakdown = score(Profile(experience=jobs), Category.PRESIDENTE).competence_breakdown
        assert breakdown.experience_relevant == 10

    def test_education_depth_is_capped(self):
        education = [EducationDetail(level=EducationLevel.DOCTORADO)] + [
            EducationDetail(level=EducationLevel.MAESTRIA) for _ in range(5)
        ]
        breakdown = score(Profile(education=education), Category.DIPUTADO).competence_breakdown
        assert breakdown.education.level == 22
        assert breakdown.education.depth == 8
        assert breakdown.education.total == 30

    def test_leadership(self):
        jobs = [_job(2010, 2013, seniority=SeniorityLevel.JEFATURA, leadership=True),
                _job(2013, 2015, seniority=SeniorityLevel.GERENCIA, leadership=True)]
        breakdown = score(Profile(experience=jobs), Category.DIPUTADO).competence_breakdown
        assert breakdown.leadership.seniority == 10
        assert breakdown.leadership.stability == 4
        assert breakdown.leadership.total == 14

    def test_more_education_never_lowers_competence(self):
        base = Profile(education=[EducationDetail(level=EducationLevel.SECUNDARIA_COMPLETA)])
        richer = Profile(education=base.education + [
            EducationDetail(level=EducationLevel.TITULO_PROFESIONAL)])
        assert score(richer, Category.DIPUTADO).competence >= score(base, Category.DIPUTADO).competence

    def test_bounded_under_extreme_profiles(self):
        profile = Profile(
            education=[EducationDetail(level=EducationLevel.DOCTORADO, verified=True, field="x")
                       for _ in range(20)],
            experience=[_job(1950, None, RoleType.ELECTIVO_ALTO, SeniorityLevel.DIRECCION, True)
                        for _ in range(20)],
        )
        assert score(profile, Category.PRESIDENTE).competence == 100


class TestIntegrity:
    @pytest.mark.parametrize("firm,pending,expected", [
        (0, 0, 0), (1, 0, 70), (2, 0, 85), (0, 1, 35), (0, 3, 85), (1, 1, 85), (5, 5, 85),
    ])
    def test_penal_tiers(self, firm, pending, expected):
        assert penal_penalty(firm, pending, DEFAULT_RULES) == expected

    def test_repeated_civil_type_is_capped(self):
        breakdown = score_integrity(Profile(civil_sentences=[
            _civil(CivilType.VIOLENCE), _civil(CivilType.VIOLENCE)]))
        violence = breakdown.civil_penalties[0]
        assert violence.count == 2
        assert violence.penalty == 70
        assert violence.capped
        assert breakdown.total == 30

    def test_civil_total_is_capped(self):
        breakdown = score_integrity(Profile(civil_sentences=[
            _civil(CivilType.VIOLENCE), _civil(CivilType.VIOLENCE), _civil(CivilType.ALIMONY)]))
        # 70 + 35 overflows the overall civil cap
        assert breakdown.total_civil_penalty == 85
        assert breakdown.civil_penalties_capped
        assert breakdown.total == 15

    def test_violence_weighs_more_than_labor(self):
        violence = score_integrity(Profile(civil_sentences=[_civil(CivilType.VIOLENCE)]))
        labor = score_integrity(Profile(civil_sentences=[_civil(CivilType.LABOR)]))
        assert violence.total < labor.total

    @pytest.mark.parametrize("resignations,expected", [(0, 0), (1, 5), (3, 10), (20, 15)])
    def test_resignation_tiers(self, resignations, expected):
        breakdown = score_integrity(Profile(party_resignations=resignations))
        assert breakdown.resignation_penalty == expected

    def test_never_below_zero(self):
        profile = Profile(
            penal_sentences=[_penal(True) for _ in range(50)],
            civil_sentences=[_civil(t) for t in CivilType],
            party_resignations=20,
        )
        assert score(profile, Category.SENADOR).integrity == 0

    def test_more_sentences_never_raise_integrity(self):
        clean = Profile()
        one = Profile(penal_sentences=[_penal(False)])
        two = Profile(penal_sentences=[_penal(False), _penal(True)])
        totals = [score_integrity(p).total for p in (clean, one, two)]
        assert totals == sorted(totals, reverse=True)

    def test_rule_override(self):
        rules = load_rule_table(penal_single_firm=60)
        assert score(Profile(penal_sentences=[_penal(True)]), Category.SENADOR,
                     rules).integrity == 40


class TestTransparencyAndConfidence:
    def test_half_points_round_up(self):
        profile = Profile(declaration_completeness=50, verification_level=75, coverage_level=33)
        scores = score(profile, Category.DIPUTADO)
        assert scores.transparency_breakdown.completeness == 18
        assert scores.transparency == 18
        assert scores.confidence_breakdown.verification == 38
        assert scores.confidence_breakdown.coverage == 17
        assert scores.confidence == 55

    def test_full_marks(self):
        profile = Profile(declaration_completeness=100, declaration_consistency=100,
                          assets_quality=100, verification_level=100, coverage_level=100)
        scores = score(profile, Category.DIPUTADO)
        assert scores.transparency == 100
        assert scores.confidence == 100


class TestBreakdowns:
    def test_pillars_rederive_from_breakdowns(self, repository):
        for candidacy in repository.candidacies():
            record = repository.get_person(candidacy.person_id).record
            scores = score(build_profile(record), candidacy.category,
                           plan_viability=candidacy.plan_viability)
            derived = pillars_from_breakdowns(scores)
            for pillar in (Pillar.COMPETENCE, Pillar.INTEGRITY,
                           Pillar.TRANSPARENCY, Pillar.CONFIDENCE):
                assert derived[pillar] == scores.pillar(pillar)

    def test_deterministic(self, full_record):
        first = score(build_profile(full_record), Category.SENADOR)
        second = score(build_profile(full_record), Category.SENADOR)
        assert first == second

    def test_missing_plan_viability_reads_as_zero(self):
        scores = score(Profile(), Category.PRESIDENTE)
        assert scores.pillar(Pillar.PLAN_VIABILITY) == 0

    def test_yaml_overrides_merge_nested_tables(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text(
            "scoring:\n"
            "  civil_penalties:\n"
            "    violence:\n"
            "      base: 40\n"
            "  reference_year: 2030\n",
            encoding="utf-8",
        )
        rules = load_rule_table(path)
        assert rules.civil_penalties[CivilType.VIOLENCE].base == 40
        assert rules.civil_penalties[CivilType.VIOLENCE].cap == 70
        assert rules.civil_penalties[CivilType.LABOR].base == 25
        assert rules.reference_year == 2030
        violence = score_integrity(Profile(civil_sentences=[_civil(CivilType.VIOLENCE)]), rules)
        assert violence.total == 60

"""Composite scores and ranking of a scored population."""

import logging
import math
from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from models.schemas.pillar_scores import PillarScores
from models.schemas.subject import RankedSubject, ScoredCandidacy
from models.schemas.taxonomy import Category, Pillar, weighted_pillars
from models.schemas.weights import WeightVector
from services.pillar_scorer import pillars_from_breakdowns
from services.rule_table import RuleTable
from services.weight_manager import DimensionMismatchError

logger = logging.getLogger(__name__)


class RankingFilters(BaseModel):
    category: Category | None = None
    region: str | None = None
    party: str | None = None
    min_confidence: float | None = Field(default=None, ge=0, le=100)
    only_clean: bool = False  # drop subjects carrying a top-severity flag


def _weights(weights: WeightVector | Mapping) -> dict[Pillar, float]:
    raw = weights.weights if isinstance(weights, WeightVector) else weights
    return {Pillar(p): float(w) for p, w in raw.items()}


def _weighted_sum(values: Mapping[Pillar, float], weights: dict[Pillar, float]) -> float:
    ordered = sorted(weights, key=list(Pillar).index)
    return math.fsum(weights[p] * values[p] for p in ordered)


def composite(scores: PillarScores, weights: WeightVector | Mapping) -> float:
    """Sum of weight times pillar over the vector's pillars."""
    w = _weights(weights)
    return _weighted_sum({p: scores.pillar(p) for p in w}, w)


def composite_from_breakdown(scores: PillarScores, weights: WeightVector | Mapping,
                             rules: RuleTable | None = None) -> float:
    """Composite recomputed from the breakdown sub-totals instead of the pillars."""
    w = _weights(weights)
    return _weighted_sum(pillars_from_breakdowns(scores, rules), w)


def matches(entry: ScoredCandidacy, filters: RankingFilters) -> bool:
    candidacy = entry.candidacy
    if filters.category is not None and candidacy.category != filters.category:
        return False
    if filters.region is not None and candidacy.region != filters.region:
        return False
    if filters.party is not None and candidacy.party != filters.party:
        return False
    if filters.min_confidence is not None and entry.scores.confidence < filters.min_confidence:
        return False
    if filters.only_clean and candidacy.has_red_flag:
        return False
    return True


def rank(population: Iterable[ScoredCandidacy], weights: WeightVector,
         filters: RankingFilters | None = None, limit: int | None = None,
         offset: int = 0) -> list[RankedSubject]:
    """Filter, then sort by composite descending with subject id as tie-break.

    Every surviving subject's category must weight the same pillars as the
    vector; mixing e.g. a presidential vector with legislative candidacies
    raises DimensionMismatchError.
    """
    filters = filters or RankingFilters()
    pillar_set = set(_weights(weights))

    scored = []
    for entry in population:
        if not matches(entry, filters):
            continue
        category = entry.candidacy.category
        if set(weighted_pillars(category)) != pillar_set:
            raise DimensionMismatchError(
                f"Weight vector pillars do not match category {category.value}"
            )
        scored.append((composite(entry.scores, weights), entry))

    scored.sort(key=lambda item: (-item[0], item[1].candidacy.candidacy_id))

    end = None if limit is None else offset + limit
    results = []
    for index, (value, entry) in enumerate(scored[offset:end], start=offset + 1):
        candidacy = entry.candidacy
        results.append(RankedSubject(
            position=index,
            subject_id=candidacy.candidacy_id,
            person_id=candidacy.person_id,
            category=candidacy.category,
            region=candidacy.region,
            party=candidacy.party,
            composite=value,
            scores=entry.scores,
        ))
    logger.debug("Ranked %d of %d filtered subjects", len(results), len(scored))
    return results

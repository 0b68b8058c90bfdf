import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_repository, get_rules, get_store, get_weight_manager
from config import settings
from models.requests import (
    AdjustWeightRequest,
    CompositeRequest,
    RankingRequest,
    RecomputeRequest,
    SelectWeightsRequest,
)
from models.responses import (
    CompositeResponse,
    RankingResponse,
    RecomputeSummary,
    SubjectScoresResponse,
)
from models.schemas.subject import ScoredCandidacy
from models.schemas.taxonomy import Category
from models.schemas.weights import CategoryWeightTable, WeightVector
from services import ranking, recompute
from services.repository import SubjectRepository
from services.rule_table import RuleTable
from services.score_store import ScoreStore
from services.weight_manager import WeightConfigurationError, WeightManager

logger = logging.getLogger(__name__)

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


def _scored(subject_id: str, repository: SubjectRepository, store: ScoreStore,
            rules: RuleTable):
    """Stored score record, computing it first if the subject was never scored."""
    record = store.get(subject_id)
    if record is None:
        recompute.recompute_subject(subject_id, repository, store, rules)
        record = store.get(subject_id)
    return record


@router.get("/health")
async def health(repository: SubjectRepository = Depends(get_repository)):
    return {
        "status": "ok",
        "subjects": len(repository),
        "admin_enabled": bool(settings.admin_token),
    }


@router.get("/weights/{category}/presets", response_model=CategoryWeightTable)
async def weight_presets(category: Category, manager: WeightManager = Depends(get_weight_manager)):
    return manager.table(category)


@router.post("/weights/select", response_model=WeightVector)
async def select_weights(body: SelectWeightsRequest,
                         manager: WeightManager = Depends(get_weight_manager)):
    try:
        return manager.select_weights(body.category, body.mode, body.weights)
    except WeightConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/weights/adjust", response_model=WeightVector)
async def adjust_weight(body: AdjustWeightRequest,
                        manager: WeightManager = Depends(get_weight_manager)):
    try:
        return manager.set_weight(body.category, body.weights, body.pillar, body.value)
    except WeightConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/ranking", response_model=RankingResponse)
@limiter.limit(settings.ranking_rate_limit)
def rank_subjects(
    request: Request,
    body: RankingRequest,
    repository: SubjectRepository = Depends(get_repository),
    store: ScoreStore = Depends(get_store),
    manager: WeightManager = Depends(get_weight_manager),
    rules: RuleTable = Depends(get_rules),
):
    try:
        weights = manager.select_weights(body.category, body.mode, body.weights)
    except WeightConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    filters = ranking.RankingFilters(
        category=body.category,
        region=body.region,
        party=body.party,
        min_confidence=body.min_confidence,
        only_clean=body.only_clean,
    )
    population = []
    for candidacy in repository.candidacies(body.category):
        record = _scored(candidacy.candidacy_id, repository, store, rules)
        population.append(ScoredCandidacy(candidacy=candidacy, scores=record.scores))

    try:
        results = ranking.rank(population, weights, filters, limit=body.limit, offset=body.offset)
    except WeightConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    total = sum(1 for entry in population if ranking.matches(entry, filters))
    return RankingResponse(weights=weights, total=total, results=results)


@router.get("/subjects/{subject_id}/scores", response_model=SubjectScoresResponse)
def subject_scores(
    subject_id: str,
    repository: SubjectRepository = Depends(get_repository),
    store: ScoreStore = Depends(get_store),
    rules: RuleTable = Depends(get_rules),
):
    if not repository.has_candidacy(subject_id):
        raise HTTPException(status_code=404, detail=f"Unknown subject: {subject_id}")
    candidacy = repository.get_candidacy(subject_id)
    record = _scored(subject_id, repository, store, rules)
    return SubjectScoresResponse(
        subject_id=subject_id,
        person_id=candidacy.person_id,
        category=record.category,
        revision=record.revision,
        scores=record.scores,
    )


@router.post("/subjects/{subject_id}/composite", response_model=CompositeResponse)
@limiter.limit(settings.composite_rate_limit)
def subject_composite(
    request: Request,
    subject_id: str,
    body: CompositeRequest,
    repository: SubjectRepository = Depends(get_repository),
    store: ScoreStore = Depends(get_store),
    manager: WeightManager = Depends(get_weight_manager),
    rules: RuleTable = Depends(get_rules),
):
    if not repository.has_candidacy(subject_id):
        raise HTTPException(status_code=404, detail=f"Unknown subject: {subject_id}")
    candidacy = repository.get_candidacy(subject_id)
    try:
        weights = manager.select_weights(candidacy.category, body.mode, body.weights)
    except WeightConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    _scored(subject_id, repository, store, rules)
    return CompositeResponse(
        subject_id=subject_id,
        weights=weights,
        composite=store.composite(subject_id, weights),
    )


@router.post("/admin/recompute", response_model=RecomputeSummary)
def admin_recompute(
    body: RecomputeRequest,
    x_admin_token: str | None = Header(None),
    repository: SubjectRepository = Depends(get_repository),
    store: ScoreStore = Depends(get_store),
    rules: RuleTable = Depends(get_rules),
):
    if not settings.admin_token or not x_admin_token or not secrets.compare_digest(
        x_admin_token, settings.admin_token
    ):
        raise HTTPException(status_code=401, detail="Invalid admin token")
    try:
        return recompute.recompute(
            repository, store, subject_id=body.subject_id, rules=rules,
            workers=settings.recompute_workers,
        )
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown subject: {body.subject_id}")

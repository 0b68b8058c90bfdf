from pydantic import BaseModel

from models.schemas.pillar_scores import PillarScores
from models.schemas.subject import RankedSubject
from models.schemas.taxonomy import Category
from models.schemas.weights import WeightVector


class RecomputeSummary(BaseModel):
    processed: int = 0
    updated: int = 0
    errored: int = 0


class SubjectScoresResponse(BaseModel):
    subject_id: str
    person_id: str
    category: Category
    revision: int = 0
    scores: PillarScores


class CompositeResponse(BaseModel):
    subject_id: str
    weights: WeightVector
    composite: float = 0.0


class RankingResponse(BaseModel):
    weights: WeightVector
    total: int = 0  # filtered population size before pagination
    results: list[RankedSubject] = []

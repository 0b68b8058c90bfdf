"""Person aggregate and its per-category candidacy projections."""

from pydantic import BaseModel, Field

from models.schemas.pillar_scores import PillarScores
from models.schemas.raw_record import RawRecord
from models.schemas.taxonomy import Category


class Person(BaseModel):
    """One individual. Sentences and resignations live here exactly once."""

    person_id: str
    full_name: str = ""
    record: RawRecord = RawRecord()


class Candidacy(BaseModel):
    """A person's run for one category; the unit that is scored and ranked."""

    candidacy_id: str
    person_id: str
    category: Category
    region: str | None = None  # district slug
    party: str | None = None  # party id
    plan_viability: float | None = Field(default=None, ge=0, le=100)
    has_red_flag: bool = False  # top-severity flag computed upstream


class ScoreRecord(BaseModel):
    """Persisted scores of one candidacy."""

    subject_id: str
    category: Category
    scores: PillarScores
    revision: int = 0


class ScoredCandidacy(BaseModel):
    """Ranking input: a candidacy with its current pillar scores."""

    candidacy: Candidacy
    scores: PillarScores


class RankedSubject(BaseModel):
    position: int  # 1-based, over the whole filtered population
    subject_id: str
    person_id: str
    category: Category
    region: str | None = None
    party: str | None = None
    composite: float
    scores: PillarScores

"""Pydantic contracts shared across the scoring engine."""

from models.schemas.raw_record import RawRecord
from models.schemas.profile import Profile
from models.schemas.pillar_scores import PillarScores
from models.schemas.weights import CategoryWeightTable, PillarBounds, WeightVector
from models.schemas.subject import Candidacy, Person, ScoreRecord

__all__ = [
    "RawRecord",
    "Profile",
    "PillarScores",
    "CategoryWeightTable",
    "PillarBounds",
    "WeightVector",
    "Candidacy",
    "Person",
    "ScoreRecord",
]

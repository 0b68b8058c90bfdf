from pydantic import BaseModel, Field

from models.schemas.taxonomy import Category, Pillar, WeightMode


class SelectWeightsRequest(BaseModel):
    category: Category
    mode: WeightMode = WeightMode.BALANCED
    weights: dict[Pillar, float] | None = Field(None, description="Required when mode is custom")


class AdjustWeightRequest(BaseModel):
    category: Category
    weights: dict[Pillar, float] = Field(..., description="Current weight vector")
    pillar: Pillar
    value: float


class CompositeRequest(BaseModel):
    mode: WeightMode = WeightMode.BALANCED
    weights: dict[Pillar, float] | None = None


class RankingRequest(BaseModel):
    category: Category
    mode: WeightMode = WeightMode.BALANCED
    weights: dict[Pillar, float] | None = None
    region: str | None = None
    party: str | None = None
    min_confidence: float | None = Field(None, ge=0, le=100)
    only_clean: bool = False
    limit: int = Field(50, ge=1, le=500)
    offset: int = Field(0, ge=0)


class RecomputeRequest(BaseModel):
    subject_id: str | None = Field(None, description="Recompute a single subject; all when omitted")

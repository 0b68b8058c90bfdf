"""Weight vectors, per-pillar bounds and preset tables."""

from pydantic import BaseModel

from models.schemas.taxonomy import Category, Pillar, PresetName


class PillarBounds(BaseModel):
    min: float
    max: float


class CategoryWeightTable(BaseModel):
    """Bounds and presets for the pillars weighted in one category."""

    pillars: list[Pillar]
    bounds: dict[Pillar, PillarBounds]
    presets: dict[PresetName, dict[Pillar, float]]


class WeightVector(BaseModel):
    category: Category
    weights: dict[Pillar, float]
    preset: PresetName | None = None  # None for custom vectors

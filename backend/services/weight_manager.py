"""Weight presets and bounded, sum-to-one weight vector editing.

Every vector handed out by ``WeightManager`` holds the pillars of its
category, each within its bounds, summing to 1 within ``SUM_TOLERANCE``.
"""

import logging
import math
from collections.abc import Mapping
from pathlib import Path

from models.schemas.taxonomy import (
    Category,
    DISTINGUISHED_PILLARS,
    GENERAL_PILLARS,
    Pillar,
    PresetName,
    WeightMode,
    weighted_pillars,
)
from models.schemas.weights import CategoryWeightTable, PillarBounds, WeightVector
from services.rule_table import read_yaml

logger = logging.getLogger(__name__)

SUM_TOLERANCE = 1e-9
_EPS = 1e-12


class WeightConfigurationError(ValueError):
    """A weight vector or bounds table cannot be used as given."""


class InfeasibleBoundsError(WeightConfigurationError):
    """The bounds admit no vector summing to 1."""


class DimensionMismatchError(WeightConfigurationError):
    """A vector's pillars differ from those of its category."""


# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------

GENERAL_TABLE = CategoryWeightTable(
    pillars=list(GENERAL_PILLARS),
    bounds={
        Pillar.COMPETENCE: PillarBounds(min=0.20, max=0.60),
        Pillar.INTEGRITY: PillarBounds(min=0.20, max=0.60),
        Pillar.TRANSPARENCY: PillarBounds(min=0.05, max=0.20),
    },
    presets={
        PresetName.BALANCED: {
            Pillar.COMPETENCE: 0.45, Pillar.INTEGRITY: 0.45, Pillar.TRANSPARENCY: 0.10,
        },
        PresetName.MERIT: {
            Pillar.COMPETENCE: 0.60, Pillar.INTEGRITY: 0.30, Pillar.TRANSPARENCY: 0.10,
        },
        PresetName.INTEGRITY: {
            Pillar.COMPETENCE: 0.30, Pillar.INTEGRITY: 0.60, Pillar.TRANSPARENCY: 0.10,
        },
    },
)

DISTINGUISHED_TABLE = CategoryWeightTable(
    pillars=list(DISTINGUISHED_PILLARS),
    bounds={
        Pillar.COMPETENCE: PillarBounds(min=0.15, max=0.50),
        Pillar.INTEGRITY: PillarBounds(min=0.15, max=0.50),
        Pillar.TRANSPARENCY: PillarBounds(min=0.05, max=0.20),
        Pillar.PLAN_VIABILITY: PillarBounds(min=0.10, max=0.30),
    },
    presets={
        PresetName.BALANCED: {
            Pillar.COMPETENCE: 0.35, Pillar.INTEGRITY: 0.35,
            Pillar.TRANSPARENCY: 0.10, Pillar.PLAN_VIABILITY: 0.20,
        },
        PresetName.MERIT: {
            Pillar.COMPETENCE: 0.45, Pillar.INTEGRITY: 0.25,
            Pillar.TRANSPARENCY: 0.10, Pillar.PLAN_VIABILITY: 0.20,
        },
        PresetName.INTEGRITY: {
            Pillar.COMPETENCE: 0.25, Pillar.INTEGRITY: 0.45,
            Pillar.TRANSPARENCY: 0.10, Pillar.PLAN_VIABILITY: 0.20,
        },
    },
)


def default_bounds_table() -> dict[Category, CategoryWeightTable]:
    """Bounds table keyed by category; distinguished categories get plan viability."""
    return {
        category: (
            DISTINGUISHED_TABLE if weighted_pillars(category) == DISTINGUISHED_PILLARS
            else GENERAL_TABLE
        ).model_copy(deep=True)
        for category in Category
    }


def load_bounds_table(path: str | Path | None = None) -> dict[Category, CategoryWeightTable]:
    """Default bounds table with per-category tables from the ``weights`` YAML section."""
    tables = default_bounds_table()
    if not path:
        return tables
    overrides = read_yaml(path).get("weights") or {}
    for category_name, raw in overrides.items():
        category = Category(category_name)
        merged = tables[category].model_dump(mode="json")
        merged.update(raw or {})
        tables[category] = CategoryWeightTable.model_validate(merged)
    logger.info("Loaded weight overrides for %d categories from %s", len(overrides), path)
    return tables


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_feasible(table: CategoryWeightTable) -> None:
    """Raise InfeasibleBoundsError unless some bounded vector sums to 1."""
    missing = [p.value for p in table.pillars if p not in table.bounds]
    if missing:
        raise InfeasibleBoundsError(f"No bounds for pillars: {', '.join(missing)}")
    for pillar in table.pillars:
        b = table.bounds[pillar]
        if not (math.isfinite(b.min) and math.isfinite(b.max)):
            raise InfeasibleBoundsError(f"Non-finite bounds for {pillar.value}")
        if b.min < 0 or b.min > b.max:
            raise InfeasibleBoundsError(
                f"Bounds for {pillar.value} are empty: [{b.min}, {b.max}]"
            )
    sum_min = math.fsum(table.bounds[p].min for p in table.pillars)
    sum_max = math.fsum(table.bounds[p].max for p in table.pillars)
    if sum_min > 1 + SUM_TOLERANCE:
        raise InfeasibleBoundsError(f"Sum of minimum weights is {sum_min:.4f} > 1")
    if sum_max < 1 - SUM_TOLERANCE:
        raise InfeasibleBoundsError(f"Sum of maximum weights is {sum_max:.4f} < 1")


def is_valid(table: CategoryWeightTable, weights: Mapping[Pillar, float]) -> bool:
    if set(weights) != set(table.pillars):
        return False
    if abs(math.fsum(weights.values()) - 1.0) >= SUM_TOLERANCE:
        return False
    return all(
        table.bounds[p].min - SUM_TOLERANCE <= w <= table.bounds[p].max + SUM_TOLERANCE
        for p, w in weights.items()
    )


def _coerce(table: CategoryWeightTable, category: Category,
            weights: Mapping | WeightVector) -> dict[Pillar, float]:
    """Typed copy of ``weights`` in table order; rejects wrong pillar sets."""
    if isinstance(weights, WeightVector):
        if weights.category != category and set(weights.weights) != set(table.pillars):
            raise DimensionMismatchError(
                f"Vector for {weights.category.value} cannot be used for {category.value}"
            )
        weights = weights.weights
    if not isinstance(weights, Mapping):
        raise WeightConfigurationError("Weights must be a mapping of pillar to weight")

    typed: dict[Pillar, float] = {}
    for key, value in weights.items():
        try:
            pillar = Pillar(key)
        except ValueError:
            raise DimensionMismatchError(f"Unknown pillar: {key}") from None
        typed[pillar] = _finite(value, pillar)

    expected = set(table.pillars)
    if set(typed) != expected:
        raise DimensionMismatchError(
            f"{category.value} expects pillars {sorted(p.value for p in expected)}, "
            f"got {sorted(p.value for p in typed)}"
        )
    return {p: typed[p] for p in table.pillars}


def _finite(value, pillar: Pillar) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise WeightConfigurationError(f"Weight for {pillar.value} is not a number") from None
    if not math.isfinite(number):
        raise WeightConfigurationError(f"Weight for {pillar.value} is not finite")
    return number


def _clamp(value: float, bounds: PillarBounds) -> float:
    return max(bounds.min, min(bounds.max, value))


# ---------------------------------------------------------------------------
# Water-filling
# ---------------------------------------------------------------------------

def _settle(values: dict[Pillar, float], bounds: dict[Pillar, PillarBounds],
            target: float) -> dict[Pillar, float]:
    """Move ``values`` towards summing to ``target`` without leaving bounds.

    Each pass spreads the gap over the pillars with slack in the needed
    direction, in proportion to that slack. A pass either closes the gap or
    pins every free pillar to a bound, so len(values) + 1 passes suffice.
    Whatever floating residue remains is split equally, then folded into the
    first pillar that can absorb it.
    """
    values = dict(values)
    order = list(values)

    for _ in range(len(order) + 1):
        gap = target - math.fsum(values.values())
        if abs(gap) <= _EPS:
            break
        if gap > 0:
            slack = {p: bounds[p].max - values[p] for p in order}
        else:
            slack = {p: values[p] - bounds[p].min for p in order}
        free = [p for p in order if slack[p] > _EPS]
        if not free:
            break
        total_slack = math.fsum(slack[p] for p in free)
        if total_slack <= abs(gap):
            for p in free:
                values[p] = bounds[p].max if gap > 0 else bounds[p].min
            continue
        for p in free:
            values[p] += gap * slack[p] / total_slack
            values[p] = _clamp(values[p], bounds[p])

    gap = target - math.fsum(values.values())
    if abs(gap) > 0:
        movable = [
            p for p in order
            if (gap > 0 and values[p] < bounds[p].max) or (gap < 0 and values[p] > bounds[p].min)
        ]
        if movable:
            share = gap / len(movable)
            for p in movable:
                values[p] = _clamp(values[p] + share, bounds[p])
        gap = target - math.fsum(values.values())
        for p in order:
            candidate = values[p] + gap
            if bounds[p].min <= candidate <= bounds[p].max:
                values[p] = candidate
                break
    return values


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------

class WeightManager:
    """Owns the bounds table and hands out validated weight vectors."""

    def __init__(self, tables: dict[Category, CategoryWeightTable] | None = None):
        self._tables = tables if tables is not None else default_bounds_table()
        for category, table in self._tables.items():
            check_feasible(table)
            for name, preset in table.presets.items():
                if not is_valid(table, preset):
                    raise InfeasibleBoundsError(
                        f"Preset {name.value} for {category.value} violates its bounds"
                    )

    def table(self, category: Category) -> CategoryWeightTable:
        try:
            return self._tables[Category(category)]
        except (KeyError, ValueError):
            raise WeightConfigurationError(f"No weight table for category: {category}") from None

    def apply_preset(self, category: Category, name: PresetName | str) -> WeightVector:
        category = Category(category)
        table = self.table(category)
        try:
            preset_name = PresetName(name)
            weights = table.presets[preset_name]
        except (KeyError, ValueError):
            raise WeightConfigurationError(f"Unknown preset: {name}") from None
        return WeightVector(category=category, weights=dict(weights), preset=preset_name)

    def set_weight(self, category: Category, current: Mapping | WeightVector,
                   pillar: Pillar | str, value: float) -> WeightVector:
        """Set one pillar's weight and redistribute the rest proportionally.

        The edited pillar is clamped to its own bounds and to the range the
        other pillars' bounds can still balance. The residual is shared by the
        other pillars in proportion to their current weights, clamped, then
        settled until the vector sums to 1.
        """
        category = Category(category)
        table = self.table(category)
        check_feasible(table)
        weights = _coerce(table, category, current)
        try:
            pillar = Pillar(pillar)
        except ValueError:
            raise DimensionMismatchError(f"Unknown pillar: {pillar}") from None
        if pillar not in weights:
            raise DimensionMismatchError(f"{category.value} has no {pillar.value} weight")
        value = _finite(value, pillar)

        others = [p for p in table.pillars if p != pillar]
        low = max(table.bounds[pillar].min, 1 - math.fsum(table.bounds[p].max for p in others))
        high = min(table.bounds[pillar].max, 1 - math.fsum(table.bounds[p].min for p in others))
        value = max(low, min(high, value))

        residual = 1.0 - value
        current_sum = math.fsum(weights[p] for p in others)
        redistributed: dict[Pillar, float] = {}
        for p in others:
            if current_sum > 0:
                share = residual * weights[p] / current_sum
            else:
                share = residual / len(others)
            redistributed[p] = _clamp(share, table.bounds[p])
        settled = _settle(redistributed, table.bounds, residual)

        result = {p: value if p == pillar else settled[p] for p in table.pillars}
        return self._finish(table, category, result)

    def normalize(self, category: Category, weights: Mapping | WeightVector) -> WeightVector:
        """Project a user-supplied vector onto the bounded simplex.

        Each weight is clamped to its bounds, then the surplus or deficit is
        settled across the pillars with slack.
        """
        category = Category(category)
        table = self.table(category)
        check_feasible(table)
        typed = _coerce(table, category, weights)
        clamped = {p: _clamp(w, table.bounds[p]) for p, w in typed.items()}
        settled = _settle(clamped, table.bounds, 1.0)
        return self._finish(table, category, settled)

    def select_weights(self, category: Category, mode: WeightMode | str,
                       custom: Mapping | WeightVector | None = None) -> WeightVector:
        """Preset lookup, or validation of a custom vector."""
        try:
            mode = WeightMode(mode)
        except ValueError:
            raise WeightConfigurationError(f"Unknown weight mode: {mode}") from None
        if mode is WeightMode.CUSTOM:
            if custom is None:
                raise WeightConfigurationError("Custom mode requires a weight vector")
            return self.normalize(category, custom)
        return self.apply_preset(category, mode.value)

    @staticmethod
    def _finish(table: CategoryWeightTable, category: Category,
                weights: dict[Pillar, float]) -> WeightVector:
        if not is_valid(table, weights):
            raise InfeasibleBoundsError(
                f"Could not settle a bounded vector for {category.value}: {weights}"
            )
        return WeightVector(category=category, weights=weights)

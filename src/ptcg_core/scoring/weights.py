"""Category weight profiles for the overall score.

A profile is chosen once from the already computed category scores; the
category scores themselves never depend on the profile.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from ..data.models.responses import BALANCED_WEIGHTS, CategoryScores, WeightProfileName

WEIGHT_TOLERANCE = 0.001

# Thresholds that switch the profile
AGGRO_POWER = 80
AGGRO_SPEED = 80
CONTROL_CONSISTENCY = 80
CONTROL_VERSATILITY = 70


@dataclass(frozen=True)
class WeightProfile:
    """Weights applied to the five category scores; they sum to 1."""

    name: WeightProfileName
    consistency: float
    power: float
    speed: float
    versatility: float
    meta: float

    @property
    def total(self) -> float:
        return self.consistency + self.power + self.speed + self.versatility + self.meta

    def as_scores(self) -> CategoryScores:
        values = asdict(self)
        values.pop("name")
        return CategoryScores(**values)

    def apply(self, categories: CategoryScores) -> float:
        return (
            categories.consistency * self.consistency
            + categories.power * self.power
            + categories.speed * self.speed
            + categories.versatility * self.versatility
            + categories.meta * self.meta
        )


BALANCED = WeightProfile("balanced", **BALANCED_WEIGHTS.model_dump())
AGGRO = WeightProfile("aggro", consistency=0.20, power=0.25, speed=0.30, versatility=0.10, meta=0.15)
CONTROL = WeightProfile("control", consistency=0.30, power=0.15, speed=0.10, versatility=0.25, meta=0.20)

PROFILES: dict[str, WeightProfile] = {profile.name: profile for profile in (BALANCED, AGGRO, CONTROL)}


def select_weight_profile(categories: CategoryScores) -> WeightProfile:
    """Pick the weight profile for a set of category scores."""
    if categories.power >= AGGRO_POWER and categories.speed >= AGGRO_SPEED:
        return AGGRO
    if categories.consistency >= CONTROL_CONSISTENCY and categories.versatility >= CONTROL_VERSATILITY:
        return CONTROL
    return BALANCED

"""Food events and their effect on alcohol absorption.

Food in the stomach slows absorption. Only the most recently eaten food
counts: its effect rises linearly from none (factor 1.0) to the food's
absorption factor over a short rise window, then fades linearly back to
1.0 at the 4-hour horizon. Heavier food takes longer to reach full effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from bacchus.config import (
    FOOD_EFFECT_HOURS,
    HEAVY_FOOD_FACTOR,
    HEAVY_FOOD_HOURS_TO_PEAK,
    LIGHT_FOOD_HOURS_TO_PEAK,
)
from bacchus.errors import InvalidInput
from bacchus.validation import hours_between, parse_timestamp, to_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoodEvent:
    """A logged food. Lower absorption_factor means stronger slowing."""

    absorption_factor: float
    consumed_at: datetime
    name: Optional[str] = None

    def __post_init__(self):
        factor = to_float(self.absorption_factor, "absorption_factor")
        if not 0 < factor <= 1:
            raise InvalidInput("absorption_factor must be in (0, 1]")
        object.__setattr__(self, "absorption_factor", factor)
        object.__setattr__(self, "consumed_at", parse_timestamp(self.consumed_at, "consumed_at"))

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "absorption_factor": self.absorption_factor,
            "consumed_at": self.consumed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "FoodEvent":
        if not isinstance(raw, dict):
            raise InvalidInput("food must be an object")
        return cls(
            absorption_factor=raw.get("absorption_factor"),
            consumed_at=raw.get("consumed_at"),
            name=raw.get("name"),
        )


def hours_to_peak(absorption_factor: float) -> float:
    if absorption_factor < HEAVY_FOOD_FACTOR:
        return HEAVY_FOOD_HOURS_TO_PEAK
    return LIGHT_FOOD_HOURS_TO_PEAK


def _most_recent(foods: Iterable[FoodEvent], at_time: datetime) -> Optional[FoodEvent]:
    latest = None
    for food in foods:
        if food.consumed_at > at_time:
            continue
        # Ties on consumed_at keep the first logged food.
        if latest is None or food.consumed_at > latest.consumed_at:
            latest = food
    return latest


def food_factor(foods: Iterable[FoodEvent], at_time: datetime) -> float:
    """Absorption multiplier in (0, 1] at ``at_time``."""
    food = _most_recent(foods, at_time)
    if food is None:
        return 1.0

    since = hours_between(food.consumed_at, at_time)
    if since > FOOD_EFFECT_HOURS:
        return 1.0

    strength = 1.0 - food.absorption_factor
    peak_at = hours_to_peak(food.absorption_factor)
    if since < peak_at:
        # Rising: food is starting to take effect.
        factor = 1.0 - strength * (since / peak_at)
    else:
        # Falling: effect wears off toward the horizon.
        progress = min(1.0, (since - peak_at) / (FOOD_EFFECT_HOURS - peak_at))
        factor = food.absorption_factor + strength * progress
    logger.debug("food factor %.3f at %.2fh after %s", factor, since, food.name or "food")
    return factor


FOOD_PRESETS = {
    "snack": ("Snack", 0.9),
    "light_meal": ("Light meal", 0.8),
    "full_meal": ("Full meal", 0.65),
    "heavy_meal": ("Heavy meal", 0.5),
}


def food_from_preset(key: str, consumed_at) -> FoodEvent:
    if key not in FOOD_PRESETS:
        raise InvalidInput(f"Unknown food preset: {key!r}")
    name, factor = FOOD_PRESETS[key]
    return FoodEvent(factor, consumed_at, name=name)


def list_food_presets() -> List[dict]:
    return [
        {"key": key, "name": name, "absorption_factor": factor}
        for key, (name, factor) in FOOD_PRESETS.items()
    ]

"""Drink events, presets and alcohol content helpers.

grams = volume_ml * (alcohol_percentage / 100) * 0.789
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from bacchus.config import ETHANOL_DENSITY
from bacchus.errors import InvalidInput
from bacchus.validation import parse_timestamp, to_float


def _check_volume(volume_ml) -> float:
    volume = to_float(volume_ml, "volume_ml")
    if volume <= 0:
        raise InvalidInput("volume_ml must be > 0")
    return volume


def _check_percentage(alcohol_percentage) -> float:
    pct = to_float(alcohol_percentage, "alcohol_percentage")
    if not 0 < pct <= 100:
        raise InvalidInput("alcohol_percentage must be in (0, 100]")
    return pct


def alcohol_grams(volume_ml: float, alcohol_percentage: float) -> float:
    """Convert millilitres and ABV percent (5 for 5%) to grams of ethanol."""
    volume = _check_volume(volume_ml)
    pct = _check_percentage(alcohol_percentage)
    return volume * (pct / 100.0) * ETHANOL_DENSITY


@dataclass(frozen=True)
class DrinkEvent:
    """A logged drink. Amend by deleting and re-adding."""

    volume_ml: float
    alcohol_percentage: float
    consumed_at: datetime
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "volume_ml", _check_volume(self.volume_ml))
        object.__setattr__(self, "alcohol_percentage", _check_percentage(self.alcohol_percentage))
        object.__setattr__(self, "consumed_at", parse_timestamp(self.consumed_at, "consumed_at"))

    @property
    def alcohol_grams(self) -> float:
        return alcohol_grams(self.volume_ml, self.alcohol_percentage)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "volume_ml": self.volume_ml,
            "alcohol_percentage": self.alcohol_percentage,
            "consumed_at": self.consumed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "DrinkEvent":
        if not isinstance(raw, dict):
            raise InvalidInput("drink must be an object")
        return cls(
            volume_ml=raw.get("volume_ml"),
            alcohol_percentage=raw.get("alcohol_percentage"),
            consumed_at=raw.get("consumed_at"),
            name=raw.get("name"),
        )


@dataclass
class DrinkPreset:
    """A drink category with per-size serving volume and ABV."""

    key: str
    name: str
    sizes: Dict[str, tuple]  # size -> (volume_ml, alcohol_percentage)


DRINK_PRESETS = {
    "beer": DrinkPreset("beer", "Beer", {
        "small": (250, 4.5), "medium": (330, 5.0), "large": (500, 5.5),
    }),
    "wine": DrinkPreset("wine", "Wine", {
        "small": (125, 11.5), "medium": (150, 12.0), "large": (250, 12.5),
    }),
    "spirits": DrinkPreset("spirits", "Spirits", {
        "small": (30, 38.0), "medium": (40, 40.0), "large": (60, 42.0),
    }),
    "cocktail": DrinkPreset("cocktail", "Cocktail", {
        "small": (150, 10.0), "medium": (200, 12.5), "large": (300, 15.0),
    }),
}
DEFAULT_SIZE = "medium"


def drink_from_preset(key: str, consumed_at, size: str = DEFAULT_SIZE) -> DrinkEvent:
    preset = DRINK_PRESETS.get(key)
    if preset is None:
        raise InvalidInput(f"Unknown drink preset: {key!r}")
    if size not in preset.sizes:
        raise InvalidInput(f"Unknown size {size!r} for {key}")
    volume, pct = preset.sizes[size]
    return DrinkEvent(volume, pct, consumed_at, name=preset.name)


def list_drink_presets() -> List[dict]:
    """Presets for UI pickers."""
    return [
        {
            "key": p.key,
            "name": p.name,
            "sizes": {
                size: {"volume_ml": v, "alcohol_percentage": pct}
                for size, (v, pct) in p.sizes.items()
            },
        }
        for p in DRINK_PRESETS.values()
    ]

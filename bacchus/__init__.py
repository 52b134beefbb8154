"""
Bacchus: Widmark-based BAC estimation from logged drinks and food.
Use from project root: python -m bacchus.main
"""

from bacchus.calculations import (
    DangerLevel,
    classify_danger,
    dose_contribution,
    hours_to_legal,
    hours_to_zero,
    hours_until_below,
    peak_bac,
    sober_at,
    time_to_legal_limit,
    time_to_threshold,
    time_to_zero,
    total_bac,
)
from bacchus.config import DEFAULT_ELIMINATION_RATE
from bacchus.drinks import DrinkEvent, alcohol_grams
from bacchus.errors import BACError, InvalidInput
from bacchus.food import FoodEvent, food_factor
from bacchus.graph import BACSample, sample_series
from bacchus.profile import DrinkingFrequency, Gender, Profile, elimination_rate
from bacchus.session import Session

compute_bac = total_bac


def compute_time_to_legal(bac: float, rate: float = DEFAULT_ELIMINATION_RATE) -> float:
    return time_to_legal_limit(bac, rate)


def compute_time_to_zero(bac: float, rate: float = DEFAULT_ELIMINATION_RATE) -> float:
    return time_to_zero(bac, rate)


__all__ = [
    "BACError",
    "BACSample",
    "DangerLevel",
    "DrinkEvent",
    "DrinkingFrequency",
    "FoodEvent",
    "Gender",
    "InvalidInput",
    "Profile",
    "Session",
    "alcohol_grams",
    "classify_danger",
    "compute_bac",
    "compute_time_to_legal",
    "compute_time_to_zero",
    "dose_contribution",
    "elimination_rate",
    "food_factor",
    "hours_to_legal",
    "hours_to_zero",
    "hours_until_below",
    "peak_bac",
    "sample_series",
    "sober_at",
    "time_to_threshold",
    "total_bac",
]

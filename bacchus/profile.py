"""User profile and the elimination rate provider."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from bacchus.config import (
    DEFAULT_DRINKING_FREQUENCY,
    ELIMINATION_RATES,
    R_FEMALE,
    R_MALE,
)
from bacchus.errors import InvalidInput
from bacchus.validation import to_float


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class DrinkingFrequency(str, Enum):
    RARELY = "rarely"
    OCCASIONALLY = "occasionally"
    REGULARLY = "regularly"
    FREQUENTLY = "frequently"


def _parse_enum(enum_cls, value, name):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise InvalidInput(f"{name} must be one of: {choices}") from None


def distribution_ratio(gender: Gender) -> float:
    """Widmark r: share of body mass the alcohol distributes through."""
    return R_MALE if gender == Gender.MALE else R_FEMALE


def elimination_rate(
    frequency,
    rates: Mapping[str, float] = ELIMINATION_RATES,
) -> float:
    """Elimination rate (g/L per hour) for a drinking frequency.

    Regular drinkers metabolise faster. ``rates`` can be swapped for a
    different table; every engine function takes the resolved value, never
    the table.
    """
    freq = _parse_enum(DrinkingFrequency, frequency, "drinking_frequency")
    try:
        rate = float(rates[freq.value])
    except KeyError:
        raise InvalidInput(f"No elimination rate configured for {freq.value!r}") from None
    if rate <= 0:
        raise InvalidInput("elimination rate must be > 0")
    return rate


@dataclass(frozen=True)
class Profile:
    weight_kg: float
    gender: Gender = Gender.MALE
    age: Optional[float] = None
    drinking_frequency: DrinkingFrequency = DrinkingFrequency(DEFAULT_DRINKING_FREQUENCY)

    def __post_init__(self):
        weight = to_float(self.weight_kg, "weight_kg")
        if weight <= 0:
            raise InvalidInput("weight_kg must be > 0")
        object.__setattr__(self, "weight_kg", weight)
        object.__setattr__(self, "gender", _parse_enum(Gender, self.gender, "gender"))
        object.__setattr__(
            self,
            "drinking_frequency",
            _parse_enum(DrinkingFrequency, self.drinking_frequency, "drinking_frequency"),
        )
        if self.age is not None:
            age = to_float(self.age, "age")
            if age < 0:
                raise InvalidInput("age must be >= 0")
            object.__setattr__(self, "age", age)

    @property
    def is_male(self) -> bool:
        return self.gender == Gender.MALE

    @property
    def distribution_ratio(self) -> float:
        return distribution_ratio(self.gender)

    @property
    def elimination_rate(self) -> float:
        return elimination_rate(self.drinking_frequency)

    def to_dict(self) -> dict:
        return {
            "weight_kg": self.weight_kg,
            "gender": self.gender.value,
            "age": self.age,
            "drinking_frequency": self.drinking_frequency.value,
        }

    @classmethod
    def from_dict(cls, raw: Mapping) -> "Profile":
        if not isinstance(raw, Mapping):
            raise InvalidInput("profile must be an object")
        return cls(
            weight_kg=raw.get("weight_kg"),
            gender=raw.get("gender", Gender.MALE.value),
            age=raw.get("age"),
            drinking_frequency=raw.get("drinking_frequency", DEFAULT_DRINKING_FREQUENCY),
        )

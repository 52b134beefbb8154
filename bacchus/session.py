"""
Drinking session: profile, drink and food log, BAC and projection helpers.
Times are timezone-aware datetimes; naive values are read as UTC.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from bacchus import calculations
from bacchus.config import DEFAULT_INTERVAL_MINUTES, MAX_SERIES_HOURS, MAX_SERIES_POINTS
from bacchus.drinks import DEFAULT_SIZE, DrinkEvent, drink_from_preset
from bacchus.errors import InvalidInput
from bacchus.food import FoodEvent, food_from_preset
from bacchus.graph import BACSample, sample_series
from bacchus.profile import Profile
from bacchus.validation import hours_between, parse_timestamp, to_float, utcnow

logger = logging.getLogger(__name__)


def _longest_window(interval_minutes) -> timedelta:
    """Widest span a single series may cover at this interval."""
    interval = max(0.0, to_float(interval_minutes, "interval_minutes"))
    return timedelta(hours=min(MAX_SERIES_HOURS, (MAX_SERIES_POINTS - 1) * interval / 60.0))


@dataclass
class Session:
    profile: Profile
    start_time: datetime = field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    _drinks: List[DrinkEvent] = field(default_factory=list)
    _foods: List[FoodEvent] = field(default_factory=list)

    def __post_init__(self):
        self.start_time = parse_timestamp(self.start_time, "start_time")
        if self.end_time is not None:
            self.end_time = parse_timestamp(self.end_time, "end_time")

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None

    def _check_open(self) -> None:
        if self.is_closed:
            raise InvalidInput("session has ended")

    def add_drink(self, volume_ml: float, alcohol_percentage: float, consumed_at=None, name: Optional[str] = None) -> DrinkEvent:
        self._check_open()
        drink = DrinkEvent(volume_ml, alcohol_percentage, consumed_at or utcnow(), name=name)
        self._drinks.append(drink)
        return drink

    def add_drink_preset(self, key: str, size: str = DEFAULT_SIZE, consumed_at=None) -> DrinkEvent:
        self._check_open()
        drink = drink_from_preset(key, consumed_at or utcnow(), size=size)
        self._drinks.append(drink)
        return drink

    def add_food(self, absorption_factor: float, consumed_at=None, name: Optional[str] = None) -> FoodEvent:
        self._check_open()
        food = FoodEvent(absorption_factor, consumed_at or utcnow(), name=name)
        self._foods.append(food)
        return food

    def add_food_preset(self, key: str, consumed_at=None) -> FoodEvent:
        self._check_open()
        food = food_from_preset(key, consumed_at or utcnow())
        self._foods.append(food)
        return food

    def remove_drink(self, index: int) -> DrinkEvent:
        """Drinks are immutable; amending one means removing and re-adding it."""
        self._check_open()
        ordered = self.drinks
        if not 0 <= index < len(ordered):
            raise InvalidInput(f"no drink at index {index}")
        drink = ordered[index]
        self._drinks.remove(drink)
        return drink

    @property
    def drinks(self) -> List[DrinkEvent]:
        return sorted(self._drinks, key=lambda d: d.consumed_at)

    @property
    def foods(self) -> List[FoodEvent]:
        return sorted(self._foods, key=lambda f: f.consumed_at)

    def snapshot(self) -> Tuple[Tuple[DrinkEvent, ...], Tuple[FoodEvent, ...]]:
        """Stable view of the events for one evaluation or sampling pass."""
        return tuple(self.drinks), tuple(self.foods)

    @property
    def total_alcohol_grams(self) -> float:
        return sum(d.alcohol_grams for d in self._drinks)

    def bac_at(self, at_time=None) -> float:
        at_time = utcnow() if at_time is None else parse_timestamp(at_time, "at_time")
        drinks, foods = self.snapshot()
        return calculations.total_bac(self.profile, drinks, foods, at_time)

    def series(
        self,
        start=None,
        end=None,
        interval_minutes: float = DEFAULT_INTERVAL_MINUTES,
    ) -> List[BACSample]:
        """Samples from session start until sober (or ``end``).

        Without an explicit ``start`` the window is cut to its most recent
        part when a long session would not fit in one series.
        """
        drinks, foods = self.snapshot()
        if end is None:
            end = calculations.sober_at(self.profile, drinks, foods) or self.start_time
            end = end + timedelta(minutes=to_float(interval_minutes, "interval_minutes"))
        if start is None:
            start = max(self.start_time, parse_timestamp(end, "end") - _longest_window(interval_minutes))
        return sample_series(self.profile, drinks, foods, start, end, interval_minutes)

    def end(self, at_time=None) -> None:
        self._check_open()
        self.end_time = utcnow() if at_time is None else parse_timestamp(at_time, "end_time")
        logger.info("session ended after %d drinks", len(self._drinks))

    def summary(self, now=None) -> dict:
        """Numbers and strings for dashboards, widgets and the history view."""
        now = utcnow() if now is None else parse_timestamp(now, "now")
        drinks, foods = self.snapshot()
        rate = self.profile.elimination_rate
        bac = calculations.total_bac(self.profile, drinks, foods, now)
        peak_time, peak = calculations.peak_bac(self.profile, drinks, foods)
        sober = calculations.sober_at(self.profile, drinks, foods)
        to_legal = calculations.hours_to_legal(self.profile, drinks, foods, now)
        to_zero = calculations.hours_to_zero(self.profile, drinks, foods, now)
        finished = self.end_time or now
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "is_closed": self.is_closed,
            "duration": calculations.format_duration(hours_between(self.start_time, finished)),
            "drink_count": len(drinks),
            "food_count": len(foods),
            "total_alcohol_grams": round(self.total_alcohol_grams, 2),
            "current_bac": round(bac, 4),
            "danger_level": calculations.classify_danger(bac).value,
            "max_bac": round(peak, 4),
            "max_bac_at": peak_time.isoformat() if peak_time else None,
            "elimination_rate": rate,
            "time_to_legal_hours": to_legal,
            "time_to_legal_minutes": calculations.ceil_minutes(to_legal),
            "time_to_legal": calculations.format_duration(to_legal),
            "time_to_zero_hours": to_zero,
            "time_to_zero_minutes": calculations.ceil_minutes(to_zero),
            "time_to_zero": calculations.format_duration(to_zero),
            "sober_at": sober.isoformat() if sober else None,
        }

    def to_dict(self) -> dict:
        return {
            "profile": self.profile.to_dict(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "drinks": [d.to_dict() for d in self.drinks],
            "foods": [f.to_dict() for f in self.foods],
        }

    @classmethod
    def from_dict(cls, raw) -> "Session":
        if not isinstance(raw, dict):
            raise InvalidInput("session must be an object")
        model = cls(
            profile=Profile.from_dict(raw.get("profile")),
            start_time=raw.get("start_time") or utcnow(),
            end_time=raw.get("end_time"),
        )
        model._drinks = [DrinkEvent.from_dict(d) for d in raw.get("drinks") or []]
        model._foods = [FoodEvent.from_dict(f) for f in raw.get("foods") or []]
        return model

"""BAC calculations using a Widmark rise with absorption ramp and linear elimination.

Model, per drink (BAC in g/L):
- Peak: grams / (weight_kg * r) * food_factor(at consumption time)
- r = 0.68 (male), 0.55 (female)
- Ramp: linear from 0 to peak over the first 0.5 h, no elimination
- Elimination: peak - beta * (hours after the ramp), floored at 0
- beta (g/L per hour) comes from the profile's drinking frequency

The total is the sum of all drinks consumed at or before the query time.
Every value is recomputed from the events; nothing is carried between calls.
"""

import logging
import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from bacchus.config import (
    ABSORPTION_WINDOW_HOURS,
    DANGER_THRESHOLDS,
    DISPLAY_CEILING,
    LEGAL_LIMIT,
    ZERO_TOLERANCE_LIMIT,
)
from bacchus.drinks import DrinkEvent
from bacchus.errors import InvalidInput
from bacchus.food import FoodEvent, food_factor
from bacchus.profile import Profile
from bacchus.validation import hours_between, to_float

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


class DangerLevel(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    WARNING = "warning"
    DANGER = "danger"
    CRITICAL = "critical"


def _rate(profile: Profile, elimination_rate: Optional[float]) -> float:
    rate = profile.elimination_rate if elimination_rate is None else to_float(elimination_rate, "elimination_rate")
    if rate <= 0:
        raise InvalidInput("elimination_rate must be > 0")
    return rate


def peak_contribution(drink: DrinkEvent, profile: Profile, foods: Iterable[FoodEvent] = ()) -> float:
    """Peak BAC (g/L) one drink reaches once fully absorbed, before elimination."""
    raw = drink.alcohol_grams / (profile.weight_kg * profile.distribution_ratio)
    return raw * food_factor(foods, drink.consumed_at)


def dose_contribution(
    drink: DrinkEvent,
    profile: Profile,
    foods: Iterable[FoodEvent],
    at_time: datetime,
    elimination_rate: Optional[float] = None,
) -> float:
    """One drink's share of BAC (g/L) at ``at_time``."""
    elapsed = hours_between(drink.consumed_at, at_time)
    if elapsed < 0:
        return 0.0
    peak = peak_contribution(drink, profile, foods)
    if elapsed < ABSORPTION_WINDOW_HOURS:
        return peak * (elapsed / ABSORPTION_WINDOW_HOURS)
    beta = _rate(profile, elimination_rate)
    return max(0.0, peak - beta * (elapsed - ABSORPTION_WINDOW_HOURS))


def total_bac(
    profile: Profile,
    drinks: Iterable[DrinkEvent],
    foods: Iterable[FoodEvent],
    at_time: datetime,
    elimination_rate: Optional[float] = None,
) -> float:
    """BAC (g/L) at ``at_time``. Drinks after ``at_time`` are ignored."""
    foods = tuple(foods)
    bac = 0.0
    for drink in drinks:
        if drink.consumed_at > at_time:
            continue
        bac += dose_contribution(drink, profile, foods, at_time, elimination_rate)
    return bac


def peak_bac(
    profile: Profile,
    drinks: Sequence[DrinkEvent],
    foods: Iterable[FoodEvent] = (),
    elimination_rate: Optional[float] = None,
) -> Tuple[Optional[datetime], float]:
    """(time, bac) of the session maximum.

    The total is piecewise linear and only bends downward where a drink
    finishes absorbing, so the maximum sits at one of those instants.
    """
    foods = tuple(foods)
    best_time, best = None, 0.0
    window = timedelta(hours=ABSORPTION_WINDOW_HOURS)
    for drink in drinks:
        t = drink.consumed_at + window
        bac = total_bac(profile, drinks, foods, t, elimination_rate)
        if best_time is None or bac > best or (bac == best and t < best_time):
            best_time, best = t, bac
    return best_time, best


def sober_at(
    profile: Profile,
    drinks: Sequence[DrinkEvent],
    foods: Iterable[FoodEvent] = (),
    elimination_rate: Optional[float] = None,
) -> Optional[datetime]:
    """First instant after which every drink's contribution is zero."""
    if not drinks:
        return None
    foods = tuple(foods)
    beta = _rate(profile, elimination_rate)
    return max(
        d.consumed_at
        + timedelta(hours=ABSORPTION_WINDOW_HOURS + peak_contribution(d, profile, foods) / beta)
        for d in drinks
    )


def hours_until_below(
    profile: Profile,
    drinks: Sequence[DrinkEvent],
    foods: Iterable[FoodEvent],
    now: datetime,
    threshold: float,
    elimination_rate: Optional[float] = None,
) -> float:
    """Hours from ``now`` until the curve drops to ``threshold`` for good.

    Drinks after ``now`` are left out. Found on the piecewise-linear total
    itself, so it agrees with total_bac when several drinks overlap.
    """
    if threshold < 0:
        raise InvalidInput("threshold must be >= 0")
    drinks = tuple(d for d in drinks if d.consumed_at <= now)
    if not drinks:
        return 0.0
    foods = tuple(foods)
    beta = _rate(profile, elimination_rate)
    window = timedelta(hours=ABSORPTION_WINDOW_HOURS)
    points = {now}
    for d in drinks:
        absorbed = d.consumed_at + window
        zero = absorbed + timedelta(hours=peak_contribution(d, profile, foods) / beta)
        points.update(t for t in (absorbed, zero) if t > now)
    times = sorted(points)
    values = [total_bac(profile, drinks, foods, t, elimination_rate) for t in times]

    # Tolerance absorbs microsecond rounding of the breakpoints.
    above = [i for i, v in enumerate(values) if v > threshold + _EPSILON]
    if not above:
        return 0.0
    # The last breakpoint is a zero crossing, so i + 1 always exists.
    i = above[-1]
    t0, t1 = times[i], times[i + 1]
    v0, v1 = values[i], values[i + 1]
    crossing = t0 + (t1 - t0) * ((v0 - threshold) / (v0 - v1))
    return max(0.0, hours_between(now, crossing))


def hours_to_legal(
    profile: Profile,
    drinks: Sequence[DrinkEvent],
    foods: Iterable[FoodEvent],
    now: datetime,
    elimination_rate: Optional[float] = None,
) -> float:
    return hours_until_below(profile, drinks, foods, now, LEGAL_LIMIT, elimination_rate)


def hours_to_zero(
    profile: Profile,
    drinks: Sequence[DrinkEvent],
    foods: Iterable[FoodEvent],
    now: datetime,
    elimination_rate: Optional[float] = None,
) -> float:
    return hours_until_below(profile, drinks, foods, now, ZERO_TOLERANCE_LIMIT, elimination_rate)


def classify_danger(bac: float) -> DangerLevel:
    """Map BAC (g/L) to a danger level via DANGER_THRESHOLDS."""
    if bac is None or math.isnan(bac) or bac < 0:
        bac = 0.0
    for upper, level in DANGER_THRESHOLDS:
        if upper is None or bac < upper:
            return DangerLevel(level)
    return DangerLevel.CRITICAL


def display_bac(bac: float, ceiling: float = DISPLAY_CEILING) -> float:
    """Clamp for gauges and widgets."""
    return max(0.0, min(ceiling, bac))


def time_to_threshold(current_bac: float, threshold: float, elimination_rate: float) -> float:
    """Hours until BAC falls to ``threshold`` at a constant elimination rate."""
    rate = to_float(elimination_rate, "elimination_rate")
    if rate <= 0:
        raise InvalidInput("elimination_rate must be > 0")
    return max(0.0, (current_bac - threshold) / rate)


def time_to_legal_limit(current_bac: float, elimination_rate: float) -> float:
    return time_to_threshold(current_bac, LEGAL_LIMIT, elimination_rate)


def time_to_zero(current_bac: float, elimination_rate: float) -> float:
    return time_to_threshold(current_bac, ZERO_TOLERANCE_LIMIT, elimination_rate)


def ceil_minutes(hours: float) -> int:
    """Whole minutes, rounded up. Every displayed duration goes through this."""
    if hours <= 0:
        return 0
    # Round first so float noise like 60.0000000001 does not become 61.
    return int(math.ceil(round(hours * 60.0, 6)))


def format_duration(hours: float) -> str:
    minutes = ceil_minutes(hours)
    return f"{minutes // 60}h {minutes % 60:02d}m"

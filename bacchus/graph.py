"""
BAC-over-time series. Produces sample lists for charts or an image file.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from bacchus.calculations import DangerLevel, classify_danger, total_bac
from bacchus.config import (
    DEFAULT_INTERVAL_MINUTES,
    FALLBACK_WINDOW_HOURS,
    LEGAL_LIMIT,
    MAX_SERIES_HOURS,
    MAX_SERIES_POINTS,
)
from bacchus.drinks import DrinkEvent
from bacchus.errors import InvalidInput
from bacchus.food import FoodEvent
from bacchus.profile import Profile
from bacchus.validation import parse_timestamp, to_float

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BACSample:
    time: datetime
    bac: float
    danger_level: DangerLevel

    def to_dict(self) -> dict:
        return {
            "time": self.time.isoformat(),
            "bac": round(self.bac, 4),
            "danger_level": self.danger_level.value,
        }


def _window(
    start: Union[datetime, str],
    end: Union[datetime, str],
    interval_minutes: float,
) -> Tuple[datetime, datetime, timedelta]:
    """Parsed (start, end, step); rejects windows too long or too dense to sample."""
    start = parse_timestamp(start, "start")
    end = parse_timestamp(end, "end")
    interval = to_float(interval_minutes, "interval_minutes")
    if interval <= 0:
        raise InvalidInput("interval_minutes must be > 0")
    if interval > MAX_SERIES_HOURS * 60:
        raise InvalidInput(f"interval_minutes must be at most {MAX_SERIES_HOURS * 60:g}")
    if end <= start:
        logger.warning("end %s <= start %s, extending window by %sh", end, start, FALLBACK_WINDOW_HOURS)
        end = start + timedelta(hours=FALLBACK_WINDOW_HOURS)
    if end - start > timedelta(hours=MAX_SERIES_HOURS):
        raise InvalidInput(f"series window must be at most {MAX_SERIES_HOURS:g} hours")
    step = timedelta(minutes=interval)
    if not step:
        raise InvalidInput("interval_minutes is too small")
    if (end - start) // step + 1 > MAX_SERIES_POINTS:
        raise InvalidInput(f"series must have at most {MAX_SERIES_POINTS} points, use a larger interval")
    return start, end, step


def iter_series(
    profile: Profile,
    drinks: Iterable[DrinkEvent],
    foods: Iterable[FoodEvent],
    start,
    end,
    interval_minutes: float = DEFAULT_INTERVAL_MINUTES,
    elimination_rate: Optional[float] = None,
) -> Iterator[BACSample]:
    """Lazy iterator of samples at start, start + interval, ... up to end inclusive.

    Each call starts over; abandoning the iterator part way is fine.
    """
    # Snapshot so a caller mutating its lists mid-iteration cannot tear the series.
    drinks = tuple(drinks)
    foods = tuple(foods)
    start, end, step = _window(start, end, interval_minutes)
    return _generate(profile, drinks, foods, start, end, step, elimination_rate)


def _generate(
    profile: Profile,
    drinks: Tuple[DrinkEvent, ...],
    foods: Tuple[FoodEvent, ...],
    start: datetime,
    end: datetime,
    step: timedelta,
    elimination_rate: Optional[float],
) -> Iterator[BACSample]:
    k = 0
    while True:
        t = start + step * k
        if t > end:
            return
        bac = total_bac(profile, drinks, foods, t, elimination_rate)
        yield BACSample(t, bac, classify_danger(bac))
        k += 1


def sample_series(
    profile: Profile,
    drinks: Iterable[DrinkEvent],
    foods: Iterable[FoodEvent],
    start,
    end,
    interval_minutes: float = DEFAULT_INTERVAL_MINUTES,
    elimination_rate: Optional[float] = None,
) -> List[BACSample]:
    """floor((end - start) / interval) + 1 samples; never empty."""
    return list(iter_series(profile, drinks, foods, start, end, interval_minutes, elimination_rate))


def curve_data(samples: Sequence[BACSample]) -> List[dict]:
    """Plain dicts for any frontend (web, iOS widget, chart)."""
    return [s.to_dict() for s in samples]


def save_bac_graph(
    samples: Sequence[BACSample],
    output_path: str = "bac_graph.png",
    title: str = "BAC over time",
) -> str:
    """
    Plot a sampled BAC series with matplotlib and save to file.
    Returns path to saved file. Requires: pip install matplotlib
    """
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for save_bac_graph. pip install matplotlib")

    if not samples:
        raise InvalidInput("no samples to plot")
    origin = samples[0].time
    hours = [(s.time - origin).total_seconds() / 3600.0 for s in samples]
    bacs = [s.bac for s in samples]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(hours, bacs, color="#2563eb", linewidth=2, label="BAC")
    ax.fill_between(hours, bacs, alpha=0.2, color="#2563eb")
    ax.axhline(y=LEGAL_LIMIT, color="#dc2626", linestyle="--", linewidth=1, label=f"Legal limit ({LEGAL_LIMIT} g/L)")
    ax.set_xlabel(f"Hours from {origin:%H:%M}")
    ax.set_ylabel("BAC (g/L)")
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path

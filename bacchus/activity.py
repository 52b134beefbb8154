"""Live Activity / home-screen widget payloads.

The native bridge is not part of this package. What lives here is the state
the bridge needs: whether an activity is running, and the payload to push.
State is a plain value passed in and returned, never held by a module.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Union

from bacchus.calculations import (
    ceil_minutes,
    classify_danger,
    display_bac,
    format_duration,
    time_to_threshold,
)
from bacchus.config import BAC_COLORS, LEGAL_LIMIT, SOBER_BAC, ZERO_TOLERANCE_LIMIT
from bacchus.validation import parse_timestamp, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Inactive:
    pass


@dataclass(frozen=True)
class Active:
    activity_id: str
    started_at: datetime


ActivityState = Union[Inactive, Active]
INACTIVE = Inactive()


def state_to_dict(state: ActivityState) -> dict:
    if isinstance(state, Active):
        return {"status": "active", "activity_id": state.activity_id, "started_at": state.started_at.isoformat()}
    return {"status": "inactive"}


def state_from_dict(raw) -> ActivityState:
    if isinstance(raw, dict) and raw.get("status") == "active" and raw.get("activity_id"):
        return Active(str(raw["activity_id"]), parse_timestamp(raw.get("started_at") or utcnow()))
    return INACTIVE


def bac_progress(
    bac: float,
    elimination_rate: float,
    peak_bac: Optional[float] = None,
    hours_to_legal: Optional[float] = None,
    hours_to_zero: Optional[float] = None,
) -> dict:
    """Where the user is on the way down to the next target.

    Target is the legal limit while above it, zero afterwards. Progress is
    measured from ``peak_bac`` (defaults to the current value, i.e. 0%).
    ``hours_to_legal`` / ``hours_to_zero`` are the times solved on the whole
    curve (see calculations.hours_until_below); without them the wait is
    bac over a single elimination rate.
    """
    above_legal = bac > LEGAL_LIMIT
    target = LEGAL_LIMIT if above_legal else ZERO_TOLERANCE_LIMIT
    hours = hours_to_legal if above_legal else hours_to_zero
    if hours is None:
        hours = time_to_threshold(bac, target, elimination_rate)
    start = bac if peak_bac is None else max(peak_bac, bac)
    span = start - target
    if span <= 0:
        percentage = 100.0
    else:
        percentage = max(0.0, min(100.0, 100.0 * (start - bac) / span))
    return {
        "target_bac": target,
        "target_description": "Legal limit" if above_legal else "Sober",
        "minutes_remaining": ceil_minutes(hours),
        "time_remaining": format_duration(hours),
        "progress_percentage": round(percentage, 1),
        "is_above_legal_limit": above_legal,
    }


def build_payload(
    bac: float,
    elimination_rate: float,
    peak_bac: Optional[float] = None,
    user: Optional[dict] = None,
    now: Optional[datetime] = None,
    hours_to_legal: Optional[float] = None,
    hours_to_zero: Optional[float] = None,
) -> dict:
    level = classify_danger(bac)
    return {
        "current_bac": round(bac, 2),
        "display_bac": round(display_bac(bac), 2),
        "danger_level": level.value,
        "color": BAC_COLORS[level.value],
        **bac_progress(bac, elimination_rate, peak_bac, hours_to_legal, hours_to_zero),
        "user": user or {"name": "User", "emoji": ""},
        "last_updated": (now or utcnow()).isoformat(),
    }


def start_if_needed(
    state: ActivityState,
    bac: float,
    elimination_rate: float,
    peak_bac: Optional[float] = None,
    user: Optional[dict] = None,
    now: Optional[datetime] = None,
    hours_to_legal: Optional[float] = None,
    hours_to_zero: Optional[float] = None,
) -> Tuple[ActivityState, Optional[dict]]:
    """Start an activity when none is running and there is alcohol to track."""
    if isinstance(state, Active) or bac <= SOBER_BAC:
        return state, None
    now = now or utcnow()
    new_state = Active(uuid.uuid4().hex, now)
    logger.info("starting live activity %s at bac %.2f", new_state.activity_id, bac)
    return new_state, build_payload(bac, elimination_rate, peak_bac, user, now, hours_to_legal, hours_to_zero)


def update_if_active(
    state: ActivityState,
    bac: float,
    elimination_rate: float,
    peak_bac: Optional[float] = None,
    user: Optional[dict] = None,
    now: Optional[datetime] = None,
    hours_to_legal: Optional[float] = None,
    hours_to_zero: Optional[float] = None,
) -> Tuple[ActivityState, Optional[dict]]:
    """Refresh a running activity; end it once the user is sober."""
    if not isinstance(state, Active):
        return state, None
    if bac <= SOBER_BAC:
        return stop(state), None
    return state, build_payload(bac, elimination_rate, peak_bac, user, now, hours_to_legal, hours_to_zero)


def stop(state: ActivityState) -> ActivityState:
    if isinstance(state, Active):
        logger.info("stopping live activity %s", state.activity_id)
    return INACTIVE

"""BAC Tracker Flask app.

Run from project root:
    python app.py
"""

import logging
import os
from datetime import timedelta
from typing import Any

from flask import Flask, jsonify, request, session as flask_session

from bacchus import activity
from bacchus.calculations import classify_danger, display_bac, hours_to_legal, hours_to_zero, peak_bac
from bacchus.config import (
    DEFAULT_INTERVAL_MINUTES,
    MAX_SERIES_INTERVAL_MINUTES,
    MIN_SERIES_INTERVAL_MINUTES,
    REFRESH_INTERVAL_SECONDS,
)
from bacchus.drinks import DEFAULT_SIZE, list_drink_presets
from bacchus.drive import get_bac_info, get_drive_advice
from bacchus.errors import InvalidInput
from bacchus.food import list_food_presets
from bacchus.graph import curve_data, sample_series
from bacchus.profile import Profile
from bacchus.session import Session
from bacchus.validation import parse_timestamp, to_float, utcnow

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SECRET_KEY"] = os.environ.get("APP_SECRET_KEY", "dev-only-change-me")
app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
app.config["SESSION_COOKIE_HTTPONLY"] = True
app.config["SESSION_COOKIE_SECURE"] = os.environ.get("SESSION_COOKIE_SECURE", "0") == "1"
app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=2)

MAX_HOURS_AGO = 24.0
SESSION_KEY = "bac_session"
ACTIVITY_KEY = "bac_activity"


def _clamp_float(value: Any, default: float, min_value: float, max_value: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = default
    return max(min_value, min(max_value, parsed))


def _series_interval() -> float:
    return _clamp_float(
        os.environ.get("BAC_SERIES_INTERVAL_MINUTES"),
        DEFAULT_INTERVAL_MINUTES,
        MIN_SERIES_INTERVAL_MINUTES,
        MAX_SERIES_INTERVAL_MINUTES,
    )


@app.errorhandler(InvalidInput)
def handle_invalid_input(exc: InvalidInput):
    logger.info("rejected request %s: %s", request.path, exc)
    return jsonify({"error": str(exc)}), 400


def _empty_state() -> dict[str, Any]:
    return {
        "configured": False,
        "bac_now": 0,
        "danger_level": classify_danger(0).value,
        "series": [],
        "drink_count": 0,
        "food_count": 0,
        "refresh_after_seconds": REFRESH_INTERVAL_SECONDS,
    }


def get_session() -> Session | None:
    raw = flask_session.get(SESSION_KEY)
    if raw is None:
        return None
    try:
        return Session.from_dict(raw)
    except InvalidInput:
        logger.warning("dropping unreadable session cookie")
        flask_session.pop(SESSION_KEY, None)
        return None


def set_session(model: Session | None):
    if model is None:
        flask_session.pop(SESSION_KEY, None)
        return
    flask_session[SESSION_KEY] = model.to_dict()


def _require_session():
    model = get_session()
    if model is None:
        raise InvalidInput("Set up a profile first")
    return model


def _recent(value: Any, name: str):
    """Parse a timestamp that must fall within the last MAX_HOURS_AGO hours."""
    at = parse_timestamp(value, name)
    now = utcnow()
    if at > now:
        raise InvalidInput(f"{name} cannot be in the future")
    if at < now - timedelta(hours=MAX_HOURS_AGO):
        raise InvalidInput(f"{name} must be within the last {MAX_HOURS_AGO:g} hours")
    return at


def _consumed_at(data: dict):
    """Explicit ISO timestamp, or hours_ago relative to now (0..24)."""
    if data.get("consumed_at"):
        return _recent(data["consumed_at"], "consumed_at")
    hours_ago = to_float(data.get("hours_ago", 0.0), "hours_ago")
    if not 0 <= hours_ago <= MAX_HOURS_AGO:
        raise InvalidInput(f"hours_ago must be between 0 and {MAX_HOURS_AGO:g}")
    return utcnow() - timedelta(hours=hours_ago)


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


@app.route("/api/presets")
def api_presets():
    return jsonify({"drinks": list_drink_presets(), "foods": list_food_presets()})


@app.route("/api/setup", methods=["POST"])
def api_setup():
    data = request.get_json(silent=True) or {}
    profile = Profile.from_dict(data)
    start = _recent(data["start_time"], "start_time") if data.get("start_time") else utcnow()
    set_session(Session(profile=profile, start_time=start))
    flask_session.pop(ACTIVITY_KEY, None)
    logger.info("new session for %s kg %s", profile.weight_kg, profile.gender.value)
    return jsonify({"ok": True, "profile": profile.to_dict(), "start_time": start.isoformat()})


@app.route("/api/drink", methods=["POST"])
def api_drink():
    model = _require_session()
    data = request.get_json(silent=True) or {}
    consumed_at = _consumed_at(data)
    if data.get("preset"):
        drink = model.add_drink_preset(str(data["preset"]), size=str(data.get("size", DEFAULT_SIZE)), consumed_at=consumed_at)
    else:
        drink = model.add_drink(
            data.get("volume_ml"),
            data.get("alcohol_percentage"),
            consumed_at=consumed_at,
            name=data.get("name"),
        )
    set_session(model)
    return jsonify({"ok": True, "drink": drink.to_dict(), "alcohol_grams": round(drink.alcohol_grams, 2)})


@app.route("/api/food", methods=["POST"])
def api_food():
    model = _require_session()
    data = request.get_json(silent=True) or {}
    consumed_at = _consumed_at(data)
    if data.get("preset"):
        food = model.add_food_preset(str(data["preset"]), consumed_at=consumed_at)
    else:
        food = model.add_food(data.get("absorption_factor"), consumed_at=consumed_at, name=data.get("name"))
    set_session(model)
    return jsonify({"ok": True, "food": food.to_dict()})


@app.route("/api/drink/<int:index>", methods=["DELETE"])
def api_drink_delete(index: int):
    model = _require_session()
    removed = model.remove_drink(index)
    set_session(model)
    return jsonify({"ok": True, "removed": removed.to_dict()})


@app.route("/api/state")
def api_state():
    model = get_session()
    if model is None:
        return jsonify(_empty_state())

    now = parse_timestamp(request.args["at"], "at") if request.args.get("at") else utcnow()
    summary = model.summary(now)
    samples = model.series(interval_minutes=_series_interval())
    bac_now = summary["current_bac"]
    wait = summary["time_to_legal_hours"]

    return jsonify({
        "configured": True,
        "profile": model.profile.to_dict(),
        **summary,
        "bac_now": bac_now,
        "display_bac": round(display_bac(bac_now), 2),
        "info": get_bac_info(bac_now),
        "drive_advice": get_drive_advice(bac_now, model.profile.elimination_rate, wait),
        "series": curve_data(samples),
        "refresh_after_seconds": REFRESH_INTERVAL_SECONDS,
    })


@app.route("/api/series")
def api_series():
    model = _require_session()
    drinks, foods = model.snapshot()
    start = request.args.get("start") or model.start_time
    end = request.args.get("end") or (parse_timestamp(start, "start") + timedelta(hours=6))
    interval = request.args.get("interval_minutes", _series_interval())
    samples = sample_series(model.profile, drinks, foods, start, end, to_float(interval, "interval_minutes"))
    return jsonify({"series": curve_data(samples), "count": len(samples)})


@app.route("/api/activity", methods=["POST"])
def api_activity():
    """Advance the live-activity state: action is start, update or stop."""
    model = _require_session()
    data = request.get_json(silent=True) or {}
    action = str(data.get("action", "update")).strip().lower()
    state = activity.state_from_dict(flask_session.get(ACTIVITY_KEY))

    drinks, foods = model.snapshot()
    now = utcnow()
    bac = model.bac_at(now)
    rate = model.profile.elimination_rate
    _, peak = peak_bac(model.profile, drinks, foods)
    to_legal = hours_to_legal(model.profile, drinks, foods, now)
    to_zero = hours_to_zero(model.profile, drinks, foods, now)
    user = data.get("user") if isinstance(data.get("user"), dict) else None

    if action == "start":
        state, payload = activity.start_if_needed(state, bac, rate, peak, user, now, to_legal, to_zero)
    elif action == "update":
        state, payload = activity.update_if_active(state, bac, rate, peak, user, now, to_legal, to_zero)
    elif action == "stop":
        state, payload = activity.stop(state), None
    else:
        raise InvalidInput("action must be start, update or stop")

    flask_session[ACTIVITY_KEY] = activity.state_to_dict(state)
    return jsonify({"state": activity.state_to_dict(state), "payload": payload})


@app.route("/api/session/end", methods=["POST"])
def api_session_end():
    model = _require_session()
    model.end()
    summary = model.summary(model.end_time)
    set_session(None)
    flask_session[ACTIVITY_KEY] = activity.state_to_dict(activity.INACTIVE)
    return jsonify({"ok": True, "summary": summary, "session": model.to_dict()})


@app.route("/api/reset", methods=["POST"])
def api_reset():
    model = get_session()
    if model is None:
        return jsonify({"ok": True})
    set_session(Session(profile=model.profile))
    return jsonify({"ok": True})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")

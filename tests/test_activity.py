"""Live-activity state and advice payload tests."""
from datetime import datetime, timezone

import pytest

from bacchus import activity
from bacchus.drive import get_bac_info, get_drive_advice

NOW = datetime(2024, 6, 1, 23, 0, tzinfo=timezone.utc)


def test_progress_above_legal_targets_limit():
    p = activity.bac_progress(0.7, 0.17, peak_bac=0.9)
    assert p["target_bac"] == 0.5
    assert p["is_above_legal_limit"] is True
    assert p["progress_percentage"] == pytest.approx(50.0)
    assert p["minutes_remaining"] == 71
    assert p["time_remaining"] == "1h 11m"


def test_progress_below_legal_targets_zero():
    p = activity.bac_progress(0.34, 0.17)
    assert p["target_bac"] == 0.0
    assert p["target_description"] == "Sober"
    assert p["progress_percentage"] == 0.0
    assert p["time_remaining"] == "2h 00m"
    assert activity.bac_progress(0.0, 0.17)["progress_percentage"] == 100.0


def test_start_update_stop_cycle():
    state = activity.INACTIVE
    state, payload = activity.start_if_needed(state, 0.005, 0.17, now=NOW)
    assert state == activity.INACTIVE and payload is None

    state, payload = activity.start_if_needed(state, 0.6, 0.17, now=NOW)
    assert isinstance(state, activity.Active)
    assert payload["danger_level"] == "caution"
    assert payload["last_updated"] == NOW.isoformat()

    same, payload = activity.start_if_needed(state, 0.6, 0.17, now=NOW)
    assert same == state and payload is None

    state, payload = activity.update_if_active(state, 0.4, 0.17, peak_bac=0.6, now=NOW)
    assert isinstance(state, activity.Active)
    assert payload["target_bac"] == 0.0

    state, payload = activity.update_if_active(state, 0.0, 0.17, now=NOW)
    assert state == activity.INACTIVE and payload is None


def test_update_when_inactive_is_noop():
    state, payload = activity.update_if_active(activity.INACTIVE, 0.8, 0.17)
    assert state == activity.INACTIVE and payload is None
    assert activity.stop(activity.INACTIVE) == activity.INACTIVE


def test_state_dict_roundtrip():
    state = activity.Active("abc", NOW)
    assert activity.state_from_dict(activity.state_to_dict(state)) == state
    assert activity.state_from_dict(None) == activity.INACTIVE
    assert activity.state_from_dict({"status": "active"}) == activity.INACTIVE


def test_payload_clamps_display_value():
    payload = activity.build_payload(2.4, 0.17, now=NOW)
    assert payload["display_bac"] == 1.5
    assert payload["current_bac"] == 2.4
    assert payload["danger_level"] == "critical"


def test_bac_info_levels():
    assert get_bac_info(0.2)["level"] == "safe"
    info = get_bac_info(0.6)
    assert info["level"] == "caution"
    assert info["color"] == "#FFCC33"
    assert "Administrative" in info["legal_status"]


def test_drive_advice():
    assert get_drive_advice(0.0, 0.17)["status"] == "ok"
    assert get_drive_advice(0.1, 0.17)["status"] == "caution"
    assert get_drive_advice(0.3, 0.17)["status"] == "do_not_drive"
    above = get_drive_advice(0.84, 0.17)
    assert above["status"] == "do_not_drive"
    assert "2h 00m" in above["action"]


def test_progress_uses_projection_from_the_curve():
    p = activity.bac_progress(0.84, 0.17, peak_bac=0.9, hours_to_legal=1.0, hours_to_zero=3.0)
    assert p["target_bac"] == 0.5
    assert p["minutes_remaining"] == 60
    below = activity.bac_progress(0.3, 0.17, hours_to_legal=0.0, hours_to_zero=1.25)
    assert below["time_remaining"] == "1h 15m"

    state, payload = activity.start_if_needed(
        activity.INACTIVE, 0.84, 0.17, now=NOW, hours_to_legal=1.0, hours_to_zero=3.0
    )
    assert payload["minutes_remaining"] == 60
    _, payload = activity.update_if_active(state, 0.84, 0.17, now=NOW, hours_to_legal=0.5)
    assert payload["time_remaining"] == "0h 30m"


def test_drive_advice_uses_projection_from_the_curve():
    above = get_drive_advice(0.84, 0.17, hours_to_legal=1.0)
    assert above["status"] == "do_not_drive"
    assert "1h 00m" in above["action"]

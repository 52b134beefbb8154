"""Drive-risk and legal-status advisory helpers.

Bands follow the Italian Codice della Strada (art. 186). Educational only;
an estimate never guarantees legal or safe driving.
"""

from typing import Optional

from bacchus.calculations import DangerLevel, classify_danger, format_duration, time_to_legal_limit
from bacchus.config import BAC_COLORS, LEGAL_LIMIT

_LEVEL_TEXT = {
    DangerLevel.SAFE: (
        "Safe level for most adults.",
        "Legal to drive (standard drivers).",
    ),
    DangerLevel.CAUTION: (
        "Reduced reaction time. Do not drive.",
        "Administrative offence: fine of 543-2,170 EUR, licence suspended 3-6 months.",
    ),
    DangerLevel.WARNING: (
        "Significantly impaired. Dangerous.",
        "Criminal offence: fine of 800-3,200 EUR, up to 6 months arrest, licence suspended 6-12 months.",
    ),
    DangerLevel.DANGER: (
        "Severely impaired. High risk.",
        "Serious criminal offence: fine of 1,500-6,000 EUR, 6-12 months arrest, licence suspended 1-2 years.",
    ),
    DangerLevel.CRITICAL: (
        "Extremely dangerous. Risk of alcohol poisoning.",
        "Serious criminal offence with aggravating factors. Licence may be revoked.",
    ),
}


def get_bac_info(bac: float) -> dict:
    """Level, color and messages for a BAC value (g/L)."""
    level = classify_danger(bac)
    message, legal_status = _LEVEL_TEXT[level]
    return {
        "level": level.value,
        "color": BAC_COLORS[level.value],
        "message": message,
        "legal_status": legal_status,
    }


def get_drive_advice(bac_now: float, elimination_rate: float, hours_to_legal: Optional[float] = None) -> dict:
    """Return conservative drive-risk guidance from estimated BAC.

    Pass ``hours_to_legal`` from calculations.hours_to_legal when the drink
    log is at hand; otherwise the wait assumes a single elimination rate.
    """
    wait = time_to_legal_limit(bac_now, elimination_rate) if hours_to_legal is None else hours_to_legal
    if bac_now > LEGAL_LIMIT:
        return {
            "status": "do_not_drive",
            "title": "Above legal limit",
            "message": f"Estimated BAC is above {LEGAL_LIMIT} g/L. Do not drive.",
            "action": f"Use a taxi or a sober driver. Legal limit in about {format_duration(wait)}.",
            "legal_limit_bac": LEGAL_LIMIT,
        }

    if bac_now >= 0.2:
        return {
            "status": "do_not_drive",
            "title": "Alcohol still present",
            "message": "Estimated BAC is under the limit but reactions are already slower.",
            "action": "Do not drive. Wait and recheck.",
            "legal_limit_bac": LEGAL_LIMIT,
        }

    if bac_now > 0:
        return {
            "status": "caution",
            "title": "Residual alcohol",
            "message": "Estimated BAC is low but not zero. New drivers must be at 0.0 g/L.",
            "action": "Safest choice is still not to drive.",
            "legal_limit_bac": LEGAL_LIMIT,
        }

    return {
        "status": "ok",
        "title": "No alcohol",
        "message": "Estimated BAC is 0.00 g/L right now.",
        "action": "If you have not consumed alcohol, impairment risk is lower.",
        "legal_limit_bac": LEGAL_LIMIT,
    }

"""Model constants for the BAC engine.

Units:
- BAC in g/L (grams of ethanol per litre of blood).
- Elimination rate (beta) in g/L per hour.
- Durations in hours unless the name says otherwise.

Legal bands follow the Italian Codice della Strada, art. 186:
0.5 g/L administrative limit, 0.8 and 1.5 g/L criminal bands.
"""

# Widmark distribution ratio (r).
R_MALE = 0.68
R_FEMALE = 0.55

# Ethanol density (g/mL) for volume x ABV -> grams.
ETHANOL_DENSITY = 0.789

# Alcohol ramps linearly into the blood over this window; elimination starts after it.
ABSORPTION_WINDOW_HOURS = 0.5

# Food effect horizon and time to full effect.
FOOD_EFFECT_HOURS = 4.0
HEAVY_FOOD_FACTOR = 0.7  # factors below this count as heavy food
HEAVY_FOOD_HOURS_TO_PEAK = 1.0
LIGHT_FOOD_HOURS_TO_PEAK = 0.5

# Elimination rate by drinking frequency (g/L per hour).
ELIMINATION_RATES = {
    "rarely": 0.15,
    "occasionally": 0.17,
    "regularly": 0.18,
    "frequently": 0.20,
}
DEFAULT_DRINKING_FREQUENCY = "occasionally"
DEFAULT_ELIMINATION_RATE = ELIMINATION_RATES[DEFAULT_DRINKING_FREQUENCY]

LEGAL_LIMIT = 0.5
ZERO_TOLERANCE_LIMIT = 0.0

# Below this the user is treated as sober by live activities and widgets.
SOBER_BAC = 0.01

# Danger table: (exclusive upper bound, level). Last row has no upper bound.
DANGER_THRESHOLDS = (
    (0.5, "safe"),
    (0.8, "caution"),
    (1.5, "warning"),
    (2.0, "danger"),
    (None, "critical"),
)

BAC_COLORS = {
    "safe": "#33CC66",
    "caution": "#FFCC33",
    "warning": "#FF9933",
    "danger": "#FF3333",
    "critical": "#CC3333",
}

# Gauges clamp to this; the engine itself never does.
DISPLAY_CEILING = 1.5

# Sampling defaults.
DEFAULT_INTERVAL_MINUTES = 15
FALLBACK_WINDOW_HOURS = 6.0
# Upper bounds on one series request.
MAX_SERIES_HOURS = 48.0
MAX_SERIES_POINTS = 2000
MIN_SERIES_INTERVAL_MINUTES = 1.0
MAX_SERIES_INTERVAL_MINUTES = 60.0

# Clients re-query state on this cadence.
REFRESH_INTERVAL_SECONDS = 30

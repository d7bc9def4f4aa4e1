"""Centralized constants for the recall scheduler.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Forgetting curve ----------
# R = (1 + t / (CURVE_SCALE * S)) ** CURVE_DECAY
CURVE_SCALE = 9.0
CURVE_DECAY = -1.0
SECONDS_PER_DAY = 86400.0

# ---------- FSRS weights ----------
# FSRS v5 reference parameterisation (19 weights).
DEFAULT_WEIGHTS: tuple[float, ...] = (
    0.4072,  # w0: initial stability, Again
    1.1829,  # w1: initial stability, Hard
    3.1262,  # w2: initial stability, Good
    15.4722,  # w3: initial stability, Easy
    7.2102,  # w4: initial difficulty baseline
    0.5316,  # w5: initial difficulty spread per grade
    1.0651,  # w6: difficulty update rate
    0.0234,  # w7: difficulty mean reversion
    1.6160,  # w8: stability increase base (e^w8)
    0.1544,  # w9: stability saturation exponent
    1.0070,  # w10: retrievability gain
    1.9395,  # w11: lapse stability scale
    0.1100,  # w12: difficulty impact on lapse
    0.2939,  # w13: previous stability impact on lapse
    2.2697,  # w14: retrievability impact on lapse
    0.2315,  # w15: Hard penalty
    2.9898,  # w16: Easy bonus
    0.5100,  # w17: short-term stability scale
    0.6000,  # w18: short-term curve shape
    # e^(w17 * w18) is also the minimum factor a lapse divides stability by
)
WEIGHT_COUNT = 19

# Plausible ranges used when validating calibrated weights.
WEIGHT_BOUNDS: tuple[tuple[float, float], ...] = (
    (0.01, 100.0),
    (0.01, 100.0),
    (0.01, 100.0),
    (0.01, 100.0),
    (1.0, 10.0),
    (0.001, 4.0),
    (0.001, 4.0),
    (0.001, 0.75),
    (0.0, 4.5),
    (0.0, 0.8),
    (0.001, 3.5),
    (0.001, 5.0),
    (0.001, 0.25),
    (0.001, 0.9),
    (0.0, 4.0),
    (0.0, 1.0),
    (1.0, 6.0),
    (0.01, 2.0),  # w17 and w18 stay positive so a lapse always lowers stability
    (0.01, 2.0),
)

# ---------- Memory state bounds ----------
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0
MIN_INITIAL_STABILITY = 0.1

# ---------- Interval scheduling ----------
DEFAULT_REQUESTED_RETENTION = 0.9
DEFAULT_MINIMUM_INTERVAL = 1
DEFAULT_MAXIMUM_INTERVAL = 36500  # 100 years
DEFAULT_FUZZ_FACTOR = 0.05
FUZZ_MIN_INTERVAL = 3  # shorter intervals are never fuzzed
FUZZ_FLOOR = 2

# ---------- Card classification ----------
DEFAULT_LEECH_THRESHOLD = 8
DEFAULT_MATURE_STABILITY = 21.0

# ---------- Workload ----------
DEFAULT_NEW_CARDS_PER_DAY = 20
DEFAULT_FORECAST_DAYS = 30

# ---------- Streaks / heatmap ----------
DEFAULT_ACTIVITY_THRESHOLD = 0
DEFAULT_STREAK_FREEZES = 3
DEFAULT_HEATMAP_WEEKS = 52
DEFAULT_HEATMAP_PERCENTILE = 0.9
HEATMAP_LEVELS = 4

# ---------- Retention history ----------
RETENTION_HISTORY_DAYS = 30
RETENTION_TREND_WINDOW = 7

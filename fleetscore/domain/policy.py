"""
Scoring policy constants.

All weights and thresholds of the engine live here so product can change
them in one place. Sub-score computations never hard-code them.

Composite performance (per operative):
  punctuality 30% · reliability 25% · checklist 20% · documentation 15% · volume 10%

Operative rating:
  performance 30% · availability 25% · revenue 25% · versatility 20%
  client satisfaction 20% (placeholder, excluded until a feedback source exists)
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping

PERFORMANCE_WEIGHTS: dict[str, float] = {
    "punctuality": 0.30,
    "reliability": 0.25,
    "checklist": 0.20,
    "documentation": 0.15,
    "volume": 0.10,
}

RATING_WEIGHTS: dict[str, float] = {
    "performance": 0.30,
    "availability": 0.25,
    "revenue": 0.25,
    "versatility": 0.20,
}
CLIENT_SATISFACTION_WEIGHT = 0.20

# Metric aggregator
MINOR_DELAY_MINUTES = 15
VOLUME_SATURATION = 100

# Rating windows
REVENUE_WINDOW_DAYS = 90
VERSATILITY_WINDOW_DAYS = 15
RECENT_SERVICE_DAYS = 7
RELAXED_SERVICE_DAYS = 30

# Fleet ranking
FLEET_WINDOW_DAYS = 30
FLEET_SCORE_WEIGHTS: dict[str, float] = {
    "completions": 0.4,
    "revenue": 0.3,
    "punctuality": 0.3,
}
FLEET_COMPLETIONS_TARGET = 20
FLEET_REVENUE_TARGET = 100_000
FLEET_GRACE_MINUTES = 30
FLEET_DEFAULT_PUNCTUALITY = 50

# Pool benchmarks
BENCHMARK_WINDOW_MONTHS = 6
BENCHMARK_MIN_SERVICES = 3


def round_half_up(value, places: int = 0):
    """
    Round half away from zero (2.5 -> 3), unlike Python's banker's round().

    Returns int for places=0, float otherwise.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def weighted_score(scores: Mapping[str, float], weights: Mapping[str, float]) -> int:
    """round(Σ weight_i * score_i) over the weight keys, in exact decimal arithmetic."""
    total = sum(
        (Decimal(str(weight)) * Decimal(str(scores[key])) for key, weight in weights.items()),
        Decimal(0),
    )
    return round_half_up(total)


def performance_score(sub_scores: Mapping[str, float]) -> int:
    return weighted_score(sub_scores, PERFORMANCE_WEIGHTS)

"""
Population-relative statistics.

Two percentile conventions exist and must not be mixed:

  TopPercent          fleet ranking, lower is better: position 1 of 10 -> 10 ("top 10%")
  StandingPercentile  pool benchmarks, higher is better: rank 1 of 10 -> 100

Both return None for an empty population instead of dividing by zero.
"""
from enum import Enum
from typing import Sequence

from fleetscore.domain.policy import round_half_up


class TopPercent:
    name = "top_percent"
    higher_is_better = False

    def compute(self, position: int, population: int) -> int | None:
        if population <= 0:
            return None
        return round_half_up(position / population * 100)


class StandingPercentile:
    name = "standing"
    higher_is_better = True

    def compute(self, rank: int, population: int) -> int | None:
        if population <= 0:
            return None
        return round_half_up((population - rank + 1) / population * 100)


class Tier(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    STANDARD = "standard"

    @classmethod
    def from_top_percent(cls, percentile: int) -> "Tier":
        if percentile <= 10:
            return cls.GOLD
        if percentile <= 25:
            return cls.SILVER
        if percentile <= 50:
            return cls.BRONZE
        return cls.STANDARD


def nearest_rank(sorted_values: Sequence[float], fraction: float) -> float:
    """
    Value at index floor(fraction * n) of an ascending sequence (0 if empty).
    """
    if not sorted_values:
        return 0.0
    idx = min(len(sorted_values) - 1, int(fraction * len(sorted_values)))
    return float(sorted_values[idx])


def descending_ranks(values: dict[str, float]) -> dict[str, int]:
    """1-based ranks by value descending; ties ordered by key ascending."""
    ordered = sorted(values.items(), key=lambda kv: (-kv[1], kv[0]))
    return {key: i + 1 for i, (key, _) in enumerate(ordered)}

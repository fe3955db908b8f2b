"""
Punctuality policies.

Two intentionally different formulas are in use:

  BucketedPunctuality  operative performance card; share of on-time check-ins,
                       delays bucketed as minor (<= 15 min) or major
  DecayPunctuality     fleet ranking; per-service score decays linearly to 0
                       over a 30 minute grace period, then averaged

Only executions with both a scheduled time and a check-in are classified.
"""
from dataclasses import dataclass
from typing import Iterable

from fleetscore.domain.policy import (
    MINOR_DELAY_MINUTES,
    FLEET_GRACE_MINUTES,
    FLEET_DEFAULT_PUNCTUALITY,
    round_half_up,
)
from fleetscore.domain.records import ExecutionView

ON_TIME = "on_time"
MINOR_DELAY = "minor_delay"
MAJOR_DELAY = "major_delay"


@dataclass(frozen=True)
class PunctualityTally:
    on_time: int = 0
    minor_delay: int = 0
    major_delay: int = 0

    @property
    def classified(self) -> int:
        return self.on_time + self.minor_delay + self.major_delay

    @property
    def score(self) -> int:
        # 0 with nothing classified is a floor, not a missing-data marker
        if self.classified == 0:
            return 0
        return round_half_up(self.on_time / self.classified * 100)


class BucketedPunctuality:
    name = "bucketed"

    def __init__(self, minor_delay_minutes: int = MINOR_DELAY_MINUTES):
        self.minor_delay_minutes = minor_delay_minutes

    def classify(self, minutes_late: float) -> str:
        if minutes_late <= 0:
            return ON_TIME
        if minutes_late <= self.minor_delay_minutes:
            return MINOR_DELAY
        return MAJOR_DELAY

    def tally(self, executions: Iterable[ExecutionView]) -> PunctualityTally:
        counts = {ON_TIME: 0, MINOR_DELAY: 0, MAJOR_DELAY: 0}
        for ex in executions:
            late = ex.minutes_late()
            if late is None:
                continue
            counts[self.classify(late)] += 1
        return PunctualityTally(
            on_time=counts[ON_TIME],
            minor_delay=counts[MINOR_DELAY],
            major_delay=counts[MAJOR_DELAY],
        )


class DecayPunctuality:
    name = "decay"

    def __init__(
        self,
        grace_minutes: int = FLEET_GRACE_MINUTES,
        default_score: float = FLEET_DEFAULT_PUNCTUALITY,
    ):
        self.grace_minutes = grace_minutes
        self.default_score = default_score

    def service_score(self, minutes_late: float) -> float:
        if minutes_late <= 0:
            return 100.0
        if minutes_late <= self.grace_minutes:
            return max(0.0, 100 - (minutes_late / self.grace_minutes) * 100)
        return 0.0

    def average(self, executions: Iterable[ExecutionView]) -> float:
        scores = [
            self.service_score(late)
            for late in (ex.minutes_late() for ex in executions)
            if late is not None
        ]
        if not scores:
            return float(self.default_score)
        return sum(scores) / len(scores)

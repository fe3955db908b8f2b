"""
Operative rating: dimensions, star bands and labels.

Each dimension value is a tagged variant: Available(score) or Unavailable(reason).
Only Available dimensions can enter the weighted composite, so a placeholder
dimension (client satisfaction) cannot leak into the score as a zero.

Availability steps:
  100  available, active, last service within 7 days
   80  available, active, last service within 30 days
   60  available, active, older or no service
   40  active but not marked available
   20  not active (floor)
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Union

from fleetscore.domain.policy import (
    RECENT_SERVICE_DAYS,
    RELAXED_SERVICE_DAYS,
    round_half_up,
    weighted_score,
)
from fleetscore.domain.records import OperativeView, PREFERENCE_INDIFFERENT, as_utc


@dataclass(frozen=True)
class Available:
    score: int


@dataclass(frozen=True)
class Unavailable:
    reason: str


DimensionValue = Union[Available, Unavailable]


@dataclass(frozen=True)
class RatingDimension:
    key: str
    label: str
    weight: float
    value: DimensionValue

    @property
    def available(self) -> bool:
        return isinstance(self.value, Available)

    @property
    def score(self) -> int | None:
        return self.value.score if isinstance(self.value, Available) else None

    @property
    def stars(self) -> int | None:
        return stars_for_score(self.value.score) if isinstance(self.value, Available) else None

    def as_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "weight": self.weight,
            "available": self.available,
            "score": self.score,
            "stars": self.stars,
            "reason": self.value.reason if isinstance(self.value, Unavailable) else None,
        }


def general_score(dimensions: Iterable[RatingDimension]) -> int:
    active = [d for d in dimensions if isinstance(d.value, Available)]
    return weighted_score(
        {d.key: d.value.score for d in active},
        {d.key: d.weight for d in active},
    )


# ── Star bands ───────────────────────────────────────────────────────────────

_STAR_BANDS = ((81, 5), (61, 4), (41, 3), (21, 2))

_LABEL_BANDS = (
    (4.5, "Excellent"),
    (3.5, "Very Good"),
    (2.5, "Good"),
    (1.5, "Fair"),
)


def stars_for_score(score: int) -> int:
    for threshold, stars in _STAR_BANDS:
        if score >= threshold:
            return stars
    return 1


def refined_rating(score: int) -> float:
    """Integer stars refined to one decimal by the position inside the 20-point band."""
    rating = stars_for_score(score) + (score % 20) / 20
    rating = min(5.0, max(1.0, rating))
    return round_half_up(rating, 1)


def rating_label(rating: float) -> str:
    for threshold, label in _LABEL_BANDS:
        if rating >= threshold:
            return label
    return "Critical"


# ── Dimension scores ─────────────────────────────────────────────────────────

def availability_score(operative: OperativeView | None, now: datetime) -> int:
    if operative is None or not operative.is_active:
        return 20
    if not operative.is_available:
        return 40
    last = as_utc(operative.last_service_at)
    if last is not None and now - last <= timedelta(days=RECENT_SERVICE_DAYS):
        return 100
    if last is not None and now - last <= timedelta(days=RELAXED_SERVICE_DAYS):
        return 80
    return 60


def revenue_score(value: float, p50: float, p90: float) -> int:
    if p50 <= 0:
        return 50
    if value >= p90:
        return 100
    if value >= p50:
        return round_half_up(60 + (value - p50) / (p90 - p50) * 40)
    return round_half_up(max(10.0, value / p50 * 60))


def versatility_score(local: int, out_of_town: int, preference: str | None) -> int:
    if local == 0 and out_of_town == 0:
        return 40
    ratio = min(local, out_of_town) / max(local, out_of_town)
    score = 40 + ratio * 60
    if preference == PREFERENCE_INDIFFERENT:
        score = min(100.0, score + 10)
    return round_half_up(score)

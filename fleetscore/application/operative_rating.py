"""
Operative rating: weighted general score, 1–5 stars and label.

Dimensions:
  performance          30%  composite from PerformanceMetricsService
  availability         25%  stepped, from the operative record
  revenue              25%  trailing 90 days vs fleet P50/P90
  versatility          20%  local vs out-of-town mix over 15 days
  client_satisfaction  20%  placeholder, always Unavailable

Performance is a blocking dependency: if it cannot be computed the whole
rating is reported as unavailable instead of substituting a default.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from fleetscore.application.performance_metrics import PerformanceMetricsService
from fleetscore.application.source_reads import read_sources
from fleetscore.domain.identity import (
    FuzzyIdentityResolver,
    NameResolution,
    require_identifiers,
    normalize_name,
)
from fleetscore.domain.percentiles import nearest_rank
from fleetscore.domain.policy import (
    RATING_WEIGHTS,
    CLIENT_SATISFACTION_WEIGHT,
    REVENUE_WINDOW_DAYS,
    VERSATILITY_WINDOW_DAYS,
    round_half_up,
)
from fleetscore.domain.rating import (
    Available,
    Unavailable,
    RatingDimension,
    general_score,
    stars_for_score,
    refined_rating,
    rating_label,
    availability_score,
    revenue_score,
    versatility_score,
)
from fleetscore.domain.records import ExecutionView, SCOPE_LOCAL, SCOPE_OUT_OF_TOWN
from fleetscore.infrastructure.records import RecordStore

STATUS_OK = "ok"
STATUS_UNAVAILABLE = "unavailable"

DIMENSION_LABELS: dict[str, str] = {
    "performance": "Performance",
    "availability": "Availability",
    "revenue": "Revenue",
    "versatility": "Versatility",
    "client_satisfaction": "Client satisfaction",
}


@dataclass(frozen=True)
class RatingSnapshot:
    operative_id: str
    name: str
    status: str
    error: str | None = None

    general_score: int | None = None
    rating: float | None = None
    stars: int | None = None
    label: str | None = None
    dimensions: tuple[RatingDimension, ...] = field(default_factory=tuple)
    performance_breakdown: dict[str, int] = field(default_factory=dict)

    revenue_90d: float = 0.0
    revenue_p50: float = 0.0
    revenue_p90: float = 0.0
    fleet_revenue_available: bool = False
    local_services: int = 0
    out_of_town_services: int = 0

    identity: NameResolution | None = None
    failed_sources: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def unavailable(cls, operative_id: str, name: str, error: str) -> "RatingSnapshot":
        return cls(operative_id=operative_id, name=name, status=STATUS_UNAVAILABLE, error=error)

    def as_dict(self) -> dict[str, Any]:
        return {
            "operative_id": self.operative_id,
            "name": self.name,
            "status": self.status,
            "error": self.error,
            "general_score": self.general_score,
            "rating": self.rating,
            "stars": self.stars,
            "label": self.label,
            "dimensions": [d.as_dict() for d in self.dimensions],
            "performance_breakdown": dict(self.performance_breakdown),
            "revenue_90d": self.revenue_90d,
            "revenue_p50": self.revenue_p50,
            "revenue_p90": self.revenue_p90,
            "fleet_revenue_available": self.fleet_revenue_available,
            "local_services": self.local_services,
            "out_of_town_services": self.out_of_town_services,
            "identity": self.identity.as_dict() if self.identity else None,
            "failed_sources": list(self.failed_sources),
        }


def _revenue(executions: list[ExecutionView]) -> Decimal:
    return sum((ex.operative_cost for ex in executions), Decimal(0))


def _rows_for(key: str | None, executions: list[ExecutionView]) -> list[ExecutionView]:
    if key is None:
        return []
    return [ex for ex in executions if normalize_name(ex.operative_name) == key]


def fleet_revenue_percentiles(executions: list[ExecutionView]) -> tuple[float, float]:
    """P50/P90 of per-operative revenue among operatives with positive revenue."""
    totals: dict[str, Decimal] = defaultdict(Decimal)
    for ex in executions:
        key = normalize_name(ex.operative_name)
        if key:
            totals[key] += ex.operative_cost
    values = sorted(float(v) for v in totals.values() if v > 0)
    return nearest_rank(values, 0.5), nearest_rank(values, 0.9)


class OperativeRatingService:
    def __init__(
        self,
        store: RecordStore,
        metrics: PerformanceMetricsService | None = None,
        resolver: FuzzyIdentityResolver | None = None,
    ):
        self.store = store
        self.metrics = metrics or PerformanceMetricsService(store)
        self.resolver = resolver or FuzzyIdentityResolver()

    def get_operative_rating(
        self,
        operative_id: str,
        name: str,
        phone: str | None = None,
        now: datetime | None = None,
    ) -> RatingSnapshot:
        """
        Raises:
            MissingIdentifierError: operative_id or name is blank
        """
        require_identifiers(operative_id=operative_id, name=name)
        if now is None:
            now = datetime.now(timezone.utc)
        revenue_since = now - timedelta(days=REVENUE_WINDOW_DAYS)
        versatility_since = now - timedelta(days=VERSATILITY_WINDOW_DAYS)

        src = read_sources({
            "performance": lambda: self.metrics.get_performance_metrics(
                operative_id, name, phone, now=now,
            ),
            "operative": lambda: self.store.get_operative(operative_id),
            "own_revenue": lambda: self.store.list_executions(
                name=name, since=revenue_since, until=now, completed_only=True,
            ),
            "fleet_revenue": lambda: self.store.list_executions(
                since=revenue_since, until=now, completed_only=True,
            ),
            "recent_services": lambda: self.store.list_executions(
                name=name, since=versatility_since, until=now, completed_only=True,
            ),
        })

        if "performance" in src.errors:
            return RatingSnapshot.unavailable(
                operative_id, name, f"performance metrics unavailable: {src.errors['performance']}",
            )
        metrics = src.get("performance")

        # ── Availability ──
        operative = src.get("operative")
        availability = availability_score(operative, now)

        # ── Identity ──
        # Own figures are keyed the same way as the fleet totals behind P50/P90
        fleet_rows = src.get("fleet_revenue", [])
        own_rows = src.get("own_revenue", [])
        recent_rows = src.get("recent_services", [])
        identity = self.resolver.resolve(
            name, [ex.operative_name for ex in fleet_rows + own_rows + recent_rows],
        )

        # ── Revenue ──
        own_revenue = float(_revenue(_rows_for(identity.key, own_rows)))
        fleet_available = "fleet_revenue" not in src.errors
        p50, p90 = fleet_revenue_percentiles(fleet_rows)
        revenue = revenue_score(own_revenue, p50, p90)

        # ── Versatility ──
        recent = _rows_for(identity.key, recent_rows)
        local = sum(1 for ex in recent if ex.service_scope == SCOPE_LOCAL)
        out_of_town = sum(1 for ex in recent if ex.service_scope == SCOPE_OUT_OF_TOWN)
        preference = operative.service_preference if operative else None
        versatility = versatility_score(local, out_of_town, preference)

        scores = {
            "performance": metrics.performance,
            "availability": availability,
            "revenue": revenue,
            "versatility": versatility,
        }
        dimensions = tuple(
            RatingDimension(key, DIMENSION_LABELS[key], weight, Available(scores[key]))
            for key, weight in RATING_WEIGHTS.items()
        ) + (
            RatingDimension(
                "client_satisfaction",
                DIMENSION_LABELS["client_satisfaction"],
                CLIENT_SATISFACTION_WEIGHT,
                Unavailable("no client feedback source"),
            ),
        )

        score = general_score(dimensions)
        rating = refined_rating(score)

        return RatingSnapshot(
            operative_id=operative_id,
            name=name,
            status=STATUS_OK,
            general_score=score,
            rating=rating,
            stars=stars_for_score(score),
            label=rating_label(rating),
            dimensions=dimensions,
            performance_breakdown=metrics.breakdown,
            revenue_90d=round_half_up(own_revenue, 2),
            revenue_p50=round_half_up(p50, 2),
            revenue_p90=round_half_up(p90, 2),
            fleet_revenue_available=fleet_available and p50 > 0,
            local_services=local,
            out_of_town_services=out_of_town,
            identity=identity,
            failed_sources=tuple(sorted(set(src.failed) | set(metrics.failed_sources))),
        )

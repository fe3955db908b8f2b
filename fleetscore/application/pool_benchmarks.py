"""
Pool benchmarks: unit economics of one operative against qualifying peers.

Window: trailing 6 calendar months, completed services with positive
operative cost. Peers with fewer than 3 such services are excluded from
every mean, rank and denominator.

Ranks are 1-based, descending, computed independently for revenue, service
count and revenue per km. The overall standing percentile is
higher-is-better (rank 1 of N -> 100), the opposite of the fleet ranking's
top-X% percentile.
"""
from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from fleetscore.domain.identity import (
    FuzzyIdentityResolver,
    NameResolution,
    normalize_name,
    require_identifiers,
)
from fleetscore.domain.percentiles import StandingPercentile, descending_ranks
from fleetscore.domain.policy import (
    BENCHMARK_WINDOW_MONTHS,
    BENCHMARK_MIN_SERVICES,
    round_half_up,
)
from fleetscore.domain.records import ExecutionView
from fleetscore.infrastructure.records import RecordStore


def months_before(dt: datetime, n: int) -> datetime:
    month = dt.month - 1 - n
    year = dt.year + month // 12
    month = month % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


@dataclass(frozen=True)
class PeerStats:
    name: str
    services: int
    revenue: float
    distance_km: float
    revenue_per_km: float
    revenue_per_service: float

    def values(self) -> dict[str, Any]:
        return {
            "services": self.services,
            "revenue": self.revenue,
            "distance_km": self.distance_km,
            "revenue_per_km": self.revenue_per_km,
            "revenue_per_service": self.revenue_per_service,
        }


@dataclass(frozen=True)
class BenchmarkSnapshot:
    name: str
    available: bool
    population_size: int
    window_start: datetime
    window_end: datetime

    avg_revenue: float = 0.0
    avg_revenue_per_km: float = 0.0
    avg_revenue_per_service: float = 0.0
    avg_services: float = 0.0

    operative: PeerStats | None = None
    revenue_rank: int | None = None
    services_rank: int | None = None
    revenue_per_km_rank: int | None = None
    overall_percentile: int | None = None

    top_performer: dict[str, Any] = field(default_factory=dict)
    identity: NameResolution | None = None

    @property
    def qualifies(self) -> bool:
        return self.operative is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "available": self.available,
            "qualifies": self.qualifies,
            "population_size": self.population_size,
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "avg_revenue": self.avg_revenue,
            "avg_revenue_per_km": self.avg_revenue_per_km,
            "avg_revenue_per_service": self.avg_revenue_per_service,
            "avg_services": self.avg_services,
            "operative": self.operative.values() if self.operative else None,
            "revenue_rank": self.revenue_rank,
            "services_rank": self.services_rank,
            "revenue_per_km_rank": self.revenue_per_km_rank,
            "overall_percentile": self.overall_percentile,
            "top_performer": dict(self.top_performer),
            "identity": self.identity.as_dict() if self.identity else None,
        }


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def build_peers(executions: list[ExecutionView], min_services: int = BENCHMARK_MIN_SERVICES) -> list[PeerStats]:
    services: dict[str, int] = defaultdict(int)
    revenue: dict[str, Decimal] = defaultdict(Decimal)
    distance: dict[str, Decimal] = defaultdict(Decimal)

    for ex in executions:
        key = normalize_name(ex.operative_name)
        if not key or not ex.is_completed or ex.operative_cost <= 0:
            continue
        services[key] += 1
        revenue[key] += ex.operative_cost
        distance[key] += ex.distance_km

    peers = []
    for key in sorted(services):
        count = services[key]
        if count < min_services:
            continue
        rev = float(revenue[key])
        km = float(distance[key])
        peers.append(PeerStats(
            name=key,
            services=count,
            revenue=round_half_up(rev, 2),
            distance_km=round_half_up(km, 2),
            revenue_per_km=round_half_up(rev / km, 2) if km > 0 else 0.0,
            revenue_per_service=round_half_up(rev / count, 2),
        ))
    return peers


class PoolBenchmarkService:
    def __init__(
        self,
        store: RecordStore,
        resolver: FuzzyIdentityResolver | None = None,
    ):
        self.store = store
        self.resolver = resolver or FuzzyIdentityResolver()
        self.percentile = StandingPercentile()

    def get_pool_benchmarks(self, name: str, now: datetime | None = None) -> BenchmarkSnapshot:
        """
        Raises:
            MissingIdentifierError: name is blank
        """
        require_identifiers(name=name)
        if now is None:
            now = datetime.now(timezone.utc)
        since = months_before(now, BENCHMARK_WINDOW_MONTHS)

        executions = self.store.list_executions(since=since, until=now, completed_only=True)
        peers = build_peers(executions)

        if not peers:
            return BenchmarkSnapshot(
                name=name, available=False, population_size=0,
                window_start=since, window_end=now,
            )

        size = len(peers)
        by_name = {p.name: p for p in peers}
        revenue_ranks = descending_ranks({p.name: p.revenue for p in peers})
        services_ranks = descending_ranks({p.name: p.services for p in peers})
        rpk_ranks = descending_ranks({p.name: p.revenue_per_km for p in peers})

        ordered = sorted(peers, key=lambda p: revenue_ranks[p.name])
        top = ordered[0]
        resolution = self.resolver.resolve(name, [p.name for p in ordered])
        operative = by_name.get(resolution.key) if resolution.key else None

        revenue_rank = revenue_ranks[operative.name] if operative else None

        return BenchmarkSnapshot(
            name=name,
            available=True,
            population_size=size,
            window_start=since,
            window_end=now,
            avg_revenue=round_half_up(_mean([p.revenue for p in peers]), 2),
            avg_revenue_per_km=round_half_up(
                _mean([p.revenue_per_km for p in peers if p.distance_km > 0]), 2,
            ),
            avg_revenue_per_service=round_half_up(_mean([p.revenue_per_service for p in peers]), 2),
            avg_services=round_half_up(_mean([p.services for p in peers]), 1),
            operative=operative,
            revenue_rank=revenue_rank,
            services_rank=services_ranks[operative.name] if operative else None,
            revenue_per_km_rank=rpk_ranks[operative.name] if operative else None,
            overall_percentile=self.percentile.compute(revenue_rank, size) if operative else None,
            top_performer=top.values(),
            identity=resolution,
        )

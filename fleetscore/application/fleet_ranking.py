"""
Fleet ranking: 30-day fleet score, position, top-X% percentile and tier.

    fleet_score = 0.4 * min(100, completions / 20 * 100)
                + 0.3 * min(100, revenue / 100 000 * 100)
                + 0.3 * punctuality (decay policy, 50 when untimed)

Executions are grouped by normalized operative name. Two monetary bases are
in use by different screens (operative cost, client charge); each is its own
RankingPolicy and they are never merged.

The single-operative lookup and the batch map are both derived from one
`rank()` pass, so they always agree for the same snapshot.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from fleetscore.domain.identity import (
    FuzzyIdentityResolver,
    NameResolution,
    normalize_name,
    require_identifiers,
)
from fleetscore.domain.percentiles import TopPercent, Tier
from fleetscore.domain.policy import (
    FLEET_WINDOW_DAYS,
    FLEET_SCORE_WEIGHTS,
    FLEET_COMPLETIONS_TARGET,
    FLEET_REVENUE_TARGET,
    round_half_up,
)
from fleetscore.domain.punctuality import DecayPunctuality
from fleetscore.domain.records import ExecutionView
from fleetscore.infrastructure.records import RecordStore

logger = logging.getLogger(__name__)

BASIS_COST = "cost"
BASIS_SALE = "sale"


@dataclass(frozen=True)
class RankingPolicy:
    basis: str
    window_days: int = FLEET_WINDOW_DAYS
    completions_target: int = FLEET_COMPLETIONS_TARGET
    revenue_target: int = FLEET_REVENUE_TARGET

    def value_of(self, ex: ExecutionView) -> Decimal:
        if self.basis == BASIS_SALE:
            return ex.client_charge
        return ex.operative_cost


COST_RANKING = RankingPolicy(basis=BASIS_COST)
SALE_RANKING = RankingPolicy(basis=BASIS_SALE)

RANKING_POLICIES: dict[str, RankingPolicy] = {
    BASIS_COST: COST_RANKING,
    BASIS_SALE: SALE_RANKING,
}


@dataclass(frozen=True)
class RankingEntry:
    name: str
    position: int
    fleet_size: int
    percentile: int
    tier: Tier
    fleet_score: float
    completions: int
    revenue: float
    punctuality: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "position": self.position,
            "fleet_size": self.fleet_size,
            "percentile": self.percentile,
            "tier": self.tier.value,
            "fleet_score": self.fleet_score,
            "completions": self.completions,
            "revenue": self.revenue,
            "punctuality": self.punctuality,
        }


@dataclass(frozen=True)
class RankingLookup:
    entry: RankingEntry | None
    resolution: NameResolution

    @property
    def available(self) -> bool:
        return self.entry is not None


class FleetRankingService:
    def __init__(
        self,
        store: RecordStore,
        policy: RankingPolicy = COST_RANKING,
        punctuality: DecayPunctuality | None = None,
        resolver: FuzzyIdentityResolver | None = None,
    ):
        self.store = store
        self.policy = policy
        self.punctuality = punctuality or DecayPunctuality()
        self.percentile = TopPercent()
        self.resolver = resolver or FuzzyIdentityResolver()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def rank(self, now: datetime | None = None) -> list[RankingEntry]:
        """Whole fleet, best first. Empty list when nobody worked in the window."""
        if now is None:
            now = datetime.now(timezone.utc)
        since = now - timedelta(days=self.policy.window_days)
        executions = self.store.list_executions(since=since, until=now)
        return self.rank_executions(executions)

    def get_fleet_ranking_batch(self, now: datetime | None = None) -> dict[str, RankingEntry]:
        return {entry.name: entry for entry in self.rank(now)}

    def lookup(self, name: str, now: datetime | None = None) -> RankingLookup:
        """
        Raises:
            MissingIdentifierError: name is blank
        """
        require_identifiers(name=name)
        entries = self.rank(now)
        resolution = self.resolver.resolve(name, [e.name for e in entries])
        if resolution.is_ambiguous:
            logger.warning(
                "Fleet ranking name %r is ambiguous (%s); chose %r over %s",
                name, resolution.confidence.value, resolution.key, list(resolution.alternatives),
            )
        by_name = {e.name: e for e in entries}
        entry = by_name.get(resolution.key) if resolution.key else None
        return RankingLookup(entry=entry, resolution=resolution)

    def get_fleet_ranking(self, name: str, now: datetime | None = None) -> RankingEntry | None:
        return self.lookup(name, now).entry

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def fleet_score(self, completions: int, revenue: float, punctuality: float) -> float:
        w = FLEET_SCORE_WEIGHTS
        completion_part = min(100.0, completions / self.policy.completions_target * 100)
        revenue_part = min(100.0, revenue / self.policy.revenue_target * 100)
        return (
            w["completions"] * completion_part
            + w["revenue"] * revenue_part
            + w["punctuality"] * punctuality
        )

    def rank_executions(self, executions: list[ExecutionView]) -> list[RankingEntry]:
        groups: dict[str, list[ExecutionView]] = defaultdict(list)
        for ex in executions:
            key = normalize_name(ex.operative_name)
            if key:
                groups[key].append(ex)

        scored = []
        for key, rows in groups.items():
            completed = [ex for ex in rows if ex.is_completed]
            revenue = float(sum(
                (v for v in (self.policy.value_of(ex) for ex in completed) if v > 0),
                Decimal(0),
            ))
            punctuality = self.punctuality.average(rows)
            raw = self.fleet_score(len(completed), revenue, punctuality)
            scored.append((key, raw, len(completed), revenue, punctuality))

        # Strict total order: score descending, then name
        scored.sort(key=lambda s: (-s[1], s[0]))
        size = len(scored)

        entries = []
        for position, (key, raw, completions, revenue, punctuality) in enumerate(scored, start=1):
            percentile = self.percentile.compute(position, size)
            entries.append(RankingEntry(
                name=key,
                position=position,
                fleet_size=size,
                percentile=percentile,
                tier=Tier.from_top_percent(percentile),
                fleet_score=round_half_up(raw, 1),
                completions=completions,
                revenue=round_half_up(revenue, 2),
                punctuality=round_half_up(punctuality, 1),
            ))
        return entries

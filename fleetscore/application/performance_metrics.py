"""
Performance metrics: per-operative sub-scores and composite performance.

Sub-scores (0–100, integers):
  punctuality    share of on-time check-ins (bucketed policy); 0 with no timed services
  reliability    assignments not cancelled nor rejected; 100 with no assignments
  checklist      checklists filed per completed service (not clamped); 0 with no completions
  documentation  verified / uploaded documents; 0 with nothing uploaded
  volume         completed services, saturating at 100

Each source collection is read concurrently. A collection that fails to load
degrades only its own sub-scores to their empty defaults and is listed in
`failed_sources`; it never aborts the snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from fleetscore.application.source_reads import read_sources
from fleetscore.domain.identity import (
    FuzzyIdentityResolver,
    NameResolution,
    normalize_name,
    require_identifiers,
)
from fleetscore.domain.policy import VOLUME_SATURATION, performance_score, round_half_up
from fleetscore.domain.punctuality import BucketedPunctuality
from fleetscore.domain.records import ChecklistView
from fleetscore.infrastructure.records import RecordStore


@dataclass(frozen=True)
class MetricSnapshot:
    operative_id: str
    name: str
    phone: str | None

    # Sub-scores
    punctuality: int
    reliability: int
    checklist: int
    documentation: int
    volume: int
    performance: int

    # Punctuality drill-down
    on_time: int
    minor_delay: int
    major_delay: int
    punctuality_classified: int

    # Assignments
    total_assignments: int
    confirmed_assignments: int
    assignment_rate: int
    cancellations: int
    rejections: int

    # Executions
    total_executions: int
    completed_executions: int
    checklists_filed: int
    distance_total: float
    revenue_total: float

    # Documents
    documents_uploaded: int
    documents_verified: int
    documents_current: int

    identity: NameResolution
    # Other operative names whose executions are included in the counts above
    merged_names: tuple[str, ...] = field(default_factory=tuple)
    alerts: tuple[dict, ...] = field(default_factory=tuple)
    failed_sources: tuple[str, ...] = field(default_factory=tuple)

    @property
    def breakdown(self) -> dict[str, int]:
        return {
            "punctuality": self.punctuality,
            "reliability": self.reliability,
            "checklist": self.checklist,
            "documentation": self.documentation,
            "volume": self.volume,
        }

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["identity"] = self.identity.as_dict()
        data["merged_names"] = list(self.merged_names)
        data["alerts"] = [dict(a) for a in self.alerts]
        data["failed_sources"] = list(self.failed_sources)
        return data


def _filed_services(checklists: list[ChecklistView]) -> int:
    """Distinct services with a completed checklist."""
    keys = {c.service_id or f"checklist-{c.id}" for c in checklists if c.is_complete}
    return len(keys)


def compliance_alerts(
    checklist_score: int,
    completed: int,
    documentation_score: int,
    uploaded: int,
    documents_known: bool = True,
) -> tuple[dict, ...]:
    alerts = []
    if checklist_score == 0 and completed > 0:
        alerts.append({
            "code": "checklists_missing",
            "message": f"{completed} completed services without a pre-service checklist",
        })
    if not documents_known:
        return tuple(alerts)
    if documentation_score == 0 and uploaded > 0:
        alerts.append({
            "code": "documents_unverified",
            "message": f"{uploaded} documents pending verification",
        })
    if uploaded == 0:
        alerts.append({
            "code": "documents_missing",
            "message": "No documents uploaded to the portal",
        })
    return tuple(alerts)


class PerformanceMetricsService:
    def __init__(
        self,
        store: RecordStore,
        punctuality: BucketedPunctuality | None = None,
        resolver: FuzzyIdentityResolver | None = None,
    ):
        self.store = store
        self.punctuality = punctuality or BucketedPunctuality()
        self.resolver = resolver or FuzzyIdentityResolver()

    def get_performance_metrics(
        self,
        operative_id: str,
        name: str,
        phone: str | None = None,
        lookback_days: int | None = None,
        now: datetime | None = None,
    ) -> MetricSnapshot:
        """
        Compute the metric snapshot for one operative.

        Raises:
            MissingIdentifierError: operative_id or name is blank
        """
        require_identifiers(operative_id=operative_id, name=name)
        if now is None:
            now = datetime.now(timezone.utc)
        since = now - timedelta(days=lookback_days) if lookback_days is not None else None
        until = now if lookback_days is not None else None

        reads = {
            "assignments": lambda: self.store.list_assignments(operative_id, since, until),
            "rejections": lambda: self.store.list_rejections(operative_id, since, until),
            "executions": lambda: self.store.list_executions(name=name, since=since, until=until),
        }
        # Checklists and documents are keyed by phone; no phone means no records, not a failure
        if phone:
            reads["checklists"] = lambda: self.store.list_checklists(phone, since, until)
            reads["documents"] = lambda: self.store.list_documents(phone)

        src = read_sources(reads)
        assignments = src.get("assignments", [])
        rejections = src.get("rejections", [])
        executions = src.get("executions", [])
        checklists = src.get("checklists", [])
        documents = src.get("documents", [])

        # ── Punctuality ──
        tally = self.punctuality.tally(executions)

        # ── Reliability ──
        total_assignments = len(assignments)
        cancellations = sum(1 for a in assignments if a.is_cancelled)
        confirmed = sum(1 for a in assignments if a.is_confirmed)
        rejection_count = len(rejections)
        if total_assignments > 0:
            not_lost = max(0, total_assignments - cancellations - rejection_count)
            reliability = round_half_up(not_lost / total_assignments * 100)
            assignment_rate = round_half_up(confirmed / total_assignments * 100)
        else:
            reliability = 100
            assignment_rate = 0

        # ── Checklist / volume ──
        completed = [ex for ex in executions if ex.is_completed]
        completed_count = len(completed)
        filed = _filed_services(checklists)
        checklist = round_half_up(filed / completed_count * 100) if completed_count else 0
        volume = min(100, round_half_up(completed_count / VOLUME_SATURATION * 100))

        # ── Documentation ──
        uploaded = len(documents)
        verified = sum(1 for d in documents if d.is_verified)
        current = sum(1 for d in documents if d.is_current(now.date()))
        documentation = round_half_up(verified / uploaded * 100) if uploaded else 0

        sub_scores = {
            "punctuality": tally.score,
            "reliability": reliability,
            "checklist": checklist,
            "documentation": documentation,
            "volume": volume,
        }

        # No records at all scores 0; reliability keeps its empty default only as a sub-score
        if not (executions or assignments or rejections or checklists or documents):
            performance = 0
        else:
            performance = performance_score(sub_scores)

        distance = sum((ex.distance_km for ex in completed), Decimal(0))
        revenue = sum((ex.operative_cost for ex in completed), Decimal(0))

        # Execution counts come from a partial-name read and may span several operatives
        identity = self.resolver.resolve(name, [ex.operative_name for ex in executions])
        names = {normalize_name(ex.operative_name) for ex in executions}
        merged = sorted(n for n in names if n and n != identity.key)

        return MetricSnapshot(
            operative_id=operative_id,
            name=name,
            phone=phone,
            punctuality=tally.score,
            reliability=reliability,
            checklist=checklist,
            documentation=documentation,
            volume=volume,
            performance=performance,
            on_time=tally.on_time,
            minor_delay=tally.minor_delay,
            major_delay=tally.major_delay,
            punctuality_classified=tally.classified,
            total_assignments=total_assignments,
            confirmed_assignments=confirmed,
            assignment_rate=assignment_rate,
            cancellations=cancellations,
            rejections=rejection_count,
            total_executions=len(executions),
            completed_executions=completed_count,
            checklists_filed=filed,
            distance_total=round_half_up(distance, 2),
            revenue_total=round_half_up(revenue, 2),
            documents_uploaded=uploaded,
            documents_verified=verified,
            documents_current=current,
            identity=identity,
            merged_names=tuple(merged),
            alerts=compliance_alerts(
                checklist, completed_count, documentation, uploaded,
                documents_known="documents" not in src.errors,
            ),
            failed_sources=src.failed,
        )

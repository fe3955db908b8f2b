"""
Read-only record views consumed by the scoring engine.

Views are detached from the ORM session so they can cross thread
boundaries. Timestamps are always timezone-aware UTC.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

OPERATIVE_ACTIVE = "active"
OPERATIVE_SUSPENDED = "suspended"
OPERATIVE_INACTIVE = "inactive"

PREFERENCE_LOCAL = "local"
PREFERENCE_OUT_OF_TOWN = "out_of_town"
PREFERENCE_INDIFFERENT = "indifferent"

SCOPE_LOCAL = "local"
SCOPE_OUT_OF_TOWN = "out_of_town"

ASSIGNMENT_CONFIRMED = "confirmed"
ASSIGNMENT_CANCELLED = "cancelled"

CHECKLIST_COMPLETE = "complete"

COMPLETED_EXECUTION_STATES = frozenset({"completed", "finished"})


def as_utc(dt: datetime | None) -> datetime | None:
    """Naive datetimes are assumed to be UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class OperativeView:
    id: str
    display_name: str
    phone: str | None
    kind: str
    status: str
    base_zone: str | None
    service_preference: str | None
    is_available: bool
    last_service_at: datetime | None

    @property
    def is_active(self) -> bool:
        return self.status == OPERATIVE_ACTIVE


@dataclass(frozen=True)
class AssignmentView:
    id: int
    operative_id: str
    planning_state: str
    created_at: datetime

    @property
    def is_cancelled(self) -> bool:
        return self.planning_state.lower() == ASSIGNMENT_CANCELLED

    @property
    def is_confirmed(self) -> bool:
        return self.planning_state.lower() == ASSIGNMENT_CONFIRMED


@dataclass(frozen=True)
class ExecutionView:
    id: int
    operative_name: str | None
    state: str | None
    scheduled_at: datetime | None
    checked_in_at: datetime | None
    distance_km: Decimal
    operative_cost: Decimal
    client_charge: Decimal
    service_scope: str | None

    @property
    def is_completed(self) -> bool:
        return (self.state or "").strip().lower() in COMPLETED_EXECUTION_STATES

    def minutes_late(self) -> float | None:
        """Check-in delay in minutes (negative when early), None if untimed."""
        if self.scheduled_at is None or self.checked_in_at is None:
            return None
        return (self.checked_in_at - self.scheduled_at).total_seconds() / 60


@dataclass(frozen=True)
class RejectionView:
    id: int
    operative_id: str
    rejected_at: datetime


@dataclass(frozen=True)
class ChecklistView:
    id: int
    operative_phone: str
    service_id: str | None
    state: str
    filed_at: datetime

    @property
    def is_complete(self) -> bool:
        return self.state.lower() == CHECKLIST_COMPLETE


@dataclass(frozen=True)
class DocumentView:
    id: int
    operative_phone: str
    doc_type: str
    is_verified: bool
    expires_on: date | None
    uploaded_at: datetime

    def is_current(self, today: date) -> bool:
        return self.expires_on is None or self.expires_on >= today

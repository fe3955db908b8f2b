"""
Record store client - read-only access to the operative collections.

Each read opens its own short-lived session from the injected factory, so
independent reads may run on different threads. Rows are returned as
detached views (fleetscore.domain.records), never as ORM instances.
"""
from datetime import datetime
from decimal import Decimal
from typing import Callable

from sqlalchemy.orm import Session

from fleetscore.domain.records import (
    OperativeView,
    AssignmentView,
    ExecutionView,
    RejectionView,
    ChecklistView,
    DocumentView,
    as_utc,
)
from fleetscore.infrastructure.db.models import (
    Operative,
    AssignmentRecord,
    ExecutionRecord,
    RejectionRecord,
    ChecklistRecord,
    DocumentRecord,
)


def _between(query, column, since: datetime | None, until: datetime | None):
    if since is not None:
        query = query.filter(column >= since)
    if until is not None:
        query = query.filter(column <= until)
    return query


def _money(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal(0)


class RecordStore:
    """
    Read access to operatives, assignments, executions, rejections,
    checklists and documents.

    Filters:
      operative id  assignments, rejections, operatives
      name          executions (case-insensitive, partial match)
      phone         executions, checklists, documents
      date range    every timestamped collection (inclusive bounds)
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Operatives
    # ------------------------------------------------------------------

    def get_operative(self, operative_id: str) -> OperativeView | None:
        with self._session_factory() as db:
            row = db.query(Operative).filter(Operative.id == operative_id).first()
            if row is None:
                return None
            return OperativeView(
                id=row.id,
                display_name=row.display_name,
                phone=row.phone,
                kind=row.kind,
                status=row.status,
                base_zone=row.base_zone,
                service_preference=row.service_preference,
                is_available=bool(row.is_available),
                last_service_at=as_utc(row.last_service_at),
            )

    # ------------------------------------------------------------------
    # Assignments / rejections (keyed by operative id)
    # ------------------------------------------------------------------

    def list_assignments(
        self,
        operative_id: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[AssignmentView]:
        with self._session_factory() as db:
            query = db.query(AssignmentRecord).filter(AssignmentRecord.operative_id == operative_id)
            query = _between(query, AssignmentRecord.created_at, since, until)
            return [
                AssignmentView(
                    id=r.id,
                    operative_id=r.operative_id,
                    planning_state=r.planning_state,
                    created_at=as_utc(r.created_at),
                )
                for r in query.order_by(AssignmentRecord.id).all()
            ]

    def list_rejections(
        self,
        operative_id: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[RejectionView]:
        with self._session_factory() as db:
            query = db.query(RejectionRecord).filter(RejectionRecord.operative_id == operative_id)
            query = _between(query, RejectionRecord.rejected_at, since, until)
            return [
                RejectionView(id=r.id, operative_id=r.operative_id, rejected_at=as_utc(r.rejected_at))
                for r in query.order_by(RejectionRecord.id).all()
            ]

    # ------------------------------------------------------------------
    # Executions (keyed by free-text name)
    # ------------------------------------------------------------------

    def list_executions(
        self,
        name: str | None = None,
        phone: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        completed_only: bool = False,
    ) -> list[ExecutionView]:
        """
        Executions by scheduled time. Without name/phone the whole fleet is returned.
        """
        with self._session_factory() as db:
            query = db.query(ExecutionRecord)
            if name is not None:
                query = query.filter(ExecutionRecord.operative_name.icontains(name.strip(), autoescape=True))
            if phone is not None:
                query = query.filter(ExecutionRecord.operative_phone == phone.strip())
            query = _between(query, ExecutionRecord.scheduled_at, since, until)
            rows = query.order_by(ExecutionRecord.id).all()

        views = [
            ExecutionView(
                id=r.id,
                operative_name=r.operative_name,
                state=r.state,
                scheduled_at=as_utc(r.scheduled_at),
                checked_in_at=as_utc(r.checked_in_at),
                distance_km=_money(r.distance_km),
                operative_cost=_money(r.operative_cost),
                client_charge=_money(r.client_charge),
                service_scope=r.service_scope,
            )
            for r in rows
        ]
        if completed_only:
            # State spelling varies between import sources; normalized in the view
            views = [v for v in views if v.is_completed]
        return views

    # ------------------------------------------------------------------
    # Checklists / documents (keyed by phone)
    # ------------------------------------------------------------------

    def list_checklists(
        self,
        phone: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ChecklistView]:
        with self._session_factory() as db:
            query = db.query(ChecklistRecord).filter(ChecklistRecord.operative_phone == phone.strip())
            query = _between(query, ChecklistRecord.filed_at, since, until)
            return [
                ChecklistView(
                    id=r.id,
                    operative_phone=r.operative_phone,
                    service_id=r.service_id,
                    state=r.state,
                    filed_at=as_utc(r.filed_at),
                )
                for r in query.order_by(ChecklistRecord.id).all()
            ]

    def list_documents(
        self,
        phone: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[DocumentView]:
        with self._session_factory() as db:
            query = db.query(DocumentRecord).filter(DocumentRecord.operative_phone == phone.strip())
            query = _between(query, DocumentRecord.uploaded_at, since, until)
            return [
                DocumentView(
                    id=r.id,
                    operative_phone=r.operative_phone,
                    doc_type=r.doc_type,
                    is_verified=bool(r.is_verified),
                    expires_on=r.expires_on,
                    uploaded_at=as_utc(r.uploaded_at),
                )
                for r in query.order_by(DocumentRecord.id).all()
            ]

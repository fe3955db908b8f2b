"""
Pytest fixtures for testing
"""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from fleetscore.infrastructure.db.session import Base
from fleetscore.infrastructure.db.models import (
    Operative,
    AssignmentRecord,
    ExecutionRecord,
    RejectionRecord,
    ChecklistRecord,
    DocumentRecord,
)
from fleetscore.infrastructure.records import RecordStore


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_engine(tmp_path):
    """
    File-backed SQLite engine: source reads run on worker threads,
    each with its own connection, so an in-memory DB would not be shared.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'records.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for seeding"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def store(session_factory) -> RecordStore:
    return RecordStore(session_factory)


class Seeder:
    """Inserts and commits record rows so worker-thread sessions can see them."""

    def __init__(self, db: Session):
        self.db = db

    def operative(
        self,
        operative_id="op-1",
        display_name="ANA LOPEZ",
        *,
        phone=None,
        status="active",
        is_available=True,
        last_service_at=None,
        service_preference=None,
    ):
        row = Operative(
            id=operative_id,
            display_name=display_name,
            phone=phone,
            kind="custodian",
            status=status,
            is_available=is_available,
            last_service_at=last_service_at,
            service_preference=service_preference,
        )
        self.db.add(row)
        self.db.commit()
        return row

    def executions(
        self,
        name,
        count=1,
        *,
        scheduled_at=None,
        late_minutes=0,
        timed=True,
        state="completed",
        cost=0,
        charge=0,
        distance=0,
        scope=None,
        phone=None,
    ):
        scheduled_at = scheduled_at or NOW - timedelta(days=3)
        for _ in range(count):
            self.db.add(ExecutionRecord(
                service_id=f"svc-{self.db.query(ExecutionRecord).count() + 1}",
                operative_name=name,
                operative_phone=phone,
                state=state,
                scheduled_at=scheduled_at,
                checked_in_at=scheduled_at + timedelta(minutes=late_minutes) if timed else None,
                distance_km=Decimal(str(distance)),
                operative_cost=Decimal(str(cost)),
                client_charge=Decimal(str(charge)),
                service_scope=scope,
            ))
            self.db.flush()
        self.db.commit()

    def assignments(self, operative_id, planning_state="confirmed", count=1, *, created_at=None):
        for _ in range(count):
            self.db.add(AssignmentRecord(
                operative_id=operative_id,
                planning_state=planning_state,
                created_at=created_at or NOW - timedelta(days=5),
            ))
        self.db.commit()

    def rejections(self, operative_id, count=1, *, rejected_at=None):
        for _ in range(count):
            self.db.add(RejectionRecord(
                operative_id=operative_id,
                rejected_at=rejected_at or NOW - timedelta(days=5),
            ))
        self.db.commit()

    def checklist(self, phone, service_id, state="complete", *, filed_at=None):
        self.db.add(ChecklistRecord(
            operative_phone=phone,
            service_id=service_id,
            state=state,
            filed_at=filed_at or NOW - timedelta(days=3),
        ))
        self.db.commit()

    def document(self, phone, doc_type="licence", *, is_verified=True, expires_on=None, uploaded_at=None):
        self.db.add(DocumentRecord(
            operative_phone=phone,
            doc_type=doc_type,
            is_verified=is_verified,
            expires_on=expires_on,
            uploaded_at=uploaded_at or NOW - timedelta(days=20),
        ))
        self.db.commit()


@pytest.fixture
def seed(db_session) -> Seeder:
    return Seeder(db_session)

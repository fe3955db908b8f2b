"""
Tests for RecordStore reads against SQLite
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from fleetscore.config import Settings
from fleetscore.infrastructure.db import session as session_module
from fleetscore.infrastructure.db.models import ExecutionRecord

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def test_get_operative_returns_utc_view(store, seed):
    seed.operative("op-1", "ANA LOPEZ", last_service_at=NOW - timedelta(days=2))

    op = store.get_operative("op-1")
    assert op.display_name == "ANA LOPEZ"
    assert op.is_active
    assert op.last_service_at == NOW - timedelta(days=2)
    assert op.last_service_at.tzinfo is not None


def test_get_operative_missing(store):
    assert store.get_operative("nobody") is None


def test_executions_by_name_are_case_insensitive_partial(store, seed):
    seed.executions("ANA LOPEZ", 2)
    seed.executions("BEN ORTIZ", 1)

    rows = store.list_executions(name="ana")
    assert len(rows) == 2
    assert {r.operative_name for r in rows} == {"ANA LOPEZ"}


def test_executions_name_filter_escapes_wildcards(store, seed):
    seed.executions("ANA LOPEZ", 1)
    assert store.list_executions(name="%") == []


def test_executions_without_filters_return_whole_fleet(store, seed):
    seed.executions("ANA LOPEZ", 2)
    seed.executions("BEN ORTIZ", 3)
    assert len(store.list_executions()) == 5


def test_executions_completed_only_accepts_both_spellings(store, seed):
    seed.executions("ANA LOPEZ", 1, state="completed")
    seed.executions("ANA LOPEZ", 1, state="FINISHED")
    seed.executions("ANA LOPEZ", 1, state="cancelled")

    assert len(store.list_executions(name="ANA LOPEZ")) == 3
    assert len(store.list_executions(name="ANA LOPEZ", completed_only=True)) == 2


def test_executions_window_is_inclusive(store, seed):
    seed.executions("ANA LOPEZ", 1, scheduled_at=NOW - timedelta(days=30))
    seed.executions("ANA LOPEZ", 1, scheduled_at=NOW - timedelta(days=31))
    seed.executions("ANA LOPEZ", 1, scheduled_at=NOW)

    rows = store.list_executions(since=NOW - timedelta(days=30), until=NOW)
    assert len(rows) == 2


def test_null_amounts_read_as_zero(store, db_session):
    db_session.add(ExecutionRecord(operative_name="ANA LOPEZ", state="completed", scheduled_at=NOW))
    db_session.commit()

    (row,) = store.list_executions(name="ANA LOPEZ")
    assert row.operative_cost == Decimal(0)
    assert row.distance_km == Decimal(0)
    assert row.minutes_late() is None


def test_assignments_and_rejections_by_operative(store, seed):
    seed.assignments("op-1", "confirmed", 2)
    seed.assignments("op-2", "confirmed", 1)
    seed.rejections("op-1", 1)

    assert len(store.list_assignments("op-1")) == 2
    assert len(store.list_rejections("op-1")) == 1
    assert store.list_rejections("op-2") == []


def test_checklists_and_documents_by_phone(store, seed):
    seed.checklist("555-0101", "svc-1")
    seed.document("555-0101", expires_on=date(2026, 1, 1))
    seed.document("555-0199")

    assert len(store.list_checklists(" 555-0101 ")) == 1
    (doc,) = store.list_documents("555-0101")
    assert not doc.is_current(NOW.date())


def test_engine_pool_matches_read_fan_out(monkeypatch, tmp_path):
    settings = Settings(DATABASE_URL=f"sqlite:///{tmp_path}/pool.db", READ_WORKERS=3)
    monkeypatch.setattr(session_module, "get_settings", lambda: settings)
    monkeypatch.setattr(session_module, "_engine", None)
    monkeypatch.setattr(session_module, "_SessionLocal", None)

    engine = session_module.get_engine()
    try:
        assert engine.pool.size() == 3
        assert session_module.get_session_factory().kw["expire_on_commit"] is False
    finally:
        engine.dispose()

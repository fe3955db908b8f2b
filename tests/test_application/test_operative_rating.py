"""
Tests for OperativeRatingService
"""
from datetime import datetime, timedelta, timezone

from fleetscore.application.operative_rating import (
    OperativeRatingService,
    STATUS_OK,
    STATUS_UNAVAILABLE,
    fleet_revenue_percentiles,
)
from fleetscore.domain.identity import MatchConfidence
from fleetscore.infrastructure.records import RecordStore


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class _MetricsDown:
    def get_performance_metrics(self, operative_id, name, phone=None, lookback_days=None, now=None):
        raise RuntimeError("metrics backend timeout")


class _FleetRevenueDownStore(RecordStore):
    def list_executions(self, name=None, phone=None, since=None, until=None, completed_only=False):
        if name is None:
            raise RuntimeError("fleet scan timed out")
        return super().list_executions(name, phone, since, until, completed_only)


def _fleet(seed):
    seed.operative("op-1", "ANA LOPEZ", last_service_at=NOW - timedelta(days=2))
    seed.executions("ANA LOPEZ", 1, cost=1000, scope="local", scheduled_at=NOW - timedelta(days=3))
    seed.executions("ANA LOPEZ", 1, cost=1000, scope="out_of_town", scheduled_at=NOW - timedelta(days=5))
    seed.executions("BEN ORTIZ", 1, cost=500, scope="local", scheduled_at=NOW - timedelta(days=4))
    seed.executions("CARL DIAZ", 1, cost=3000, scope="local", scheduled_at=NOW - timedelta(days=6))


def test_rating_combines_available_dimensions(store, seed):
    _fleet(seed)

    snap = OperativeRatingService(store).get_operative_rating("op-1", "ANA LOPEZ", now=NOW)

    assert snap.status == STATUS_OK
    scores = {d.key: d.score for d in snap.dimensions}
    # punctuality 100, reliability 100, checklist 0, documentation 0, volume 2
    assert scores["performance"] == 55
    assert scores["availability"] == 100
    # own 2000 == fleet P50 (2000), P90 is 3000
    assert scores["revenue"] == 60
    assert scores["versatility"] == 100
    assert snap.revenue_p50 == 2000.0
    assert snap.revenue_p90 == 3000.0
    assert snap.fleet_revenue_available
    assert (snap.local_services, snap.out_of_town_services) == (1, 1)

    # 16.5 + 25 + 15 + 20
    assert snap.general_score == 77
    assert snap.stars == 4
    assert snap.rating == 4.9
    assert snap.label == "Excellent"


def test_client_satisfaction_is_visible_but_inert(store, seed):
    _fleet(seed)

    snap = OperativeRatingService(store).get_operative_rating("op-1", "ANA LOPEZ", now=NOW)

    placeholder = [d for d in snap.dimensions if d.key == "client_satisfaction"]
    assert len(placeholder) == 1
    assert not placeholder[0].available
    assert placeholder[0].score is None
    assert placeholder[0].weight == 0.20
    assert snap.general_score == 77


def test_performance_failure_reports_unavailable(store, seed):
    _fleet(seed)

    snap = OperativeRatingService(store, metrics=_MetricsDown()).get_operative_rating(
        "op-1", "ANA LOPEZ", now=NOW,
    )

    assert snap.status == STATUS_UNAVAILABLE
    assert "metrics backend timeout" in snap.error
    assert snap.general_score is None
    assert snap.rating is None
    assert snap.dimensions == ()


def test_fleet_revenue_failure_falls_back_to_neutral_revenue(session_factory, seed):
    _fleet(seed)
    store = _FleetRevenueDownStore(session_factory)

    snap = OperativeRatingService(store).get_operative_rating("op-1", "ANA LOPEZ", now=NOW)

    assert snap.status == STATUS_OK
    assert "fleet_revenue" in snap.failed_sources
    assert not snap.fleet_revenue_available
    assert {d.key: d.score for d in snap.dimensions}["revenue"] == 50


def test_overlapping_name_is_not_merged_into_rating(store, seed):
    seed.operative("op-1", "ANA LOPEZ", last_service_at=NOW - timedelta(days=2))
    seed.executions("ANA LOPEZ", 1, cost=1000, scope="local")
    seed.executions("JUANA LOPEZ", 1, cost=50000, scope="out_of_town")

    snap = OperativeRatingService(store).get_operative_rating("op-1", "ANA LOPEZ", now=NOW)

    assert snap.revenue_90d == 1000.0
    assert (snap.local_services, snap.out_of_town_services) == (1, 0)
    scores = {d.key: d.score for d in snap.dimensions}
    # P50 = P90 = 50000; 1000 / 50000 * 60 floors at 10
    assert scores["revenue"] == 10
    assert scores["versatility"] == 40
    assert snap.identity.confidence == MatchConfidence.EXACT
    assert snap.identity.alternatives == ("JUANA LOPEZ",)
    assert snap.as_dict()["identity"]["alternatives"] == ["JUANA LOPEZ"]


def test_unmatched_name_has_no_own_figures(store, seed):
    seed.executions("BEN ORTIZ", 1, cost=1000, scope="local")

    snap = OperativeRatingService(store).get_operative_rating("op-1", "ZULU", now=NOW)

    assert snap.identity.confidence == MatchConfidence.NONE
    assert snap.revenue_90d == 0.0
    assert (snap.local_services, snap.out_of_town_services) == (0, 0)


def test_unknown_operative_gets_availability_floor(store, seed):
    seed.executions("ANA LOPEZ", 1, cost=1000, scope="local")

    snap = OperativeRatingService(store).get_operative_rating("op-404", "ANA LOPEZ", now=NOW)

    assert {d.key: d.score for d in snap.dimensions}["availability"] == 20


def test_fleet_revenue_percentiles_empty_fleet():
    assert fleet_revenue_percentiles([]) == (0.0, 0.0)


def test_rating_as_dict_is_serializable(store, seed):
    _fleet(seed)

    data = OperativeRatingService(store).get_operative_rating("op-1", "ANA LOPEZ", now=NOW).as_dict()

    assert data["status"] == "ok"
    assert len(data["dimensions"]) == 5
    assert data["performance_breakdown"]["reliability"] == 100

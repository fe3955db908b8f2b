"""
Tests for the bucketed and decay punctuality policies
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fleetscore.domain.punctuality import (
    BucketedPunctuality,
    DecayPunctuality,
    MAJOR_DELAY,
    MINOR_DELAY,
    ON_TIME,
    PunctualityTally,
)
from fleetscore.domain.records import ExecutionView

_T0 = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)


def _ex(late=None):
    return ExecutionView(
        id=1,
        operative_name="ANA LOPEZ",
        state="completed",
        scheduled_at=_T0,
        checked_in_at=_T0 + timedelta(minutes=late) if late is not None else None,
        distance_km=Decimal(0),
        operative_cost=Decimal(0),
        client_charge=Decimal(0),
        service_scope=None,
    )


# ── Bucketed ────────────────────────────────────────────────────────────────


def test_classify_boundaries():
    p = BucketedPunctuality()
    assert p.classify(-5) == ON_TIME
    assert p.classify(0) == ON_TIME
    assert p.classify(0.5) == MINOR_DELAY
    assert p.classify(15) == MINOR_DELAY
    assert p.classify(15.5) == MAJOR_DELAY


def test_tally_skips_untimed_services():
    tally = BucketedPunctuality().tally([_ex(0), _ex(-10), _ex(10), _ex(40), _ex(None)])
    assert (tally.on_time, tally.minor_delay, tally.major_delay) == (2, 1, 1)
    assert tally.classified == 4
    assert tally.score == 50


def test_empty_tally_scores_zero():
    assert PunctualityTally().score == 0
    assert BucketedPunctuality().tally([_ex(None)]).score == 0


def test_custom_minor_delay_threshold():
    p = BucketedPunctuality(minor_delay_minutes=5)
    assert p.classify(10) == MAJOR_DELAY


# ── Decay ───────────────────────────────────────────────────────────────────


def test_decay_service_score():
    p = DecayPunctuality()
    assert p.service_score(-3) == 100.0
    assert p.service_score(0) == 100.0
    assert p.service_score(15) == 50.0
    assert p.service_score(30) == 0.0
    assert p.service_score(45) == 0.0


def test_decay_average_over_timed_services():
    assert DecayPunctuality().average([_ex(0), _ex(15), _ex(None)]) == 75.0


def test_decay_default_when_nothing_timed():
    assert DecayPunctuality().average([_ex(None)]) == 50.0
    assert DecayPunctuality().average([]) == 50.0

"""
Background scheduler: runs periodic jobs inside the FastAPI process.

Jobs:
  - Fleet ranking sweep (every FLEET_SWEEP_MINUTES, default 30)
"""
import logging
from collections import Counter

from apscheduler.schedulers.background import BackgroundScheduler

from fleetscore.config import get_settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def run_fleet_ranking_sweep(store=None) -> dict[str, int]:
    """Recompute the cost-based fleet ranking and log the tier distribution."""
    from fleetscore.application.fleet_ranking import FleetRankingService, RANKING_POLICIES
    from fleetscore.infrastructure.db.session import get_session_factory
    from fleetscore.infrastructure.records import RecordStore

    if store is None:
        store = RecordStore(get_session_factory())
    policy = RANKING_POLICIES.get(get_settings().RANKING_BASIS, RANKING_POLICIES["cost"])

    entries = FleetRankingService(store, policy=policy).rank()
    tiers = Counter(e.tier.value for e in entries)
    logger.info(
        "Fleet ranking sweep (%s basis): %d operatives, gold=%d silver=%d bronze=%d standard=%d",
        policy.basis, len(entries),
        tiers["gold"], tiers["silver"], tiers["bronze"], tiers["standard"],
    )
    return dict(tiers)


def _run_fleet_ranking_sweep():
    try:
        run_fleet_ranking_sweep()
    except Exception:
        logger.exception("Fleet ranking sweep job failed")


def start_scheduler():
    """Start the background scheduler with all periodic jobs."""
    minutes = get_settings().FLEET_SWEEP_MINUTES
    scheduler.add_job(
        _run_fleet_ranking_sweep,
        "interval",
        minutes=minutes,
        id="fleet_ranking_sweep",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started: fleet_ranking_sweep (every %d min)", minutes)


def shutdown_scheduler():
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")

"""Background job scheduler for interest counter reconciliation."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from app.core.config import settings
from app.core.database import engine
from app.interest.counts import reconcile_interest_counts

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def reconcile_job():
    """Background reconcile job."""
    try:
        with Session(engine) as session:
            stats = reconcile_interest_counts(session)
            logger.info(f"Interest count reconcile completed: {stats}")
    except Exception as e:
        logger.error(f"Interest count reconcile failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        reconcile_job,
        trigger=IntervalTrigger(minutes=settings.reconcile_interval_minutes),
        id="interest_reconcile",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, reconciling interest counts every "
        f"{settings.reconcile_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")

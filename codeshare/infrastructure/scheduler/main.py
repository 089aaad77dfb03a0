"""
Scheduler for periodic housekeeping.

Jobs run inside the API process on the application's event loop. The job
store is in memory; jobs are re-registered on every startup with
``replace_existing=True``.
"""

import logging
from datetime import timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from codeshare.core.config import scheduler_logger, settings


logging.getLogger("apscheduler").setLevel(logging.INFO)

scheduler = AsyncIOScheduler(timezone=timezone.utc)


def schedule_purge_expired_records_job(
    interval_minutes: int = 60, retention_hours: int = 24
) -> None:
    """
    Schedule the purge_expired_records job to run at the given interval.
    """
    # Import here to avoid circular import issues
    from codeshare.infrastructure.scheduler.jobs import purge_expired_records

    scheduler_logger.info(
        f"Scheduling 'purge_expired_records' job to run every {interval_minutes} minutes"
    )
    scheduler.add_job(
        purge_expired_records,
        trigger=IntervalTrigger(minutes=interval_minutes, timezone=timezone.utc),
        replace_existing=True,
        id="purge_expired_records_job",
        misfire_grace_time=60 * 5,
        coalesce=True,
        kwargs={"retention_hours": retention_hours},
    )
    scheduler_logger.info("'purge_expired_records' job scheduled successfully.")


def initialize_scheduler() -> None:
    """
    Register all periodic jobs.

    Called during application startup, after ``scheduler.start()``.
    """
    schedule_purge_expired_records_job(
        interval_minutes=settings.CLEANUP_INTERVAL_MINUTES,
        retention_hours=settings.CLEANUP_RETENTION_HOURS,
    )

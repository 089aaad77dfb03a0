"""
Test suite for scheduler setup.

Run tests:
    pytest tests/infrastructure/scheduler/test_scheduler.py -v
"""

from unittest.mock import patch

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from codeshare.core.config import settings
from codeshare.infrastructure.scheduler.jobs import purge_expired_records
from codeshare.infrastructure.scheduler.main import (
    initialize_scheduler,
    schedule_purge_expired_records_job,
    scheduler,
)


class TestScheduler:

    def test_scheduler_is_async_io_scheduler(self):
        assert isinstance(scheduler, AsyncIOScheduler)

    def test_scheduler_has_utc_timezone(self):
        assert str(scheduler.timezone) == "UTC"


class TestSchedulePurgeJob:

    def test_registers_job(self):
        with patch.object(scheduler, "add_job") as mock_add_job:
            schedule_purge_expired_records_job(interval_minutes=15, retention_hours=6)

        mock_add_job.assert_called_once()
        args, kwargs = mock_add_job.call_args
        assert args[0] is purge_expired_records
        assert kwargs["id"] == "purge_expired_records_job"
        assert kwargs["replace_existing"] is True
        assert kwargs["coalesce"] is True
        assert kwargs["kwargs"] == {"retention_hours": 6}
        assert kwargs["trigger"].interval.total_seconds() == 15 * 60

    def test_initialize_uses_settings(self):
        with patch(
            "codeshare.infrastructure.scheduler.main.schedule_purge_expired_records_job"
        ) as mock_schedule:
            initialize_scheduler()

        mock_schedule.assert_called_once_with(
            interval_minutes=settings.CLEANUP_INTERVAL_MINUTES,
            retention_hours=settings.CLEANUP_RETENTION_HOURS,
        )

from codeshare.infrastructure.scheduler.jobs import purge_expired_records
from codeshare.infrastructure.scheduler.main import (
    initialize_scheduler,
    schedule_purge_expired_records_job,
    scheduler,
)

__all__ = [
    "scheduler",
    "purge_expired_records",
    "schedule_purge_expired_records_job",
    "initialize_scheduler",
]

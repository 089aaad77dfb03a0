from datetime import timedelta

from codeshare.core.config import scheduler_logger
from codeshare.core.db import AsyncSessionLocal
from codeshare.core.db.crud import otp_code_db, session_db, share_link_db
from codeshare.core.utils import utc_now


async def purge_expired_records(retention_hours: int = 24) -> dict[str, int]:
    """
    Hard-delete OTP codes, sessions and share links that stopped being usable
    more than ``retention_hours`` ago.

    Expired rows are already rejected on read, so this only bounds table
    growth. All three deletes run in one transaction.

    Returns:
        dict: Number of rows removed per table.
    """
    cutoff_date = utc_now() - timedelta(hours=retention_hours)
    async with AsyncSessionLocal.begin() as session:
        scheduler_logger.info(
            f"Starting purge of expired records (cutoff: {cutoff_date})"
        )
        counts = {
            "otp_codes": await otp_code_db.delete_dead_codes(
                session, cutoff_date, commit_self=False
            ),
            "sessions": await session_db.delete_dead_sessions(
                session, cutoff_date, commit_self=False
            ),
            "share_links": await share_link_db.delete_expired(
                session, cutoff_date, commit_self=False
            ),
        }
        scheduler_logger.info(f"Completed purge of expired records: {counts}")
    return counts

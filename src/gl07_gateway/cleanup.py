"""Remove old processing log entries based on retention policy."""

import logging
from datetime import datetime, timedelta, timezone

from .adapters.logstore import SqliteLogStore
from .config import Settings
from .ports.log_store import LogStorePort

logger = logging.getLogger(__name__)

MIN_RETENTION_DAYS = 7


def run_cleanup(
    settings: Settings,
    retention_days: int | None = None,
    log_store: LogStorePort | None = None,
) -> int:
    """Delete log entries older than the retention period.

    Returns number of entries removed.
    """
    days = retention_days if retention_days is not None else settings.cleanup.retention_days
    if days < MIN_RETENTION_DAYS:
        logger.warning(
            f"Retention of {days} days is below minimum, using {MIN_RETENTION_DAYS} days"
        )
        days = MIN_RETENTION_DAYS

    store = log_store or SqliteLogStore(settings.paths.database)
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    logger.info(f"Deleting processing logs older than {cutoff:%Y-%m-%d %H:%M:%S} UTC")

    removed = store.delete_older_than(cutoff)
    logger.info(f"Cleanup complete: {removed} log entries removed")
    return removed

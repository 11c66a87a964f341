"""
Retention sweep: deletes raw visits older than the retention horizon.

Only the visits table is touched. unique_visitors, page_stats and
global_stats keep their lifetime values.
"""
import asyncio
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import SessionLocal
from ..utils import now_ms
from . import stats_store

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000


def retention_cutoff(now: int, retention_days: int) -> int:
    return now - retention_days * DAY_MS


def purge_old_visits(db: Session, now: Optional[int] = None, retention_days: Optional[int] = None) -> int:
    """Deletes visits with visit_time < now - retention_days. Returns rows deleted."""
    if now is None:
        now = now_ms()
    if retention_days is None:
        retention_days = get_settings().retention_days

    cutoff = retention_cutoff(now, retention_days)
    try:
        deleted = stats_store.purge_visits_older_than(db, cutoff)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"Retention sweep removed {deleted} visits older than {cutoff}")
    return deleted


def run_retention_sweep() -> int:
    """Scheduled entry point: opens its own session and runs one sweep."""
    db = SessionLocal()
    try:
        return purge_old_visits(db)
    except Exception as e:
        logger.error(f"Retention sweep failed: {e}", exc_info=True)
        raise
    finally:
        db.close()


async def retention_loop(interval_seconds: int):
    """Runs the sweep every `interval_seconds` until cancelled."""
    logger.info(f"In-process retention sweeper started (every {interval_seconds}s)")
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await asyncio.to_thread(run_retention_sweep)
        except Exception:
            # already logged by run_retention_sweep; keep the loop alive
            continue

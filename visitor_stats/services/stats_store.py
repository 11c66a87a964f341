"""
Storage operations for visit events and counters.

Every write is a single SQL statement that the database applies atomically
(relative UPDATE, INSERT ... ON CONFLICT). None of them read a value and
write it back from Python, so concurrent hits never lose an increment.

Functions take the caller's session and never commit; transaction
boundaries belong to the caller.
"""
import json
import logging
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ..models import (
    ALLOWED_DOMAINS_KEY,
    GLOBAL_STATS_ID,
    ConfigEntry,
    GlobalStats,
    PageStats,
    UniqueVisitor,
    Visit,
)

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 1000
MAX_REFERER_LENGTH = 500


def _insert_for(db: Session):
    """Returns the dialect-specific insert() that supports ON CONFLICT."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Unsupported database dialect for upserts: {dialect}")


# --- Writes ---

def append_visit_event(
    db: Session,
    *,
    visit_time: int,
    page_path: str,
    ip_hash: str,
    user_agent: str = "",
    referer: str = "",
    country: str = "",
) -> Visit:
    visit = Visit(
        visit_time=visit_time,
        page_path=page_path,
        ip_hash=ip_hash,
        user_agent=(user_agent or "")[:MAX_USER_AGENT_LENGTH],
        referer=(referer or "")[:MAX_REFERER_LENGTH],
        country=country or "",
    )
    db.add(visit)
    db.flush()
    return visit


def insert_unique_if_absent(db: Session, ip_hash: str, first_seen: int) -> bool:
    """
    Registers a fingerprint. Returns True only for the call that created
    the row; a duplicate is a silent no-op and keeps the original first_seen.
    """
    insert = _insert_for(db)
    stmt = (
        insert(UniqueVisitor)
        .values(ip_hash=ip_hash, first_seen=first_seen)
        .on_conflict_do_nothing(index_elements=["ip_hash"])
    )
    result = db.execute(stmt)
    return result.rowcount == 1


def increment_global(db: Session, unique_delta: int, now: int) -> None:
    if unique_delta not in (0, 1):
        raise ValueError(f"unique_delta must be 0 or 1, got {unique_delta}")

    stmt = (
        update(GlobalStats)
        .where(GlobalStats.id == GLOBAL_STATS_ID)
        .values(
            total_visits=GlobalStats.total_visits + 1,
            total_unique_visitors=GlobalStats.total_unique_visitors + unique_delta,
            last_updated=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    if result.rowcount != 1:
        raise RuntimeError("global_stats row is missing; run bootstrap_database() first")


def upsert_page_stats(db: Session, page_path: str, now: int) -> None:
    insert = _insert_for(db)
    stmt = insert(PageStats).values(page_path=page_path, total_visits=1, last_updated=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=["page_path"],
        set_={
            "total_visits": PageStats.total_visits + 1,
            "last_updated": stmt.excluded.last_updated,
        },
    )
    db.execute(stmt)


def ensure_global_stats(db: Session) -> None:
    """Creates the singleton counters row if it does not exist yet."""
    insert = _insert_for(db)
    stmt = (
        insert(GlobalStats)
        .values(id=GLOBAL_STATS_ID, total_visits=0, total_unique_visitors=0, last_updated=None)
        .on_conflict_do_nothing(index_elements=["id"])
    )
    result = db.execute(stmt)
    if result.rowcount:
        logger.info("global_stats row created")


def purge_visits_older_than(db: Session, cutoff_time: int) -> int:
    """Deletes raw visits with visit_time < cutoff_time. Counters are untouched."""
    stmt = (
        delete(Visit)
        .where(Visit.visit_time < cutoff_time)
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    return result.rowcount or 0


# --- Reads ---

def get_page_stats(db: Session, page_path: str) -> Optional[PageStats]:
    return db.get(PageStats, page_path, populate_existing=True)


def get_global_stats(db: Session) -> Optional[GlobalStats]:
    return db.get(GlobalStats, GLOBAL_STATS_ID, populate_existing=True)


def _window_filters(since_time: Optional[int], page_path: Optional[str]):
    filters = []
    if since_time is not None:
        filters.append(Visit.visit_time > since_time)
    if page_path is not None:
        filters.append(Visit.page_path == page_path)
    return filters


def count_visits(db: Session, since_time: Optional[int] = None, page_path: Optional[str] = None) -> int:
    stmt = select(func.count(Visit.id)).where(*_window_filters(since_time, page_path))
    return db.execute(stmt).scalar() or 0


def count_distinct_visitors(db: Session, since_time: Optional[int] = None, page_path: Optional[str] = None) -> int:
    stmt = select(func.count(func.distinct(Visit.ip_hash))).where(*_window_filters(since_time, page_path))
    return db.execute(stmt).scalar() or 0


# --- Config ---

def get_allowed_origins(db: Session) -> List[str]:
    """Reads the JSON allow-list of origins. Raises on malformed JSON."""
    entry = db.get(ConfigEntry, ALLOWED_DOMAINS_KEY)
    origins = json.loads(entry.value or "[]") if entry else []
    if not isinstance(origins, list):
        raise ValueError(f"{ALLOWED_DOMAINS_KEY} must be a JSON array")
    return [str(origin) for origin in origins]


def set_allowed_origins(db: Session, origins: List[str]) -> None:
    insert = _insert_for(db)
    value = json.dumps(list(origins))
    stmt = insert(ConfigEntry).values(key=ALLOWED_DOMAINS_KEY, value=value)
    stmt = stmt.on_conflict_do_update(
        index_elements=["key"],
        set_={"value": stmt.excluded.value},
    )
    db.execute(stmt)

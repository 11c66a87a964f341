"""
Read-side queries: per-article snapshot, site-wide snapshot and the
on-demand window counts over raw visits.

The window counts are computed from the visits table, so once the
retention sweep has purged old rows they no longer match the lifetime
counters in global_stats / page_stats.
"""
from typing import Optional

from sqlalchemy.orm import Session

from ..schemas.stats_schema import PageStatsOut, RealtimeStatsOut, SiteStatsOut
from ..utils import is_article_path, normalize_page_path, start_of_local_day_ms
from . import stats_store

PERIOD_TODAY = "today"
PERIOD_ALL = "all"


class InvalidPathError(ValueError):
    """The requested path is not an article path."""


def get_site_snapshot(db: Session) -> SiteStatsOut:
    site = stats_store.get_global_stats(db)
    if site is None:
        return SiteStatsOut()
    return SiteStatsOut(
        site_total=site.total_visits or 0,
        site_unique=site.total_unique_visitors or 0,
        site_last_updated=site.last_updated,
    )


def get_page_snapshot(db: Session, raw_path: Optional[str]) -> PageStatsOut:
    page_path = normalize_page_path(raw_path)
    if not is_article_path(page_path):
        raise InvalidPathError(f"Not an article path: {page_path}")

    page = stats_store.get_page_stats(db, page_path)
    site = get_site_snapshot(db)
    return PageStatsOut(
        path=page_path,
        article_total=page.total_visits if page else 0,
        article_last_updated=page.last_updated if page else None,
        site_total=site.site_total,
        site_unique=site.site_unique,
        site_last_updated=site.site_last_updated,
    )


def get_realtime_stats(
    db: Session,
    period: Optional[str] = None,
    raw_path: Optional[str] = None,
    now: Optional[int] = None,
) -> RealtimeStatsOut:
    """
    Counts visits and distinct fingerprints in the visits table.

    period "all" has no time filter; anything else means "today", i.e.
    visits after local midnight.
    """
    period = PERIOD_ALL if period == PERIOD_ALL else PERIOD_TODAY
    page_path = normalize_page_path(raw_path) if raw_path else None
    since_time = None if period == PERIOD_ALL else start_of_local_day_ms(now)

    return RealtimeStatsOut(
        total=stats_store.count_visits(db, since_time, page_path),
        unique=stats_store.count_distinct_visitors(db, since_time, page_path),
        period=period,
        path=page_path,
    )

"""Tests for the read-side queries."""

import pytest

from visitor_stats.schemas.stats_schema import VisitHit
from visitor_stats.services import stats_store
from visitor_stats.services.aggregate_service import (
    InvalidPathError,
    get_page_snapshot,
    get_realtime_stats,
    get_site_snapshot,
)
from visitor_stats.services.ingestion_service import record_visit
from visitor_stats.services.retention_service import purge_old_visits
from visitor_stats.utils import start_of_local_day_ms

DAY_MS = 24 * 60 * 60 * 1000


class TestSnapshots:
    """Tests for the per-page and site-wide snapshots."""

    def test_page_snapshot_zero_filled(self, db_session):
        snapshot = get_page_snapshot(db_session, "/post/new/")

        assert snapshot.path == "/post/new"
        assert snapshot.article_total == 0
        assert snapshot.article_last_updated is None
        assert snapshot.site_total == 0

    def test_page_snapshot_rejects_non_article(self, db_session):
        with pytest.raises(InvalidPathError):
            get_page_snapshot(db_session, "/about")

    def test_page_snapshot_serializes_camel_case(self, db_session):
        record_visit(db_session, VisitHit(address="1.2.3.4", raw_path="/post/hello"), "s", now=1000)

        data = get_page_snapshot(db_session, "/post/hello").model_dump(by_alias=True)
        assert data == {
            "path": "/post/hello",
            "articleTotal": 1,
            "articleLastUpdated": 1000,
            "siteTotal": 1,
            "siteUnique": 1,
            "siteLastUpdated": 1000,
        }

    def test_site_snapshot_without_row(self, db_session):
        from visitor_stats.models import GlobalStats

        db_session.query(GlobalStats).delete()
        db_session.commit()

        snapshot = get_site_snapshot(db_session)
        assert (snapshot.site_total, snapshot.site_unique, snapshot.site_last_updated) == (0, 0, None)


class TestRealtimeStats:
    """Tests for get_realtime_stats."""

    def _visit(self, db, visit_time, ip_hash, page_path="/post/a"):
        stats_store.append_visit_event(db, visit_time=visit_time, page_path=page_path, ip_hash=ip_hash)

    def test_today_excludes_visits_before_midnight(self, db_session):
        now = start_of_local_day_ms() + 60_000
        midnight = start_of_local_day_ms(now)
        self._visit(db_session, midnight - 1, "h1")
        self._visit(db_session, midnight, "h2")
        self._visit(db_session, midnight + 1, "h3")
        self._visit(db_session, midnight + 2, "h3")
        db_session.commit()

        stats = get_realtime_stats(db_session, "today", now=now)
        assert (stats.total, stats.unique, stats.period) == (2, 1, "today")
        assert stats.path is None

    def test_all_and_path_filter(self, db_session):
        self._visit(db_session, 1, "h1", "/post/a")
        self._visit(db_session, 2, "h2", "/post/a")
        self._visit(db_session, 3, "h1", "/about")
        db_session.commit()

        stats = get_realtime_stats(db_session, "all", "post/a/")
        assert (stats.total, stats.unique, stats.period, stats.path) == (2, 2, "all", "/post/a")

    def test_unknown_period_means_today(self, db_session):
        assert get_realtime_stats(db_session, "week").period == "today"
        assert get_realtime_stats(db_session, None).period == "today"

    def test_window_counts_diverge_from_lifetime_counters_after_purge(self, db_session):
        now = 500 * DAY_MS
        record_visit(db_session, VisitHit(address="1.1.1.1", raw_path="/post/a"), "s", now=now - 100 * DAY_MS)
        record_visit(db_session, VisitHit(address="2.2.2.2", raw_path="/post/a"), "s", now=now - DAY_MS)

        purge_old_visits(db_session, now=now, retention_days=90)

        assert get_realtime_stats(db_session, "all").total == 1
        assert get_site_snapshot(db_session).site_total == 2
        assert get_page_snapshot(db_session, "/post/a").article_total == 2

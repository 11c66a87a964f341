"""
Visit ingestion: turns one tracking hit into a raw event plus counter updates.
"""
import base64
import logging

from sqlalchemy.orm import Session

from ..schemas.stats_schema import IngestionResult, VisitHit
from ..utils import fingerprint_address, is_article_path, normalize_page_path, now_ms
from . import stats_store

logger = logging.getLogger(__name__)

# 1x1 transparent GIF returned to tracking pixels
PIXEL_GIF = base64.b64decode("R0lGODlhAQABAIAAAP///wAAACH5BAEAAAAALAAAAAABAAEAAAICRAEAOw==")


class IngestionError(Exception):
    """A storage step failed while recording a visit."""


def record_visit(db: Session, hit: VisitHit, salt: str, now: int | None = None) -> IngestionResult:
    """
    Records one visit.

    Steps, in order: raw event, unique-visitor registration, global counters,
    and the per-page counter when the path is an article. All of them are
    committed together; on any failure the session is rolled back and
    IngestionError is raised.
    """
    page_path = normalize_page_path(hit.raw_path)
    ip_hash = fingerprint_address(hit.address, salt)
    if now is None:
        now = now_ms()

    try:
        stats_store.append_visit_event(
            db,
            visit_time=now,
            page_path=page_path,
            ip_hash=ip_hash,
            user_agent=hit.user_agent,
            referer=hit.referer,
            country=hit.country,
        )

        is_new_visitor = stats_store.insert_unique_if_absent(db, ip_hash, now)
        stats_store.increment_global(db, 1 if is_new_visitor else 0, now)

        counted_for_page = is_article_path(page_path)
        if counted_for_page:
            stats_store.upsert_page_stats(db, page_path, now)

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error recording visit to {page_path}: {e}", exc_info=True)
        raise IngestionError(str(e)) from e

    if is_new_visitor:
        logger.info(f"New unique visitor: {ip_hash[:8]}...")

    return IngestionResult(
        page_path=page_path,
        ip_hash=ip_hash,
        visit_time=now,
        is_new_visitor=is_new_visitor,
        counted_for_page=counted_for_page,
    )

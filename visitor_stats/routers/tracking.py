import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..schemas.stats_schema import PageStatsOut, VisitHit
from ..services.aggregate_service import InvalidPathError, get_page_snapshot, get_site_snapshot
from ..services.cache_service import ResponseCache, get_total_cache
from ..services.ingestion_service import PIXEL_GIF, IngestionError, record_visit
from ..services.policy_service import require_allowed_origin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tracking"])

ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"]


def get_client_address(request: Request) -> str:
    """
    CF-Connecting-IP, then the socket peer. The first X-Forwarded-For hop
    is used only when TRUST_X_FORWARDED_FOR is set, since clients can forge it.
    """
    address = request.headers.get("CF-Connecting-IP")
    if address:
        return address.strip()
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded and get_settings().trust_x_forwarded_for:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return ""


def extract_visit_hit(request: Request) -> VisitHit:
    return VisitHit(
        address=get_client_address(request),
        user_agent=request.headers.get("User-Agent", ""),
        referer=request.headers.get("Referer", ""),
        country=request.headers.get("CF-IPCountry", ""),
        raw_path=request.query_params.get("path") or "/",
    )


@router.api_route("/log", methods=ANY_METHOD)
def log_visit(
    request: Request,
    db: Session = Depends(get_db),
    _origin: str = Depends(require_allowed_origin),
):
    """
    Records a page visit and answers with a 1x1 transparent GIF.
    The client should send window.location.pathname as `path`.
    """
    hit = extract_visit_hit(request)
    try:
        record_visit(db, hit, get_settings().salt)
    except IngestionError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=PIXEL_GIF,
        media_type="image/gif",
        headers={"Cache-Control": "no-store"},
    )


@router.get("/page-stats", response_model=PageStatsOut)
def page_stats(
    path: str = "",
    db: Session = Depends(get_db),
    _origin: str = Depends(require_allowed_origin),
):
    """Counters for one article plus the site-wide totals."""
    try:
        return get_page_snapshot(db, path)
    except InvalidPathError:
        raise HTTPException(status_code=400, detail="Invalid path")
    except Exception as e:
        logger.error(f"Error reading page stats for {path}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/total")
def site_total(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    cache: ResponseCache = Depends(get_total_cache),
    _origin: str = Depends(require_allowed_origin),
):
    """
    Site-wide lifetime counters. The rendered body is cached for the TTL,
    keyed by the canonical /total URL (query string ignored).
    """
    cache_key = str(request.url.replace(path="/total", query=""))
    headers = {"Cache-Control": f"public, max-age={int(cache.ttl_seconds)}"}

    cached = cache.get(cache_key)
    if cached is not None:
        return Response(content=cached, media_type="application/json", headers=headers)

    try:
        snapshot = get_site_snapshot(db)
    except Exception as e:
        logger.error(f"Error reading site totals: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    body = json.dumps(snapshot.model_dump(by_alias=True)).encode("utf-8")
    # stored after the response is sent
    background_tasks.add_task(cache.put, cache_key, body)
    return Response(content=body, media_type="application/json", headers=headers)

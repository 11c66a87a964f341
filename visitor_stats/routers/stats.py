from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.stats_schema import RealtimeStatsOut
from ..services.aggregate_service import get_realtime_stats
from ..services.policy_service import require_api_key

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get(
    "",
    response_model=RealtimeStatsOut,
    response_model_exclude_none=True,
    dependencies=[Depends(require_api_key)],
)
def realtime_stats(
    period: str = "today",
    path: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Visits and distinct visitors counted live from the visits table.
    - period: "today" (since local midnight, default) or "all"
    - path: optional page filter, normalized like /log paths
    """
    import logging
    logger = logging.getLogger(__name__)

    try:
        return get_realtime_stats(db, period, path)
    except Exception as e:
        logger.error(f"Error computing realtime stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

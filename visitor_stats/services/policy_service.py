"""
Request gates: origin allow-list (tracking and public read routes) and
bearer secret (admin stats route).
"""
import hmac
import logging
from typing import Optional
from urllib.parse import urlsplit

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from . import stats_store

logger = logging.getLogger(__name__)

# Origin used when the request carries neither Origin nor a usable Referer
UNKNOWN_ORIGIN = "http://error.error"


def resolve_request_origin(origin: Optional[str], referer: Optional[str]) -> str:
    """Origin header first, else scheme://host[:port] of the Referer."""
    if origin:
        return origin
    if referer:
        try:
            parts = urlsplit(referer)
            if parts.scheme and parts.netloc:
                return f"{parts.scheme}://{parts.netloc}"
        except ValueError:
            pass
    return UNKNOWN_ORIGIN


def is_origin_allowed(db: Session, origin: str) -> bool:
    """Checks the allow-list stored in the config table. Any failure denies."""
    try:
        allowed = stats_store.get_allowed_origins(db)
    except Exception as e:
        logger.error(f"Could not read allowed_domains: {e}", exc_info=True)
        return False
    return origin in allowed or "*" in allowed


def is_bearer_valid(authorization: Optional[str], api_key: str) -> bool:
    if not api_key or not authorization:
        return False
    return hmac.compare_digest(authorization.encode("utf-8"), f"Bearer {api_key}".encode("utf-8"))


# --- FastAPI dependencies ---

def require_allowed_origin(request: Request, db: Session = Depends(get_db)) -> str:
    origin = resolve_request_origin(
        request.headers.get("Origin"),
        request.headers.get("Referer"),
    )
    if not is_origin_allowed(db, origin):
        logger.warning(f"Rejected request from origin {origin} to {request.url.path}")
        raise HTTPException(status_code=403, detail="Origin not allowed")
    return origin


def require_api_key(authorization: Optional[str] = Header(None)) -> None:
    if not is_bearer_valid(authorization, get_settings().api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")

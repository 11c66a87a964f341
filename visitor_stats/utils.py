import re
import time
import hashlib
from datetime import datetime
from urllib.parse import urljoin, urlsplit, quote

# Base used to resolve relative input; only the path of the result is kept
_RESOLVE_BASE = "http://error.local"

# Characters left as-is when re-encoding a resolved path
_PATH_SAFE_CHARS = "/%:@!$&'()*+,;=-._~"

_ARTICLE_PATH_RE = re.compile(r"^/posts?/[A-Za-z0-9_-]+$")

FINGERPRINT_LENGTH = 16


def normalize_page_path(raw) -> str:
    """
    Canonicalizes a page path into the key used for storage.

    Examples:
    - "" -> "/"
    - "post/abc" -> "/post/abc"
    - "/post/abc/" -> "/post/abc"
    - "https://blog.example/post/abc?ref=x" -> "/post/abc"

    Malformed input is never rejected: when it cannot be parsed as a URL
    it is used as-is.
    """
    if not raw:
        return "/"

    # backslashes count as path separators in http URLs
    path = str(raw).replace("\\", "/")
    try:
        path = urlsplit(urljoin(_RESOLVE_BASE, path)).path
        path = quote(path, safe=_PATH_SAFE_CHARS)
    except ValueError:
        pass

    if not path.startswith("/"):
        path = f"/{path}"
    if path != "/":
        path = re.sub(r"/+$", "", path)
    return path or "/"


def is_article_path(page_path) -> bool:
    """True for /post/<slug> and /posts/<slug> paths."""
    return isinstance(page_path, str) and _ARTICLE_PATH_RE.match(page_path) is not None


def fingerprint_address(address: str, salt: str) -> str:
    """
    One-way visitor fingerprint: first 16 hex chars of sha256(address + salt).

    Changing the salt changes every fingerprint.
    """
    digest = hashlib.sha256(f"{address}{salt}".encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


def now_ms() -> int:
    return int(time.time() * 1000)


def start_of_local_day_ms(now: int | None = None) -> int:
    """Epoch millis of local midnight for the day containing `now`."""
    current = datetime.fromtimestamp((now if now is not None else now_ms()) / 1000)
    midnight = current.replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp() * 1000)

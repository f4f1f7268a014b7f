"""Admin key check and per-client rate limiting (FastAPI dependencies).

The public site has no accounts. The only privileged surface is the import
API (and draft visibility on detail pages), guarded by a shared key sent
as X-Admin-Key.
"""
import logging
import secrets
import time
from collections import defaultdict, deque
from typing import Optional

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from lesmateriaal.core.config import settings

logger = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "X-Admin-Key"

_admin_key_header = APIKeyHeader(name=ADMIN_KEY_HEADER, auto_error=False)


def _key_matches(api_key: Optional[str]) -> bool:
    configured = settings.admin_api_key
    if not configured or not api_key:
        return False
    return secrets.compare_digest(api_key.encode(), configured.encode())


async def require_admin_key(
    request: Request,
    api_key: Optional[str] = Security(_admin_key_header),
) -> str:
    """
    401 without a key, 403 with a wrong one.

    With no ADMIN_API_KEY configured the import API is open (local dev).
    """
    if not settings.admin_api_key:
        logger.warning("ADMIN_API_KEY not set, import endpoints are open")
        return "dev-mode"

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail=f"Missing {ADMIN_KEY_HEADER} header",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    if not _key_matches(api_key):
        logger.warning("Rejected admin key from %s", _client_id(request))
        raise HTTPException(status_code=403, detail="Invalid admin API key")
    return api_key


async def is_admin_request(api_key: Optional[str] = Security(_admin_key_header)) -> bool:
    """Non-raising variant: drafts are shown only when this is True."""
    return _key_matches(api_key)


# ── Rate limiting ────────────────────────────────────────────────────


def _client_id(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimiter:
    """
    Sliding one-minute window per client; 429 with Retry-After when full.

        @router.get("/pdf-proxy", dependencies=[Depends(rate_limit_public)])
    """

    window_seconds = 60.0

    def __init__(self, per_minute: Optional[int] = None):
        self.per_minute = per_minute or settings.rate_limit_per_minute
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def reset(self) -> None:
        self._hits.clear()

    def _evict(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for client in list(self._hits):
            hits = self._hits[client]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[client]

    def hit(self, client: str, now: Optional[float] = None) -> Optional[int]:
        """Record a request; returns seconds to wait when over the limit."""
        now = time.monotonic() if now is None else now
        self._evict(now)
        hits = self._hits[client]
        if len(hits) >= self.per_minute:
            return int(self.window_seconds - (now - hits[0])) + 1
        hits.append(now)
        return None

    async def __call__(self, request: Request) -> None:
        retry_after = self.hit(_client_id(request))
        if retry_after is not None:
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Max {self.per_minute} requests/minute. Retry in {retry_after}s.",
                headers={"Retry-After": str(retry_after)},
            )


rate_limit_public = RateLimiter()
rate_limit_admin = RateLimiter(per_minute=30)

"""PDF proxy: serve remote PDFs from our origin so they can be embedded."""
import asyncio
import ipaddress
import logging
import socket
from typing import Optional
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from lesmateriaal.core.auth import rate_limit_public
from lesmateriaal.core.config import settings
from lesmateriaal.utils.pdf import is_pdf_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pdf"])

CACHE_CONTROL = "public, max-age=2592000, stale-while-revalidate=2592000"  # 30 days

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}

_LOCAL_NAMES = ("localhost", "localhost.localdomain")


class BlockedHostError(httpx.RequestError):
    """Request (or redirect hop) aimed at a local or private address."""


def _is_public_ip(address: str) -> bool:
    ip = ipaddress.ip_address(address)
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    )


def _is_blocked_host(host: str) -> bool:
    """Local names and non-public IP literals. Plain hostnames pass here."""
    host = host.lower().rstrip(".")
    if not host or host in _LOCAL_NAMES or host.endswith(".localhost"):
        return True
    try:
        return not _is_public_ip(host)
    except ValueError:
        return False


def _is_remote_http_url(url: str) -> bool:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return not _is_blocked_host(parsed.hostname or "")


async def _resolves_to_public(host: str, port: int) -> bool:
    try:
        infos = await asyncio.get_running_loop().getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except socket.gaierror:
        # unresolvable: let the request itself fail with a ConnectError
        return True
    return all(_is_public_ip(info[4][0].split("%")[0]) for info in infos)


async def check_request_host(request: httpx.Request) -> None:
    """httpx request hook: runs for the first request and every redirect hop."""
    host = request.url.host
    if request.url.scheme not in ("http", "https") or _is_blocked_host(host):
        raise BlockedHostError(f"Blocked host: {host}", request=request)
    try:
        ipaddress.ip_address(host)
    except ValueError:
        port = request.url.port or (443 if request.url.scheme == "https" else 80)
        if not await _resolves_to_public(host, port):
            raise BlockedHostError(f"Host resolves to a private address: {host}", request=request)


@router.get("/pdf-proxy", dependencies=[Depends(rate_limit_public)])
async def pdf_proxy(url: Optional[str] = Query(None)) -> Response:
    """
    Fetch `url` (must point at a .pdf) and return it as application/pdf
    with long-lived cache headers.
    """
    if not url:
        raise HTTPException(status_code=400, detail="URL parameter is required")
    if not is_pdf_url(url) or not _is_remote_http_url(url):
        raise HTTPException(status_code=400, detail="Only PDF URLs are allowed")

    try:
        async with httpx.AsyncClient(
            timeout=float(settings.pdf_proxy_timeout_seconds),
            follow_redirects=True,
            headers={"User-Agent": settings.pdf_proxy_user_agent},
            event_hooks={"request": [check_request_host]},
        ) as client:
            resp = await client.get(url)
    except BlockedHostError as e:
        logger.warning("PDF proxy refused %s: %s", url, e)
        raise HTTPException(status_code=400, detail="Only PDF URLs are allowed")
    except httpx.HTTPError:
        logger.exception("PDF proxy error for %s", url)
        raise HTTPException(status_code=500, detail="Failed to proxy PDF")

    if not resp.is_success:
        logger.warning("PDF upstream %s returned %d", url, resp.status_code)
        raise HTTPException(
            status_code=resp.status_code if resp.status_code >= 400 else 502,
            detail=f"Failed to fetch PDF: {resp.reason_phrase}",
        )

    return Response(
        content=resp.content,
        media_type="application/pdf",
        headers={"Cache-Control": CACHE_CONTROL, **_CORS_HEADERS},
    )

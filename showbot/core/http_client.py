"""HTTP client construction for showbot feed downloads."""

import logging

import httpx

logger = logging.getLogger(__name__)

_LIMITS = httpx.Limits(
    max_connections=4,
    max_keepalive_connections=2,
)

# Some calendar hosts reject obviously automated clients
DEFAULT_BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/calendar, text/plain, application/octet-stream, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}


def build_timeout(read_timeout: float) -> httpx.Timeout:
    """Build an httpx timeout with a caller-controlled read timeout."""
    return httpx.Timeout(connect=10.0, read=read_timeout, write=10.0, pool=30.0)


def create_client(
    read_timeout: float = 30.0,
    verify: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an AsyncClient configured for calendar feed downloads.

    Args:
        read_timeout: Read timeout in seconds
        verify: Validate SSL certificates
        transport: Optional transport override (tests use httpx.MockTransport)

    Returns:
        A new httpx.AsyncClient; the caller owns and must close it
    """
    logger.debug("Creating HTTP client (read_timeout=%.1fs, verify=%s)", read_timeout, verify)
    return httpx.AsyncClient(
        transport=transport,
        limits=_LIMITS,
        timeout=build_timeout(read_timeout),
        follow_redirects=True,
        verify=verify,
        headers=DEFAULT_BROWSER_HEADERS,
    )

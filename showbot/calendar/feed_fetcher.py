"""HTTP download of the calendar feed."""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from showbot.calendar.models import FeedSource
from showbot.core.exceptions import FeedFetchFailed
from showbot.core.http_client import DEFAULT_BROWSER_HEADERS, create_client

logger = logging.getLogger(__name__)


class FeedFetcher:
    """Async downloader for iCalendar feeds.

    Makes exactly one request per fetch. Failures are raised as FeedFetchFailed
    and are never retried here; callers decide whether to retry.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        """Initialize feed fetcher.

        Args:
            client: Optional shared HTTP client. A shared client is never
                    closed by this fetcher.
        """
        self.client: Optional[httpx.AsyncClient] = client
        self._owns_client = client is None

    async def __aenter__(self) -> "FeedFetcher":
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self.client is not None and self._owns_client:
            if not self.client.is_closed:
                await self.client.aclose()
                logger.debug("Closed feed HTTP client")
            self.client = None

    def _ensure_client(self, source: FeedSource) -> httpx.AsyncClient:
        if self.client is None or self.client.is_closed:
            self.client = create_client(read_timeout=source.timeout, verify=source.validate_ssl)
            self._owns_client = True
        return self.client

    @staticmethod
    def validate_url(url: str) -> bool:
        """Basic URL validation: http(s) scheme and a hostname are required."""
        try:
            parsed = urlparse(url)
        except ValueError:
            logger.debug("URL validation error for %s", url)
            return False

        if parsed.scheme not in ("http", "https"):
            logger.debug("Blocked non-HTTP(S) URL: %s", url)
            return False
        if not parsed.hostname:
            logger.debug("Blocked URL with missing hostname: %s", url)
            return False
        return True

    async def fetch(self, source: FeedSource) -> str:
        """Download the feed body.

        Args:
            source: Feed source with URL, timeout and header settings

        Returns:
            The feed text

        Raises:
            FeedFetchFailed: Invalid URL, timeout, network error, non-2xx
                             status, or an empty response body
        """
        if not self.validate_url(source.url):
            raise FeedFetchFailed(f"Invalid feed URL: {source.url}", url=source.url)

        client = self._ensure_client(source)
        headers = {**DEFAULT_BROWSER_HEADERS, **source.custom_headers}

        logger.debug("Fetching calendar feed from %s", source.url)
        try:
            response = await client.get(source.url, headers=headers, timeout=source.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FeedFetchFailed(
                f"Request timeout after {source.timeout}s", url=source.url
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FeedFetchFailed(
                f"HTTP {status}: {e.response.reason_phrase}", url=source.url, status_code=status
            ) from e
        except httpx.HTTPError as e:
            raise FeedFetchFailed(f"Network error: {e}", url=source.url) from e

        content = response.text
        if not content or not content.strip():
            raise FeedFetchFailed(
                "Empty content received", url=source.url, status_code=response.status_code
            )

        if "BEGIN:VCALENDAR" not in content:
            logger.warning("Content from %s does not appear to be iCalendar data", source.url)

        logger.debug("Fetched calendar feed (%d bytes)", len(content))
        return content

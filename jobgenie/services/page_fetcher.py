"""Page-fetching service: fetch a job URL and return a single posting, a list of postings, or an error."""

import asyncio
from typing import Optional, Protocol
from urllib.parse import quote

import httpx

from jobgenie.config import HTTP_MAX_RETRIES, PAGE_FETCH_TIMEOUT_SECONDS, PROXY_RELAY_URL
from jobgenie.schemas.scraped_job import FetchOutcome
from jobgenie.services.site_extractors import extract_job_data
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Referer": "https://www.google.com/",
}

ALTERNATE_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
    "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
)

BLOCKED_STATUSES = (403, 429)


class JobPageFetcher(Protocol):
    """Given a URL, return a single job, a list of job links, or an error outcome. Never raises."""

    async def fetch_job_page(self, url: str) -> FetchOutcome:
        ...


class HttpJobPageFetcher:
    """
    Fetches public job pages with a fallback ladder: direct fetch with browser-like headers,
    then alternate user agents, then a public proxy relay. The first HTML body obtained is
    handed to the site extractor registry.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = PAGE_FETCH_TIMEOUT_SECONDS,
        proxy_relay_url: Optional[str] = PROXY_RELAY_URL,
        max_retries: int = HTTP_MAX_RETRIES,
        backoff_seconds: float = 1.0,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._proxy_relay_url = proxy_relay_url
        self._max_retries = max(1, max_retries)
        self._backoff_seconds = backoff_seconds

    async def _get(self, url: str, headers: dict) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=headers, timeout=self._timeout, follow_redirects=True)
        async with httpx.AsyncClient(follow_redirects=True, timeout=self._timeout) as client:
            return await client.get(url, headers=headers)

    async def _fetch_direct(self, url: str) -> Optional[str]:
        """Browser-like headers; retries transient failures, gives up at once when blocked."""
        for attempt in range(self._max_retries):
            try:
                response = await self._get(url, BROWSER_HEADERS)
                if response.status_code in BLOCKED_STATUSES:
                    logger.warning("Blocked (%s) fetching %s", response.status_code, url)
                    return None
                response.raise_for_status()
                return response.text
            except httpx.HTTPStatusError as e:
                logger.warning("HTTP error %s for %s", e.response.status_code, url)
                if 400 <= e.response.status_code < 500:
                    return None  # Don't retry client errors
            except (httpx.TimeoutException, httpx.TransportError) as e:
                logger.warning("Request failed for %s (attempt %s): %s", url, attempt + 1, e)
            if attempt + 1 < self._max_retries:
                await asyncio.sleep(self._backoff_seconds * (attempt + 1))
        return None

    async def _fetch_alternate_headers(self, url: str) -> Optional[str]:
        for user_agent in ALTERNATE_USER_AGENTS:
            try:
                response = await self._get(url, {"User-Agent": user_agent})
                response.raise_for_status()
                return response.text
            except httpx.HTTPError as e:
                logger.debug("User agent '%s' failed for %s: %s", user_agent[:30], url, e)
        return None

    async def _fetch_via_proxy(self, url: str) -> Optional[str]:
        if not self._proxy_relay_url:
            return None
        try:
            response = await self._get(f"{self._proxy_relay_url}?url={quote(url, safe='')}", {})
            response.raise_for_status()
            return response.text
        except httpx.HTTPError as e:
            logger.warning("Proxy fetch failed for %s: %s", url, e)
            return None

    async def fetch_html(self, url: str) -> Optional[str]:
        """Raw HTML of the page from the first strategy that succeeds, or None."""
        for strategy in (self._fetch_direct, self._fetch_alternate_headers, self._fetch_via_proxy):
            html_text = await strategy(url)
            if html_text and html_text.strip():
                return html_text
        return None

    async def fetch_job_page(self, url: str) -> FetchOutcome:
        if not url:
            return FetchOutcome.failed("URL is required")
        html_text = await self.fetch_html(url)
        if html_text is None:
            logger.error("All scraping methods failed for %s", url)
            return FetchOutcome.failed("All scraping methods failed")
        try:
            return extract_job_data(html_text, url)
        except Exception as e:
            logger.exception("Extraction failed for %s", url)
            return FetchOutcome.failed(f"Extraction failed: {e}")

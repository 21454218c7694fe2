"""Web search providers (SerpAPI, Serper) returning ranked {title, snippet, link} results."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Protocol

import httpx

from jobgenie.config import SEARCH_COUNTRY, SEARCH_TIMEOUT_SECONDS, SERPAPI_KEY, SERPER_API_KEY
from jobgenie.exceptions import CollaboratorError
from jobgenie.schemas.search_result import SearchResult
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

SERPAPI_BASE = "https://serpapi.com/search"
SERPER_BASE = "https://google.serper.dev/search"


class SearchProvider(Protocol):
    """Given a query string, return a ranked list of search results. Raises CollaboratorError."""

    async def search(self, query: str, num: int = 10, country: Optional[str] = None) -> List[SearchResult]:
        ...


def _parse_item(item: dict[str, Any]) -> Optional[SearchResult]:
    """Build SearchResult from an organic or jobs-box entry (field names vary per provider)."""
    link = item.get("link") or item.get("url") or item.get("share_link")
    if not link:
        for option in item.get("apply_options") or []:
            if isinstance(option, dict) and option.get("link"):
                link = option["link"]
                break
    if not link:
        return None
    title = item.get("title") or ""
    company = item.get("company_name") or item.get("companyName") or ""
    if company and company.lower() not in title.lower():
        title = f"{title} at {company}" if title else company
    snippet = item.get("snippet") or item.get("description") or ""
    extensions = item.get("extensions") or []
    if isinstance(extensions, list):
        # Jobs boxes carry the posting age here, e.g. ["2 days ago", "Full-time"]
        snippet = " · ".join([str(e) for e in extensions] + ([snippet] if snippet else []))
    return SearchResult(title=title[:500], snippet=snippet[:1000], link=link)


def _merge_results(jobs_box: List[dict], organic: List[dict]) -> List[SearchResult]:
    """Jobs-box results first, then organic results."""
    out: List[SearchResult] = []
    for item in list(jobs_box or []) + list(organic or []):
        if not isinstance(item, dict):
            continue
        result = _parse_item(item)
        if result:
            out.append(result)
    return out


class _HttpSearchProvider(ABC):
    """Shared request and error handling; subclasses build the provider-specific request."""

    name = "search"

    def __init__(self, api_key: str, timeout: float, client: Optional[httpx.AsyncClient]) -> None:
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @abstractmethod
    async def _send(self, client: httpx.AsyncClient, query: str, num: int, country: str) -> httpx.Response:
        ...

    async def _request(self, query: str, num: int, country: str) -> dict:
        if not self._api_key:
            raise CollaboratorError(self.name, "API key is not set")
        try:
            if self._client is not None:
                response = await self._send(self._client, query, num, country)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await self._send(client, query, num, country)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("%s HTTP error: %s %s", self.name, e.response.status_code, e.response.text[:200])
            raise CollaboratorError(self.name, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("%s request failed: %s", self.name, e)
            raise CollaboratorError(self.name, str(e) or type(e).__name__) from e


class SerpApiSearchProvider(_HttpSearchProvider):
    """Google search through SerpAPI; merges jobs_results with organic_results."""

    name = "serpapi"

    def __init__(
        self,
        api_key: str = SERPAPI_KEY,
        timeout: float = SEARCH_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(api_key, timeout, client)

    async def _send(self, client: httpx.AsyncClient, query: str, num: int, country: str) -> httpx.Response:
        params: dict[str, Any] = {
            "q": query,
            "api_key": self._api_key,
            "num": min(100, max(10, num)),
            "engine": "google",
            "gl": country,
        }
        return await client.get(SERPAPI_BASE, params=params)

    async def search(self, query: str, num: int = 10, country: Optional[str] = None) -> List[SearchResult]:
        data = await self._request(query, num, country or SEARCH_COUNTRY)
        results = _merge_results(data.get("jobs_results") or [], data.get("organic_results") or [])
        logger.info("SerpAPI query '%s' returned %s results", query[:60], len(results))
        return results[:num]


class SerperSearchProvider(_HttpSearchProvider):
    """Google search through google.serper.dev; merges the jobs box with organic results."""

    name = "serper"

    def __init__(
        self,
        api_key: str = SERPER_API_KEY,
        timeout: float = SEARCH_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(api_key, timeout, client)

    async def _send(self, client: httpx.AsyncClient, query: str, num: int, country: str) -> httpx.Response:
        return await client.post(
            SERPER_BASE,
            json={"q": query, "num": num, "gl": country},
            headers={"X-API-KEY": self._api_key, "Content-Type": "application/json"},
        )

    async def search(self, query: str, num: int = 10, country: Optional[str] = None) -> List[SearchResult]:
        data = await self._request(query, num, country or SEARCH_COUNTRY)
        results = _merge_results(data.get("jobs") or [], data.get("organic") or [])
        logger.info("Serper query '%s' returned %s results", query[:60], len(results))
        return results[:num]


def get_search_provider(provider: Optional[str] = None) -> SearchProvider:
    """
    Return the configured search provider (dependency injection).
    provider: override config; None uses SEARCH_PROVIDER.
    """
    from jobgenie.config import SEARCH_PROVIDER

    p = (provider or SEARCH_PROVIDER).strip().lower()
    if p == "serper":
        return SerperSearchProvider()
    return SerpApiSearchProvider()

"""Search Agent: issues queries to the search provider one by one and returns deduplicated job URLs."""

import asyncio
from typing import List, Optional

from jobgenie.config import (
    DEFAULT_DATE_RANGE_DAYS,
    MAX_SEARCH_URLS,
    SEARCH_COUNTRY,
    SEARCH_RESULTS_PER_QUERY,
    SEARCH_TIMEOUT_SECONDS,
)
from jobgenie.schemas.search_outcome import FanOutResult
from jobgenie.schemas.search_result import SearchResult
from jobgenie.services.serp_service import SearchProvider
from jobgenie.utils.freshness import classify_freshness
from jobgenie.utils.helpers import is_probable_job_url, normalize_url
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)


def _snippet_is_stale(result: SearchResult, max_age_days: int) -> bool:
    """True when the result's title or snippet already proves the posting is too old."""
    verdict = classify_freshness(f"{result.title} {result.snippet}", max_age_days)
    return not verdict.accept


async def run_search_agent(
    queries: List[str],
    provider: SearchProvider,
    cap_per_query: int = SEARCH_RESULTS_PER_QUERY,
    global_cap: int = MAX_SEARCH_URLS,
    max_age_days: Optional[int] = DEFAULT_DATE_RANGE_DAYS,
    country: Optional[str] = SEARCH_COUNTRY,
    timeout: float = SEARCH_TIMEOUT_SECONDS,
) -> FanOutResult:
    """
    Run queries sequentially, merge results, deduplicate by normalized URL and stop once
    global_cap unique URLs are collected. Non-job pages and results whose snippet proves
    staleness are skipped. A failing or timed-out query is logged and counted; the rest still run.
    """
    seen: set[str] = set()
    collected: List[SearchResult] = []
    attempted = failed = skipped = 0

    for query in queries:
        if len(collected) >= global_cap:
            logger.info("Global URL cap (%s) reached; skipping remaining queries", global_cap)
            break
        attempted += 1
        try:
            results = await asyncio.wait_for(provider.search(query, num=cap_per_query, country=country), timeout)
        except asyncio.TimeoutError:
            failed += 1
            logger.warning("Search timed out for query '%s'", query[:60])
            continue
        except Exception as e:
            failed += 1
            logger.warning("Search failed for query '%s': %s", query[:60], e)
            continue

        for result in (results or [])[:cap_per_query]:
            key = normalize_url(result.link)
            if not key or key in seen:
                continue
            seen.add(key)
            if not is_probable_job_url(key):
                skipped += 1
                logger.debug("Skipping non-job URL: %s", key)
                continue
            if max_age_days is not None and _snippet_is_stale(result, max_age_days):
                skipped += 1
                logger.debug("Skipping stale search result: %s", key)
                continue
            collected.append(result.model_copy(update={"link": key}))
            if len(collected) >= global_cap:
                break

    logger.info(
        "Search Agent finished: queries=%s failed=%s skipped=%s returned=%s",
        attempted,
        failed,
        skipped,
        len(collected),
    )
    return FanOutResult(results=collected, queries_attempted=attempted, queries_failed=failed)

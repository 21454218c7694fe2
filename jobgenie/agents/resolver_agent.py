"""Resolver Agent: turn search-result URLs into scraped jobs, following list pages one level down."""

import asyncio
from typing import Dict, List, NamedTuple, Sequence, Tuple, Union

from jobgenie.config import (
    MAX_JOBS_ACCUMULATED,
    MAX_LIST_CHILDREN,
    MAX_RESOLVE_DEPTH,
    PAGE_FETCH_CONCURRENCY,
    PAGE_FETCH_TIMEOUT_SECONDS,
)
from jobgenie.schemas.scraped_job import FetchOutcome, ResolveError, ScrapedJob
from jobgenie.services.page_fetcher import JobPageFetcher
from jobgenie.utils.helpers import is_probable_job_url, normalize_url
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

ResolveResult = Union[ScrapedJob, List[ScrapedJob], ResolveError]


class _Pending(NamedTuple):
    url: str
    depth: int
    root: str


class _RunState:
    """Visited set and results of one resolution run. Only the coordinator writes to it."""

    def __init__(self) -> None:
        self.visited: set[str] = set()
        self.jobs: List[ScrapedJob] = []
        self.jobs_by_root: Dict[str, List[ScrapedJob]] = {}
        self.root_kind: Dict[str, str] = {}
        self.errors: List[ResolveError] = []


class PageResolver:
    """
    Bounded-depth worklist over the page-fetching service.

    Depth 1 is a search-result URL. A list page enqueues up to max_children unvisited child
    URLs at depth 2; a depth-2 page that is itself a list, or fails, is dropped. Each wave of
    pending URLs is fetched concurrently under a semaphore, and the outcomes are applied to
    the shared state by the coordinating coroutine alone. Once max_jobs are accumulated no
    further waves are scheduled, but outcomes of the current wave are kept.
    """

    def __init__(
        self,
        fetcher: JobPageFetcher,
        concurrency: int = PAGE_FETCH_CONCURRENCY,
        max_children: int = MAX_LIST_CHILDREN,
        max_depth: int = MAX_RESOLVE_DEPTH,
        max_jobs: int = MAX_JOBS_ACCUMULATED,
        timeout: float = PAGE_FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._concurrency = max(1, concurrency)
        self._max_children = max_children
        self._max_depth = max(1, max_depth)
        self._max_jobs = max_jobs
        self._timeout = timeout

    async def _fetch(self, sem: asyncio.Semaphore, url: str) -> FetchOutcome:
        async with sem:
            try:
                return await asyncio.wait_for(self._fetcher.fetch_job_page(url), self._timeout)
            except asyncio.TimeoutError:
                logger.warning("Page fetch timed out: %s", url)
                return FetchOutcome.failed("Timed out")
            except Exception as e:
                logger.warning("Page fetch failed for %s: %s", url, e)
                return FetchOutcome.failed(str(e) or type(e).__name__)

    def _apply(self, state: _RunState, item: _Pending, outcome: FetchOutcome) -> List[_Pending]:
        """Record one outcome; return the children to schedule next."""
        if item.depth == 1:
            state.root_kind[item.url] = outcome.kind

        if outcome.error:
            state.errors.append(ResolveError(url=item.url, reason=outcome.error))
            return []

        if outcome.kind == "list":
            if item.depth >= self._max_depth:
                logger.debug("Dropping nested list page at depth %s: %s", item.depth, item.url)
                state.errors.append(ResolveError(url=item.url, reason="Nested list page"))
                return []
            children: List[_Pending] = []
            for child in outcome.jobs:
                if len(children) >= self._max_children:
                    break
                child_url = normalize_url(child.url)
                if not child_url or child_url in state.visited or not is_probable_job_url(child_url):
                    continue
                state.visited.add(child_url)
                children.append(_Pending(child_url, item.depth + 1, item.root))
            logger.info("List page %s -> following %s children", item.url, len(children))
            return children

        job = outcome.job
        if job is None or job.is_empty:
            state.errors.append(ResolveError(url=item.url, reason="Empty job page"))
            return []
        if not job.url:
            job = job.model_copy(update={"url": item.url})
        state.jobs.append(job)
        state.jobs_by_root.setdefault(item.root, []).append(job)
        return []

    async def _run(self, urls: Sequence[str]) -> _RunState:
        state = _RunState()
        sem = asyncio.Semaphore(self._concurrency)
        wave: List[_Pending] = []
        for url in urls:
            key = normalize_url(url)
            if key and key not in state.visited:
                state.visited.add(key)
                wave.append(_Pending(key, 1, key))

        while wave:
            outcomes = await asyncio.gather(*(self._fetch(sem, item.url) for item in wave))
            next_wave: List[_Pending] = []
            for item, outcome in zip(wave, outcomes):
                next_wave.extend(self._apply(state, item, outcome))
            if len(state.jobs) >= self._max_jobs:
                logger.info("Job cap (%s) reached; not following %s more URLs", self._max_jobs, len(next_wave))
                break
            wave = next_wave
        return state

    async def resolve(self, url: str) -> ResolveResult:
        """One URL: a ScrapedJob for a posting, a list of child jobs for a list page, or a ResolveError."""
        key = normalize_url(url)
        if not key:
            return ResolveError(url=url or "", reason="URL is required")
        state = await self._run([key])
        jobs = state.jobs_by_root.get(key, [])
        if state.root_kind.get(key) == "list" and not any(e.url == key for e in state.errors):
            return jobs
        if jobs:
            return jobs[0]
        for error in state.errors:
            if error.url == key:
                return error
        return ResolveError(url=key, reason="No job found")

    async def resolve_many(self, urls: Sequence[str]) -> Tuple[List[ScrapedJob], List[ResolveError]]:
        """Resolve every URL; failures are isolated per URL and reported alongside the jobs."""
        state = await self._run(urls)
        logger.info(
            "Resolver finished: urls=%s visited=%s jobs=%s errors=%s",
            len(urls),
            len(state.visited),
            len(state.jobs),
            len(state.errors),
        )
        return state.jobs, state.errors

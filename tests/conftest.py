"""Shared test fixtures and fake collaborators."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from jobgenie.exceptions import CollaboratorError
from jobgenie.schemas.job_listing import JobListing
from jobgenie.schemas.scraped_job import FetchOutcome, ScrapedJob
from jobgenie.schemas.search_result import SearchResult
from jobgenie.services.credit_ledger import InMemoryCreditLedger

LONG_DESCRIPTION = (
    "We are looking for a backend engineer to design, build and operate the services behind "
    "our logistics platform. You will work closely with product and data teams.\n"
    "Requirements:\n"
    "- 3+ years of professional Python experience\n"
    "- Experience with PostgreSQL and REST APIs\n"
    "Responsibilities:\n"
    "- Build and maintain backend services\n"
    "- Review code and mentor junior engineers\n"
    "Benefits:\n"
    "- Health insurance and a learning budget\n"
)


class FakeSearchProvider:
    """Returns canned results per query (or the same results for every query) and records calls."""

    def __init__(
        self,
        results: Optional[List[SearchResult]] = None,
        by_query: Optional[Dict[str, List[SearchResult]]] = None,
        fail_queries: Optional[set] = None,
        fail_all: bool = False,
    ) -> None:
        self.results = results or []
        self.by_query = by_query or {}
        self.fail_queries = fail_queries or set()
        self.fail_all = fail_all
        self.calls: List[str] = []

    async def search(self, query: str, num: int = 10, country: Optional[str] = None) -> List[SearchResult]:
        self.calls.append(query)
        if self.fail_all or query in self.fail_queries:
            raise CollaboratorError("search", "HTTP 500")
        if query in self.by_query:
            return list(self.by_query[query])
        return list(self.results)


class FakeFetcher:
    """Maps URL -> FetchOutcome; unknown URLs fail. Records every URL requested."""

    def __init__(self, pages: Optional[Dict[str, FetchOutcome]] = None, raise_for: Optional[set] = None) -> None:
        self.pages = pages or {}
        self.raise_for = raise_for or set()
        self.calls: List[str] = []

    async def fetch_job_page(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        if url in self.raise_for:
            raise RuntimeError("connection reset")
        return self.pages.get(url, FetchOutcome.failed("All scraping methods failed"))


class FakeGenerator:
    """Returns queued responses in order, then the last one forever."""

    def __init__(self, *responses: str) -> None:
        self.responses = list(responses) or ["{}"]
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FailingGenerator:
    """Generator that is always down."""

    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, prompt: str) -> str:
        self.calls += 1
        raise CollaboratorError("openai", "quota exceeded")


class BrokenLedger:
    async def has_credits(self, user_id: str) -> bool:
        raise ConnectionError("ledger unreachable")

    async def deduct(self, user_id: str) -> bool:
        raise ConnectionError("ledger unreachable")


def make_listing(**overrides) -> JobListing:
    from datetime import datetime, timezone

    data = dict(
        id="job_1",
        title="Backend Engineer",
        company="Acme Co",
        location="Austin, TX",
        description=LONG_DESCRIPTION,
        salary="$120k - $150k",
        requirements=["3+ years of professional Python experience"],
        responsibilities=["Build and maintain backend services"],
        posted_date=datetime.now(timezone.utc),
        source_url="https://careers.acme.com/jobs/1",
    )
    data.update(overrides)
    return JobListing(**data)


@pytest.fixture()
def scraped_job() -> ScrapedJob:
    return ScrapedJob(
        url="https://careers.acme.com/jobs/1",
        title="Backend Engineer",
        company="Acme Co",
        location="Austin, TX",
        description="Posted 2 days ago. " + LONG_DESCRIPTION,
    )


@pytest.fixture()
def ledger() -> InMemoryCreditLedger:
    return InMemoryCreditLedger({"user-1": 3})

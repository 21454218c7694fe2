"""Tests for page resolution (single / list / error, bounded depth)."""

from __future__ import annotations

import asyncio

from conftest import FakeFetcher

from jobgenie.agents.resolver_agent import PageResolver
from jobgenie.schemas.scraped_job import FetchOutcome, ResolveError, ScrapedJob


def _job(url: str, title: str = "Backend Engineer") -> ScrapedJob:
    return ScrapedJob(url=url, title=title, company="Acme", description="Build services")


def test_single_page():
    fetcher = FakeFetcher({"https://a.com/jobs/1": FetchOutcome.single(_job("https://a.com/jobs/1"))})
    result = asyncio.run(PageResolver(fetcher).resolve("https://a.com/jobs/1"))
    assert isinstance(result, ScrapedJob)
    assert result.title == "Backend Engineer"


def test_single_without_url_gets_requested_url():
    fetcher = FakeFetcher({"https://a.com/jobs/1": FetchOutcome.single(ScrapedJob(title="Engineer"))})
    result = asyncio.run(PageResolver(fetcher).resolve("https://a.com/jobs/1"))
    assert result.url == "https://a.com/jobs/1"


def test_empty_single_is_error():
    fetcher = FakeFetcher({"https://a.com/jobs/1": FetchOutcome.single(ScrapedJob(company="Acme"))})
    result = asyncio.run(PageResolver(fetcher).resolve("https://a.com/jobs/1"))
    assert isinstance(result, ResolveError)


def test_error_outcome():
    result = asyncio.run(PageResolver(FakeFetcher()).resolve("https://a.com/jobs/1"))
    assert isinstance(result, ResolveError)
    assert result.reason == "All scraping methods failed"


def test_list_page_follows_bounded_children():
    children = [ScrapedJob(url=f"https://a.com/jobs/{i}", title=f"Job {i}") for i in range(6)]
    pages = {"https://a.com/search-results": FetchOutcome.listing(children)}
    for i in range(6):
        url = f"https://a.com/jobs/{i}"
        pages[url] = FetchOutcome.single(_job(url, f"Engineer {i}"))
    fetcher = FakeFetcher(pages)
    result = asyncio.run(PageResolver(fetcher, max_children=3).resolve("https://a.com/search-results"))
    assert isinstance(result, list)
    assert sorted(j.title for j in result) == ["Engineer 0", "Engineer 1", "Engineer 2"]
    assert len(fetcher.calls) == 4


def test_nested_list_is_dropped():
    pages = {
        "https://a.com/list": FetchOutcome.listing([ScrapedJob(url="https://a.com/list2")]),
        "https://a.com/list2": FetchOutcome.listing([ScrapedJob(url="https://a.com/jobs/9")]),
        "https://a.com/jobs/9": FetchOutcome.single(_job("https://a.com/jobs/9")),
    }
    fetcher = FakeFetcher(pages)
    jobs, errors = asyncio.run(PageResolver(fetcher).resolve_many(["https://a.com/list"]))
    assert jobs == []
    assert "https://a.com/jobs/9" not in fetcher.calls
    assert any(e.url == "https://a.com/list2" for e in errors)


def test_failures_are_isolated_per_url():
    pages = {"https://a.com/jobs/2": FetchOutcome.single(_job("https://a.com/jobs/2"))}
    fetcher = FakeFetcher(pages, raise_for={"https://a.com/jobs/1"})
    jobs, errors = asyncio.run(
        PageResolver(fetcher).resolve_many(["https://a.com/jobs/1", "https://a.com/jobs/2"])
    )
    assert [j.url for j in jobs] == ["https://a.com/jobs/2"]
    assert [e.url for e in errors] == ["https://a.com/jobs/1"]


def test_visited_urls_fetched_once():
    pages = {
        "https://a.com/list": FetchOutcome.listing([ScrapedJob(url="https://a.com/jobs/1")]),
        "https://a.com/jobs/1": FetchOutcome.single(_job("https://a.com/jobs/1")),
    }
    fetcher = FakeFetcher(pages)
    jobs, _ = asyncio.run(
        PageResolver(fetcher).resolve_many(["https://a.com/jobs/1", "https://a.com/list", "https://a.com/jobs/1/"])
    )
    assert len(jobs) == 1
    assert fetcher.calls.count("https://a.com/jobs/1") == 1


def test_job_cap_stops_following_lists():
    pages = {
        "https://a.com/jobs/1": FetchOutcome.single(_job("https://a.com/jobs/1")),
        "https://a.com/list": FetchOutcome.listing([ScrapedJob(url="https://a.com/jobs/2")]),
        "https://a.com/jobs/2": FetchOutcome.single(_job("https://a.com/jobs/2")),
    }
    fetcher = FakeFetcher(pages)
    jobs, _ = asyncio.run(PageResolver(fetcher, max_jobs=1).resolve_many(["https://a.com/jobs/1", "https://a.com/list"]))
    assert len(jobs) == 1
    assert "https://a.com/jobs/2" not in fetcher.calls


def test_slow_fetch_times_out():
    class SlowFetcher:
        async def fetch_job_page(self, url):
            await asyncio.sleep(5)
            return FetchOutcome.failed("never")

    result = asyncio.run(PageResolver(SlowFetcher(), timeout=0.01).resolve("https://a.com/jobs/1"))
    assert isinstance(result, ResolveError)
    assert result.reason == "Timed out"

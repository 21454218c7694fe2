"""Tests for the HTTP page-fetch ladder using httpx.MockTransport."""

from __future__ import annotations

import asyncio

import httpx

from jobgenie.services.page_fetcher import BROWSER_HEADERS, HttpJobPageFetcher

JOB_HTML = """
<h1>Platform Engineer</h1>
<div class="company">Umbrella</div>
<div class="job-description">Keep the lights on.</div>
"""
URL = "https://umbrella.example/jobs/7"


def _fetch(handler, url: str = URL, **kwargs):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = HttpJobPageFetcher(client=client, backoff_seconds=0, **kwargs)
            return await fetcher.fetch_job_page(url)

    return asyncio.run(_run())


def test_direct_fetch():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["user-agent"])
        return httpx.Response(200, text=JOB_HTML)

    outcome = _fetch(handler)
    assert outcome.kind == "single"
    assert outcome.job.title == "Platform Engineer"
    assert seen == [BROWSER_HEADERS["User-Agent"]]


def test_blocked_direct_falls_back_to_alternate_agent():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.headers["user-agent"])
        if request.headers["user-agent"] == BROWSER_HEADERS["User-Agent"]:
            return httpx.Response(403)
        return httpx.Response(200, text=JOB_HTML)

    outcome = _fetch(handler)
    assert outcome.job.company == "Umbrella"
    # Blocked responses are not retried
    assert calls.count(BROWSER_HEADERS["User-Agent"]) == 1
    assert len(calls) == 2


def test_proxy_relay_is_last_resort():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "relay.example":
            assert request.url.params["url"] == URL
            return httpx.Response(200, text=JOB_HTML)
        return httpx.Response(429)

    outcome = _fetch(handler, proxy_relay_url="https://relay.example/raw")
    assert outcome.job.title == "Platform Engineer"


def test_everything_fails():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(503)

    outcome = _fetch(handler, proxy_relay_url=None, max_retries=2)
    assert outcome.error == "All scraping methods failed"
    # two direct attempts plus one per alternate user agent
    assert len(calls) == 2 + 3


def test_transport_errors_are_recovered():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    outcome = _fetch(handler, proxy_relay_url=None, max_retries=1)
    assert outcome.error == "All scraping methods failed"


def test_missing_url():
    outcome = _fetch(lambda request: httpx.Response(200), url="")
    assert outcome.error == "URL is required"

"""Tests for the structuring engine and its deterministic fallback."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest
from conftest import LONG_DESCRIPTION, FailingGenerator, FakeGenerator

from jobgenie.agents.extractor_agent import (
    FALLBACK_COMPANY,
    FALLBACK_DESCRIPTION,
    extract_sections,
    infer_company_from_url,
    run_extractor_agent,
    split_title_company,
    structure_job,
)
from jobgenie.schemas.refinements import SearchRefinements
from jobgenie.schemas.scraped_job import ScrapedJob

REFINEMENTS = SearchRefinements(job_titles=["Software Engineer"], date_range=4)


def _structure(raw, generator, url="https://careers.acme.com/jobs/1"):
    return asyncio.run(structure_job(raw, url, REFINEMENTS, generator))


def test_empty_raw_returns_none_without_llm_call():
    gen = FakeGenerator()
    assert _structure(ScrapedJob(company="Acme"), gen) is None
    assert gen.prompts == []


def test_stale_posting_rejected_before_llm():
    gen = FakeGenerator()
    raw = ScrapedJob(title="Backend Engineer", description="Posted 3 weeks ago. " + LONG_DESCRIPTION)
    assert _structure(raw, gen) is None
    assert gen.prompts == []


def test_llm_result_used(scraped_job):
    response = json.dumps(
        {
            "title": "Backend Engineer",
            "company": "Acme Co",
            "location": "Austin, TX",
            "description": "Build Python services. " * 10,
            "workplaceType": "remote",
            "requirements": ["Python", "SQL", "AWS", "Docker", "Linux", "Go"],
            "responsibilities": "Ship features",
        }
    )
    gen = FakeGenerator(response)
    job = _structure(scraped_job, gen)
    assert job.title == "Backend Engineer"
    assert job.workplace_type == "Remote"
    assert len(job.requirements) == 5
    assert job.responsibilities == ["Ship features"]
    assert abs((datetime.now(timezone.utc) - timedelta(days=2) - job.posted_date).total_seconds()) < 60
    prompt = gen.prompts[0]
    assert "Use ONLY the data supplied" in prompt
    assert "Acme Co" in prompt


def test_description_truncated_in_prompt():
    gen = FakeGenerator("{}")
    raw = ScrapedJob(title="Engineer", description="word " * 2000)
    _structure(raw, gen)
    assert "word " * 700 not in gen.prompts[0]


def test_llm_blank_fields_filled_from_raw(scraped_job):
    job = _structure(scraped_job, FakeGenerator('{"title": "", "company": null}'))
    assert job.title == "Backend Engineer"
    assert job.company == "Acme Co"


def test_provider_failure_uses_fallback(scraped_job):
    job = _structure(scraped_job, FailingGenerator())
    assert job.title == "Backend Engineer"
    assert job.company == "Acme Co"
    assert job.salary == "Competitive"
    assert job.employment_type == "Full-time"
    assert job.workplace_type == "Onsite"
    assert job.requirements[0] == "3+ years of professional Python experience"
    assert job.responsibilities == ["Build and maintain backend services", "Review code and mentor junior engineers"]


def test_unparseable_response_uses_fallback(scraped_job):
    job = _structure(scraped_job, FakeGenerator("no json here"))
    assert job.salary == "Competitive"


@pytest.mark.parametrize(
    "raw",
    [
        ScrapedJob(description="x"),
        ScrapedJob(description="Senior role. " * 50),
        ScrapedJob(title="T"),
        ScrapedJob(title="Engineer at", description="Requirements:"),
        ScrapedJob(title="   ", description="\n\n- \n"),
    ],
)
def test_structuring_is_total(raw):
    job = _structure(raw, FailingGenerator(), url="https://www.linkedin.com/jobs/view/123")
    assert job is not None
    assert job.id
    assert job.title.strip()
    assert job.company.strip()
    assert job.source_url == "https://www.linkedin.com/jobs/view/123"
    assert len(job.requirements) <= 5


def test_fallback_description_marker():
    job = _structure(ScrapedJob(title="Engineer"), FailingGenerator())
    assert job.description == FALLBACK_DESCRIPTION


@pytest.mark.parametrize("bad_value", [5, True, 3.5, {"first": "Python"}])
def test_non_list_llm_fields_fall_back_to_scraped_sections(scraped_job, bad_value):
    gen = FakeGenerator(
        json.dumps(
            {
                "title": "Backend Engineer",
                "company": "Acme",
                "requirements": bad_value,
                "responsibilities": bad_value,
            }
        )
    )
    job = _structure(scraped_job, gen)
    assert job is not None
    assert job.company == "Acme"
    assert job.requirements == [
        "3+ years of professional Python experience",
        "Experience with PostgreSQL and REST APIs",
    ]
    assert job.responsibilities[0] == "Build and maintain backend services"


def test_batch_shares_one_reference_time():
    now = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
    raws = [
        ScrapedJob(url=f"https://careers.acme.com/jobs/{i}", title="Backend Engineer", description=text)
        for i, text in enumerate(["Posted 2 days ago. " + LONG_DESCRIPTION, LONG_DESCRIPTION])
    ]
    jobs = asyncio.run(run_extractor_agent(raws, REFINEMENTS, FailingGenerator(), now=now))
    assert [j.posted_date for j in jobs] == [now - timedelta(days=2), now]


def test_ids_unique_for_same_url(scraped_job):
    gen = FailingGenerator()
    jobs = asyncio.run(run_extractor_agent([scraped_job, scraped_job], REFINEMENTS, gen))
    assert len(jobs) == 2
    assert jobs[0].id != jobs[1].id


def test_split_title_company():
    assert split_title_company("Backend Engineer at Acme") == ("Backend Engineer", "Acme")
    assert split_title_company("Backend Engineer - Acme Co") == ("Backend Engineer", "Acme Co")
    assert split_title_company("Backend Engineer") == ("Backend Engineer", "")


def test_company_from_title_when_missing():
    job = _structure(ScrapedJob(title="Data Engineer at Globex", description="Nice job"), FailingGenerator())
    assert job.title == "Data Engineer"
    assert job.company == "Globex"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://boards.greenhouse.io/stripe/jobs/123", "Stripe"),
        ("https://jobs.lever.co/netflix/abc-def", "Netflix"),
        ("https://acme.wd5.myworkdayjobs.com/en-US/careers/job/1", "Acme"),
        ("https://careers.globex.com/jobs/42", "Globex"),
        ("https://www.linkedin.com/jobs/view/1", ""),
        ("", ""),
    ],
)
def test_infer_company_from_url(url, expected):
    assert infer_company_from_url(url) == expected


def test_unknown_company_uses_sentinel():
    job = _structure(ScrapedJob(title="Engineer", description="Nice job"), FailingGenerator(),
                     url="https://www.indeed.com/viewjob?jk=1")
    assert job.company == FALLBACK_COMPANY


def test_extract_sections_caps_and_stops():
    text = (
        "Qualifications\n"
        + "\n".join(f"- requirement number {i}" for i in range(8))
        + "\nshort\nAbout us:\n- We are a great company to work for"
    )
    requirements, responsibilities = extract_sections(text)
    assert len(requirements) == 5
    assert responsibilities == []


def test_extract_sections_inline_item():
    requirements, _ = extract_sections("Requirements: 5+ years building APIs\nBenefits:\n- Free lunch every day")
    assert requirements == ["5+ years building APIs"]

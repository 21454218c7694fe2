"""Tests for intent analysis."""

from __future__ import annotations

import asyncio
import json

from conftest import FailingGenerator, FakeGenerator

from jobgenie.agents.intent_agent import (
    FALLBACK_MISSING,
    MISSING_LOCATION,
    MISSING_TITLE,
    analyze_search_intent,
    infer_roles_from_skills,
)


def test_single_word_prompt_short_circuits():
    gen = FakeGenerator()
    result = asyncio.run(analyze_search_intent("developer", False, gen))
    assert MISSING_TITLE in result.missing_info
    assert MISSING_LOCATION in result.missing_info
    assert result.suggestions
    assert gen.prompts == []


def test_prompt_without_location_short_circuits():
    gen = FakeGenerator()
    result = asyncio.run(analyze_search_intent("senior python developer", False, gen))
    assert result.missing_info[0] == MISSING_LOCATION
    assert gen.prompts == []


def test_llm_refinements_parsed():
    response = json.dumps(
        {
            "refinements": {
                "jobTitles": ["Python Developer"],
                "location": {"city": "Austin", "remote": False},
                "seniority": "Senior",
                "mustHaveSkills": ["Python", "Django"],
                "dateRange": 5,
            },
            "missingInfo": [],
            "suggestions": ["Add a salary range"],
        }
    )
    gen = FakeGenerator(f"```json\n{response}\n```")
    result = asyncio.run(analyze_search_intent("Senior Python developer in Austin, $140k", False, gen))
    r = result.refinements
    assert r.job_titles == ["Python Developer"]
    assert r.location.city == "Austin"
    assert r.seniority == "senior"
    assert r.must_have_skills == ["Python", "Django"]
    assert r.date_range == 5
    assert result.suggestions == ["Add a salary range"]
    assert len(gen.prompts) == 1


def test_remote_city_becomes_remote_flag():
    gen = FakeGenerator('{"refinements": {"job_titles": ["QA Engineer"], "location": {"city": "Remote"}}}')
    result = asyncio.run(analyze_search_intent("QA engineer, remote only", False, gen))
    assert result.refinements.location.city is None
    assert result.refinements.location.remote is True


def test_provider_error_falls_back():
    result = asyncio.run(analyze_search_intent("Backend engineer in Berlin", False, FailingGenerator()))
    assert result.refinements.location.remote is True
    assert result.refinements.seniority == "mid"
    assert result.missing_info == FALLBACK_MISSING


def test_unparseable_response_falls_back():
    gen = FakeGenerator("I think you want a job!")
    result = asyncio.run(analyze_search_intent("Backend engineer in Berlin", False, gen))
    assert result.refinements.location.remote is True
    assert result.missing_info == FALLBACK_MISSING


def test_resume_never_short_circuits_and_infers_roles():
    resume = "Jane Doe\nSkills: Python, Django, Docker, PostgreSQL"
    gen = FailingGenerator()
    result = asyncio.run(analyze_search_intent(resume, True, gen))
    assert gen.calls == 1
    assert "Python Developer" in result.refinements.job_titles
    assert "python" in result.refinements.must_have_skills


def test_resume_prompt_is_truncated():
    gen = FakeGenerator('{"refinements": {"job_titles": ["Engineer"]}}')
    asyncio.run(analyze_search_intent("x" * 10000, True, gen))
    assert "x" * 2000 in gen.prompts[0]
    assert "x" * 2001 not in gen.prompts[0]


def test_infer_roles_dedup_and_cap():
    roles = infer_roles_from_skills(["python", "django", "fastapi", "aws", "kubernetes"], max_roles=4)
    assert roles == ["Python Developer", "Software Engineer", "Data Engineer", "Backend Developer"]

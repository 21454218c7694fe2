"""Tests for search query construction."""

from __future__ import annotations

from jobgenie.agents.query_builder import build_query, build_search_plan, build_site_scoped_queries
from jobgenie.config import SITE_QUERY_VARIANTS
from jobgenie.schemas.refinements import SearchRefinements


def _refinements(**kw) -> SearchRefinements:
    data = dict(
        job_titles=["Software Engineer"],
        synonyms=["Backend Developer"],
        location={"city": "Austin"},
        must_have_skills=["Python", "Django", "AWS", "Docker"],
    )
    data.update(kw)
    return SearchRefinements(**data)


def test_general_query_order():
    q = build_query(_refinements(seniority="senior"))
    assert q.startswith("(Software Engineer OR Backend Developer) Austin senior Python Django AWS")
    assert "Docker" not in q
    assert "hiring now" in q
    assert '"posted today" OR "posted yesterday"' in q


def test_mid_seniority_omitted():
    q = build_query(_refinements())
    assert " mid " not in f" {q} "


def test_remote_token():
    q = build_query(_refinements(location={"remote": True}))
    assert "remote" in q.split()
    assert "Austin" not in q


def test_titles_dedup_case_insensitive():
    q = build_query(_refinements(job_titles=["Data Engineer"], synonyms=["data engineer", "ETL Developer"]))
    assert "(Data Engineer OR ETL Developer)" in q


def test_site_scoped_query():
    queries = build_site_scoped_queries(_refinements(), "linkedin")
    assert len(queries) == 1
    assert queries[0].endswith("site:linkedin.com/jobs/view")
    assert "hiring now" not in queries[0]


def test_unknown_site_hint():
    assert build_site_scoped_queries(_refinements(), "myspace") == []


def test_search_plan_has_every_site_then_general():
    plan = build_search_plan(_refinements())
    assert len(plan) == len(SITE_QUERY_VARIANTS) + 1
    assert plan[-1] == build_query(_refinements())
    assert len(set(plan)) == len(plan)


def test_search_plan_prefix():
    plan = build_search_plan(_refinements(), "python jobs")
    assert all(q.startswith("python jobs ") for q in plan)

"""Query builder: turn search refinements into search-engine query strings (general and site-scoped)."""

from typing import List

from jobgenie.config import FRESHNESS_QUERY_TAIL, SITE_QUERY_VARIANTS
from jobgenie.schemas.refinements import SearchRefinements
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

MAX_QUERY_SKILLS = 3
NEUTRAL_SENIORITY = "mid"


def _build_or_query_part(terms: List[str]) -> str:
    """Build (A OR B OR C) for a search query."""
    cleaned = [t.strip() for t in terms if t and t.strip()]
    return "(" + " OR ".join(cleaned) + ")" if cleaned else ""


def _core_parts(refinements: SearchRefinements) -> List[str]:
    """Titles, location, seniority and top skills; shared by general and site-scoped queries."""
    parts: List[str] = []
    titles = _build_or_query_part(refinements.all_titles)
    if titles:
        parts.append(titles)
    if refinements.location.city:
        parts.append(refinements.location.city)
    if refinements.location.remote:
        parts.append("remote")
    if refinements.seniority and refinements.seniority != NEUTRAL_SENIORITY:
        parts.append(refinements.seniority)
    if refinements.must_have_skills:
        parts.append(" ".join(refinements.must_have_skills[:MAX_QUERY_SKILLS]))
    return parts


def build_query(refinements: SearchRefinements) -> str:
    """
    General query: OR-group of titles and synonyms, location or "remote", seniority
    (omitted for mid), up to 3 must-have skills, then phrases biasing toward fresh postings.
    """
    return " ".join(_core_parts(refinements) + list(FRESHNESS_QUERY_TAIL))


def build_site_scoped_queries(refinements: SearchRefinements, site_hint: str) -> List[str]:
    """Targeted variants for one job board (a SITE_QUERY_VARIANTS key); unknown hints yield nothing."""
    variant = SITE_QUERY_VARIANTS.get((site_hint or "").strip().lower())
    if not variant:
        logger.warning("Unknown site hint '%s'; no site-scoped query built", site_hint)
        return []
    core = " ".join(_core_parts(refinements))
    return [f"{core} {variant['suffix']}".strip()]


def build_search_plan(refinements: SearchRefinements, search_text: str = "") -> List[str]:
    """
    Ordered, de-duplicated queries for one run: one site-scoped query per configured board,
    then the general query. Free search text, when given, prefixes every query.
    """
    prefix = (search_text or "").strip()
    queries: List[str] = []
    for site_key in SITE_QUERY_VARIANTS:
        queries.extend(build_site_scoped_queries(refinements, site_key))
    queries.append(build_query(refinements))

    plan: List[str] = []
    for q in queries:
        full = f"{prefix} {q}".strip() if prefix else q
        if full and full not in plan:
            plan.append(full)
    logger.info(
        "Search plan: titles=%s city=%s remote=%s -> %s queries",
        len(refinements.all_titles),
        refinements.location.city,
        refinements.location.remote,
        len(plan),
    )
    return plan

"""Agent exports."""

from .extractor_agent import run_extractor_agent, structure_job
from .intent_agent import analyze_search_intent
from .query_builder import build_query, build_search_plan, build_site_scoped_queries
from .resolver_agent import PageResolver
from .search_agent import run_search_agent

__all__ = [
    "analyze_search_intent",
    "build_query",
    "build_search_plan",
    "build_site_scoped_queries",
    "run_search_agent",
    "PageResolver",
    "structure_job",
    "run_extractor_agent",
]

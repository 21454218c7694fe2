"""Service exports."""

from .credit_ledger import CreditLedger, InMemoryCreditLedger
from .filter_service import apply_exclusions, deduplicate_jobs, filter_by_freshness, filter_jobs, filter_quality_jobs
from .llm_service import OpenAITextGenerator, TextGenerator
from .page_fetcher import HttpJobPageFetcher, JobPageFetcher
from .serp_service import SearchProvider, SerpApiSearchProvider, SerperSearchProvider, get_search_provider
from .text_cleaner import clean_page_text

__all__ = [
    "CreditLedger",
    "InMemoryCreditLedger",
    "apply_exclusions",
    "deduplicate_jobs",
    "filter_by_freshness",
    "filter_jobs",
    "filter_quality_jobs",
    "OpenAITextGenerator",
    "TextGenerator",
    "HttpJobPageFetcher",
    "JobPageFetcher",
    "SearchProvider",
    "SerpApiSearchProvider",
    "SerperSearchProvider",
    "get_search_provider",
    "clean_page_text",
]

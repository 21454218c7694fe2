"""Schema exports."""

from .job_listing import CompanyInfo, EnhancedJobListing, JobListing
from .refinements import (
    Eligibility,
    Exclusions,
    LocationPreference,
    SalaryPreference,
    SearchRefinements,
    default_refinements,
)
from .scraped_job import FetchOutcome, ResolveError, ScrapedJob
from .search_outcome import FanOutResult, IntentAnalysis, PipelineStats, SearchOutcome
from .search_result import SearchResult

__all__ = [
    "CompanyInfo",
    "EnhancedJobListing",
    "JobListing",
    "Eligibility",
    "Exclusions",
    "LocationPreference",
    "SalaryPreference",
    "SearchRefinements",
    "default_refinements",
    "FetchOutcome",
    "ResolveError",
    "ScrapedJob",
    "FanOutResult",
    "IntentAnalysis",
    "PipelineStats",
    "SearchOutcome",
    "SearchResult",
]

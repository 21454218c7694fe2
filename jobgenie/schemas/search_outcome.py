"""Pipeline-level results: intent analysis, fan-out report and final search outcome."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from jobgenie.schemas.job_listing import EnhancedJobListing
from jobgenie.schemas.refinements import SearchRefinements
from jobgenie.schemas.search_result import SearchResult

SearchStatus = Literal["ok", "no_results", "insufficient_credits", "invalid_input", "failed"]


class IntentAnalysis(BaseModel):
    """Refinements inferred from free text or a resume, plus prompts for missing details."""

    refinements: SearchRefinements
    missing_info: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class FanOutResult(BaseModel):
    """Deduplicated search results across all queries and how many queries failed."""

    results: List[SearchResult] = Field(default_factory=list)
    queries_attempted: int = 0
    queries_failed: int = 0

    @property
    def all_failed(self) -> bool:
        return self.queries_attempted > 0 and self.queries_failed == self.queries_attempted


class PipelineStats(BaseModel):
    queries_attempted: int = 0
    queries_failed: int = 0
    urls_visited: int = 0
    urls_failed: int = 0
    scraped_records: int = 0
    structured_records: int = 0
    filtered_records: int = 0


class SearchOutcome(BaseModel):
    """What the orchestrator hands back to the presentation layer. Never raised, always returned."""

    status: SearchStatus
    jobs: List[EnhancedJobListing] = Field(default_factory=list)
    error: Optional[str] = None
    refinements: Optional[SearchRefinements] = None
    stats: PipelineStats = Field(default_factory=PipelineStats)

    @property
    def ok(self) -> bool:
        return self.status in ("ok", "no_results")

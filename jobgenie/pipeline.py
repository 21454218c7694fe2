"""
Job search pipeline: credit gate, intent analysis, search fan-out, page resolution,
structuring, filtering and ranking. Collaborators are passed in; nothing is module-global.
"""

from datetime import datetime, timezone
from typing import List, Optional

from jobgenie.agents.extractor_agent import run_extractor_agent
from jobgenie.agents.intent_agent import analyze_search_intent
from jobgenie.agents.query_builder import build_search_plan
from jobgenie.agents.resolver_agent import PageResolver
from jobgenie.agents.search_agent import run_search_agent
from jobgenie.config import (
    EXTRACTOR_CONCURRENCY,
    MAX_JOBS_ACCUMULATED,
    MAX_JOBS_RETURNED,
    MAX_SEARCH_URLS,
    SEARCH_RESULTS_PER_QUERY,
)
from jobgenie.exceptions import CreditLedgerError, InsufficientCreditsError, InvalidSearchInputError
from jobgenie.ranking.match_ranker import rank_jobs
from jobgenie.schemas.job_listing import EnhancedJobListing
from jobgenie.schemas.refinements import SearchRefinements
from jobgenie.schemas.search_outcome import PipelineStats, SearchOutcome
from jobgenie.services.credit_ledger import CreditLedger, InMemoryCreditLedger
from jobgenie.services.filter_service import apply_exclusions, filter_by_freshness, filter_jobs
from jobgenie.services.llm_service import OpenAITextGenerator, TextGenerator
from jobgenie.services.page_fetcher import HttpJobPageFetcher, JobPageFetcher
from jobgenie.services.serp_service import SearchProvider, get_search_provider
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)


class JobSearchPipeline:
    """One instance can serve many runs; each run keeps its own state."""

    def __init__(
        self,
        search_provider: SearchProvider,
        page_fetcher: JobPageFetcher,
        generator: TextGenerator,
        credit_ledger: CreditLedger,
        results_per_query: int = SEARCH_RESULTS_PER_QUERY,
        max_search_urls: int = MAX_SEARCH_URLS,
        max_jobs_accumulated: int = MAX_JOBS_ACCUMULATED,
        max_jobs_returned: int = MAX_JOBS_RETURNED,
        extractor_concurrency: int = EXTRACTOR_CONCURRENCY,
        resolver: Optional[PageResolver] = None,
    ) -> None:
        self.search_provider = search_provider
        self.page_fetcher = page_fetcher
        self.generator = generator
        self.credit_ledger = credit_ledger
        self.results_per_query = results_per_query
        self.max_search_urls = max_search_urls
        self.max_jobs_accumulated = max_jobs_accumulated
        self.max_jobs_returned = max_jobs_returned
        self.extractor_concurrency = extractor_concurrency
        self.resolver = resolver or PageResolver(page_fetcher, max_jobs=max_jobs_accumulated)

    @staticmethod
    def _validate_input(search_text: str, user_id: str, refinements: Optional[SearchRefinements]) -> None:
        if not (user_id or "").strip():
            raise InvalidSearchInputError("A user id is required")
        if not (search_text or "").strip() and refinements is None:
            raise InvalidSearchInputError("Search text is required")

    async def _charge_credit(self, user_id: str) -> None:
        """Take one credit or raise; ledger failures surface as CreditLedgerError."""
        try:
            if not await self.credit_ledger.has_credits(user_id):
                raise InsufficientCreditsError("Insufficient credits")
            if not await self.credit_ledger.deduct(user_id):
                raise InsufficientCreditsError("Insufficient credits")
        except InsufficientCreditsError:
            raise
        except Exception as e:
            raise CreditLedgerError(f"Credit check failed: {e}") from e

    async def run(
        self,
        search_text: str,
        user_id: str,
        refinements: Optional[SearchRefinements] = None,
        is_resume: bool = False,
        max_age_days: Optional[int] = None,
    ) -> SearchOutcome:
        """
        Run one search. Never raises: input problems, credit refusal, ledger failure and a
        search provider that failed every query are reported through SearchOutcome.status.
        max_age_days, when given, overrides the refinements' date_range.
        """
        try:
            self._validate_input(search_text, user_id, refinements)
        except InvalidSearchInputError as e:
            logger.warning("Rejected search input: %s", e)
            return SearchOutcome(status="invalid_input", error=str(e))

        try:
            await self._charge_credit(user_id)
        except InsufficientCreditsError as e:
            logger.info("Search refused for user %s: %s", user_id, e)
            return SearchOutcome(status="insufficient_credits", error=str(e))
        except CreditLedgerError as e:
            logger.error("Credit ledger unavailable for user %s: %s", user_id, e)
            return SearchOutcome(status="failed", error=str(e))

        stats = PipelineStats()
        try:
            return await self._search(search_text, refinements, is_resume, max_age_days, stats)
        except Exception as e:
            logger.exception("Search pipeline failed")
            return SearchOutcome(status="failed", error=str(e), refinements=refinements, stats=stats)

    async def _search(
        self,
        search_text: str,
        refinements: Optional[SearchRefinements],
        is_resume: bool,
        max_age_days: Optional[int],
        stats: PipelineStats,
    ) -> SearchOutcome:
        # Shared by every job in the run; equal posting ages yield equal dates
        now = datetime.now(timezone.utc)
        if refinements is None:
            analysis = await analyze_search_intent(search_text, is_resume, self.generator)
            refinements = analysis.refinements
            if analysis.missing_info:
                logger.info("Searching with incomplete intent; missing=%s", analysis.missing_info)
        if max_age_days is not None:
            refinements = refinements.model_copy(update={"date_range": max(0, max_age_days)})

        # Resume text is far too long to prefix every query with
        queries = build_search_plan(refinements, "" if is_resume else search_text)
        fan_out = await run_search_agent(
            queries,
            self.search_provider,
            cap_per_query=self.results_per_query,
            global_cap=self.max_search_urls,
            max_age_days=refinements.date_range,
        )
        stats.queries_attempted = fan_out.queries_attempted
        stats.queries_failed = fan_out.queries_failed
        if fan_out.all_failed:
            logger.error("Every search query failed (%s)", fan_out.queries_attempted)
            return SearchOutcome(
                status="failed",
                error="Search provider unavailable",
                refinements=refinements,
                stats=stats,
            )

        scraped, errors = await self.resolver.resolve_many([r.link for r in fan_out.results])
        scraped = scraped[: self.max_jobs_accumulated]
        stats.urls_visited = len(fan_out.results)
        stats.urls_failed = len(errors)
        stats.scraped_records = len(scraped)

        structured = await run_extractor_agent(
            scraped, refinements, self.generator, concurrency=self.extractor_concurrency, now=now
        )
        stats.structured_records = len(structured)

        kept = apply_exclusions(structured, refinements.exclusions)
        kept = filter_by_freshness(kept, refinements.date_range, now=now)
        kept = filter_jobs(kept)
        stats.filtered_records = len(kept)

        ranked: List[EnhancedJobListing] = rank_jobs(kept, refinements)[: self.max_jobs_returned]
        logger.info(
            "Pipeline finished: queries=%s urls=%s scraped=%s structured=%s returned=%s",
            stats.queries_attempted,
            stats.urls_visited,
            stats.scraped_records,
            stats.structured_records,
            len(ranked),
        )
        return SearchOutcome(
            status="ok" if ranked else "no_results",
            jobs=ranked,
            refinements=refinements,
            stats=stats,
        )


def build_default_pipeline(credit_ledger: Optional[CreditLedger] = None) -> JobSearchPipeline:
    """Pipeline wired to the configured search provider, HTTP page fetcher and OpenAI."""
    return JobSearchPipeline(
        search_provider=get_search_provider(),
        page_fetcher=HttpJobPageFetcher(),
        generator=OpenAITextGenerator(),
        credit_ledger=credit_ledger or InMemoryCreditLedger(),
    )


async def run_job_search(
    search_text: str,
    user_id: str,
    refinements: Optional[SearchRefinements] = None,
    is_resume: bool = False,
    max_age_days: Optional[int] = None,
    pipeline: Optional[JobSearchPipeline] = None,
) -> SearchOutcome:
    """Run a search with the given pipeline, or the default one."""
    return await (pipeline or build_default_pipeline()).run(
        search_text, user_id, refinements=refinements, is_resume=is_resume, max_age_days=max_age_days
    )

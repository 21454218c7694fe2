"""Quality, exclusion, freshness and duplicate filters over structured jobs. No input is mutated."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence, TypeVar

from jobgenie.schemas.job_listing import JobListing
from jobgenie.schemas.refinements import Exclusions
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

J = TypeVar("J", bound=JobListing)

PLACEHOLDER_TITLES = frozenset({"job opening", "job", "untitled", "position"})
PLACEHOLDER_COMPANIES = frozenset({"company", "unknown", "n/a", "confidential", "not specified"})
FALLBACK_MARKER = "please visit the job page"
MIN_TITLE_LENGTH = 5
MIN_COMPANY_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 100

AGENCY_MARKERS = ("staffing", "recruit", "agency", "talent solutions", "headhunt", "personnel")


def quality_rejection(job: JobListing) -> Optional[str]:
    """Reason the job lacks enough signal to show, or None if it passes."""
    title = (job.title or "").strip()
    company = (job.company or "").strip()
    description = (job.description or "").strip()
    if not title or not company or not description:
        return "missing_field"
    if len(title) < MIN_TITLE_LENGTH or title.lower() in PLACEHOLDER_TITLES:
        return "placeholder_title"
    if len(company) < MIN_COMPANY_LENGTH or company.lower() in PLACEHOLDER_COMPANIES:
        return "placeholder_company"
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return "short_description"
    if FALLBACK_MARKER in description.lower():
        return "fallback_description"
    if not job.requirements and not job.responsibilities:
        return "no_requirements_or_responsibilities"
    return None


def filter_quality_jobs(jobs: Sequence[J]) -> List[J]:
    """Keep jobs passing the quality predicate, in their original order."""
    kept: List[J] = []
    for job in jobs:
        reason = quality_rejection(job)
        if reason:
            logger.debug("Dropping low-quality job '%s' (%s): %s", job.title, reason, job.source_url)
            continue
        kept.append(job)
    return kept


def dedup_signatures(job: JobListing) -> tuple[str, str]:
    title = (job.title or "").strip().lower()
    return (
        f"{title}_{(job.company or '').strip().lower()}",
        f"{title}_{(job.location or '').strip().lower()}",
    )


def deduplicate_jobs(jobs: Sequence[J]) -> List[J]:
    """
    Collapse jobs sharing a (title, company) or (title, location) signature.
    First seen wins; survivors keep their relative order.
    """
    seen: set[str] = set()
    result: List[J] = []
    for job in jobs:
        by_company, by_location = dedup_signatures(job)
        if by_company in seen or by_location in seen:
            logger.debug("Dropping duplicate job '%s' at %s", job.title, job.company)
            continue
        seen.add(by_company)
        seen.add(by_location)
        result.append(job)
    return result


def filter_jobs(jobs: Sequence[J]) -> List[J]:
    """Quality predicate followed by deduplication; stable."""
    quality = filter_quality_jobs(jobs)
    unique = deduplicate_jobs(quality)
    logger.info("Filter: input=%s quality=%s unique=%s", len(jobs), len(quality), len(unique))
    return unique


def apply_exclusions(jobs: Sequence[J], exclusions: Exclusions) -> List[J]:
    """Drop jobs from excluded companies, containing excluded keywords, or posted by agencies."""
    companies = [c.lower() for c in exclusions.companies]
    keywords = [k.lower() for k in exclusions.keywords]
    if not companies and not keywords and not exclusions.agencies:
        return list(jobs)
    kept: List[J] = []
    for job in jobs:
        company = (job.company or "").lower()
        text = f"{job.title} {job.description}".lower()
        if any(c in company for c in companies):
            logger.info("Excluded company: %s", job.company)
            continue
        if any(k in text for k in keywords):
            logger.info("Excluded keyword in job: %s", job.title)
            continue
        if exclusions.agencies and any(marker in company for marker in AGENCY_MARKERS):
            logger.info("Excluded agency: %s", job.company)
            continue
        kept.append(job)
    return kept


def filter_by_freshness(
    jobs: Sequence[J],
    max_age_days: int,
    now: Optional[datetime] = None,
) -> List[J]:
    """Keep jobs whose posted_date is no more than max_age_days old."""
    now = now or datetime.now(timezone.utc)
    kept: List[J] = []
    for job in jobs:
        posted = job.posted_date
        if posted.tzinfo is None:
            posted = posted.replace(tzinfo=timezone.utc)
        if (now - posted).days <= max_age_days:
            kept.append(job)
    return kept

"""Match ranking: heuristic score per job against the search refinements; freshest first."""

import re
from datetime import timezone
from typing import List, Optional, Tuple

from jobgenie.schemas.job_listing import EnhancedJobListing, JobListing
from jobgenie.schemas.refinements import SearchRefinements
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

BASE_SCORE = 70
LOCATION_BONUS = 10
REMOTE_BONUS = 10
SALARY_BONUS = 5
SKILL_BONUS = 2
MAX_SCORE = 95
MAX_REASONS = 3

_SALARY_NUMBER = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(k\b)?", re.IGNORECASE)


def parse_salary_amount(salary: Optional[str]) -> Optional[float]:
    """First number in a salary string ("$120k - $150k" -> 120000.0), or None."""
    if not salary:
        return None
    m = _SALARY_NUMBER.search(salary)
    if not m:
        return None
    try:
        amount = float(m.group(1).replace(",", ""))
    except ValueError:
        return None
    if m.group(2):
        amount *= 1000
    return amount


def _job_text(job: JobListing) -> str:
    return f"{job.title} {job.description}".lower()


def matched_skills(job: JobListing, skills: List[str]) -> List[str]:
    text = _job_text(job)
    return [s for s in skills if s and s.lower() in text]


def missing_skills(job: JobListing, skills: List[str]) -> List[str]:
    """Must-have skills not mentioned in the job's title or description."""
    text = _job_text(job)
    return [s for s in skills if s and s.lower() not in text]


def score_job(job: JobListing, refinements: SearchRefinements) -> Tuple[int, List[str]]:
    """
    Base 70; +10 city match (case-insensitive substring of the job location); +10 remote wanted
    and offered; +5 salary at or above the minimum; +2 per must-have skill found. Capped at 95.
    Reasons follow that order, at most three.
    """
    score = BASE_SCORE
    reasons: List[str] = []

    city = (refinements.location.city or "").strip().lower()
    if city and city in (job.location or "").lower():
        score += LOCATION_BONUS
        reasons.append("Location match")

    if refinements.location.remote and (job.workplace_type or "").lower() == "remote":
        score += REMOTE_BONUS
        reasons.append("Remote opportunity")

    salary_min = refinements.salary.min
    amount = parse_salary_amount(job.salary)
    if salary_min is not None and amount is not None and amount >= salary_min:
        score += SALARY_BONUS
        reasons.append(f"Salary meets your minimum ({job.salary})")

    skills = matched_skills(job, refinements.must_have_skills)
    if skills:
        score += SKILL_BONUS * len(skills)
        reasons.append(f"Matches {len(skills)} key skill{'s' if len(skills) != 1 else ''}")

    return min(score, MAX_SCORE), reasons[:MAX_REASONS]


def _sort_key(job: EnhancedJobListing) -> Tuple[float, int]:
    posted = job.posted_date
    if posted.tzinfo is None:
        posted = posted.replace(tzinfo=timezone.utc)
    return posted.timestamp(), job.match_score


def rank_jobs(jobs: List[JobListing], refinements: SearchRefinements) -> List[EnhancedJobListing]:
    """Score every job and sort by posted_date descending, then match_score descending."""
    enhanced: List[EnhancedJobListing] = []
    for job in jobs:
        score, reasons = score_job(job, refinements)
        enhanced.append(
            EnhancedJobListing(
                **job.model_dump(),
                match_score=score,
                match_reasons=reasons,
                missing_skills=missing_skills(job, refinements.must_have_skills),
            )
        )
    enhanced.sort(key=_sort_key, reverse=True)
    if enhanced:
        logger.info(
            "Ranked %s jobs; top score=%s", len(enhanced), max(j.match_score for j in enhanced)
        )
    return enhanced

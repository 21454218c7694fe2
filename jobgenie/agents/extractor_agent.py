"""Extractor Agent: structure raw scraped jobs into canonical JobListings via the LLM, with a deterministic fallback."""

import asyncio
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import ValidationError

from jobgenie.config import (
    DEFAULT_CURRENCY,
    EXTRACTOR_CONCURRENCY,
    SCRAPED_DESCRIPTION_MAX_CHARS,
    STRUCTURE_DESCRIPTION_MAX_CHARS,
)
from jobgenie.exceptions import CollaboratorError
from jobgenie.schemas.job_listing import MAX_LIST_ITEMS, CompanyInfo, JobListing
from jobgenie.schemas.refinements import SearchRefinements
from jobgenie.schemas.scraped_job import ScrapedJob
from jobgenie.services.llm_service import TextGenerator, generate_with_timeout
from jobgenie.services.text_cleaner import collapse_whitespace
from jobgenie.utils.freshness import FreshnessVerdict, classify_freshness
from jobgenie.utils.helpers import generate_job_id, truncate
from jobgenie.utils.json_repair import parse_llm_json_object
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

FALLBACK_TITLE = "Job Opening"
FALLBACK_COMPANY = "Company"
FALLBACK_DESCRIPTION = "Please visit the job page for full details."
FALLBACK_SALARY = "Competitive"
FALLBACK_EMPLOYMENT_TYPE = "Full-time"
FALLBACK_WORKPLACE_TYPE = "Onsite"

MIN_LIST_LINE_LENGTH = 10
MAX_HEADING_LENGTH = 80
MAX_SHORT_HEADING_LENGTH = 40

REQUIREMENT_HEADINGS = ("requirement", "qualification")
RESPONSIBILITY_HEADINGS = ("responsibilit", "duties")

# Job boards and ATS hosts never name the employer in their domain
JOB_BOARD_DOMAINS = (
    "linkedin", "indeed", "glassdoor", "ziprecruiter", "monster", "wellfound", "angel",
    "greenhouse", "lever", "myworkdayjobs", "workday", "workable", "smartrecruiters",
    "simplyhired", "dice", "google", "careerbuilder", "remoteok", "weworkremotely",
)
_ATS_COMPANY_PATH = re.compile(
    r"(?:boards\.greenhouse\.io|job-boards\.greenhouse\.io|jobs\.lever\.co"
    r"|apply\.workable\.com|jobs\.ashbyhq\.com)/([^/?#]+)",
    re.IGNORECASE,
)
_WORKDAY_HOST = re.compile(r"^([a-z0-9-]+)\.(?:wd\d+\.)?myworkdayjobs\.com$", re.IGNORECASE)
_TITLE_AT_COMPANY = re.compile(r"^(.{3,}?)\s+at\s+(.{2,})$", re.IGNORECASE)
_TITLE_DASH_COMPANY = re.compile(r"^(.{3,}?)\s+[-|–]\s+(.{2,})$")
_BULLET = re.compile(r"^\s*(?:[-•*·▪◦●]|\d+[.)])\s*")

_CAMEL_TO_SNAKE = {
    "employmentType": "employment_type",
    "workplaceType": "workplace_type",
    "companyInfo": "company_info",
    "sourceUrl": "source_url",
}

STRUCTURE_PROMPT = """Normalize this scraped job posting into JSON.

Use ONLY the data supplied below. Do not invent facts; leave a field empty when the data does not contain it.

Title: {title}
Company: {company}
Location: {location}
Salary: {salary}
Employment type: {employment_type}
Source URL: {source_url}
Candidate is looking for: {wanted}

Description:
\"\"\"{description}\"\"\"

Return ONLY a JSON object:
{{
  "title": "job title",
  "company": "hiring company",
  "location": "city, region or Remote",
  "description": "clean summary of the role (2-4 paragraphs)",
  "salary": "salary range as written, or null",
  "currency": "ISO currency code, default {currency}",
  "employment_type": "Full-time|Part-time|Contract|Freelance|Internship",
  "workplace_type": "Remote|Hybrid|Onsite",
  "requirements": ["up to 5 requirements"],
  "responsibilities": ["up to 5 responsibilities"],
  "company_info": {{"about": null, "size": null, "industry": null}}
}}"""


def _posting_freshness(raw: ScrapedJob, max_age_days: int, now: datetime) -> FreshnessVerdict:
    """Posting-age text wins when it says anything; otherwise look inside the description."""
    verdict = classify_freshness(raw.posted_date_text, max_age_days, now)
    if not verdict.accept or verdict.inferred_date is not None:
        return verdict
    return classify_freshness(raw.description, max_age_days, now)


def _clean_company_name(name: str) -> str:
    name = re.sub(r"[-_]+", " ", name).strip()
    return name.title() if name.islower() else name


def split_title_company(title: str) -> Tuple[str, str]:
    """'Backend Engineer at Acme' / 'Backend Engineer - Acme' -> ('Backend Engineer', 'Acme')."""
    title = collapse_whitespace(title)
    for pattern in (_TITLE_AT_COMPANY, _TITLE_DASH_COMPANY):
        m = pattern.match(title)
        if m:
            return m.group(1).strip(), m.group(2).strip()
    return title, ""


def infer_company_from_url(url: str) -> str:
    """Company name from an ATS path or from the employer's own careers domain."""
    if not url:
        return ""
    m = _ATS_COMPANY_PATH.search(url)
    if m:
        return _clean_company_name(m.group(1))
    host = (urlparse(url).hostname or "").lower()
    m = _WORKDAY_HOST.match(host)
    if m:
        return _clean_company_name(m.group(1))
    if not host or any(board in host for board in JOB_BOARD_DOMAINS):
        return ""
    labels = [p for p in host.split(".") if p not in ("www", "careers", "jobs", "apply", "boards")]
    if len(labels) < 2:
        return ""
    return _clean_company_name(labels[-2])


def _section_kind(line: str) -> Optional[str]:
    lowered = line.lower()
    if len(line) > MAX_HEADING_LENGTH:
        return None
    if any(k in lowered for k in REQUIREMENT_HEADINGS):
        return "requirements"
    if any(k in lowered for k in RESPONSIBILITY_HEADINGS):
        return "responsibilities"
    return None


def _looks_like_heading(line: str) -> bool:
    return len(line) <= MAX_HEADING_LENGTH and line.endswith(":") and not _BULLET.match(line)


def _is_section_heading(line: str) -> bool:
    """Short keyword line or 'Qualifications: ...' style line; bullet items never count."""
    if _BULLET.match(line):
        return False
    head, sep, _ = line.partition(":")
    return bool(sep and _section_kind(head)) or len(line) <= MAX_SHORT_HEADING_LENGTH


def extract_sections(description: str) -> Tuple[List[str], List[str]]:
    """
    Scan the description for requirement/responsibility headings and capture up to 5
    following lines of at least 10 chars each, stopping at the next heading.
    """
    sections: dict[str, List[str]] = {"requirements": [], "responsibilities": []}
    current: Optional[str] = None
    for raw_line in (description or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        kind = _section_kind(line)
        if kind and _is_section_heading(line):
            current = kind
            # "Requirements: 5+ years of Python" carries its first item inline
            _, _, rest = line.partition(":")
            rest = rest.strip()
            if len(rest) >= MIN_LIST_LINE_LENGTH and len(sections[kind]) < MAX_LIST_ITEMS:
                sections[kind].append(rest)
            continue
        if current is None:
            continue
        if _looks_like_heading(line):
            current = None
            continue
        item = _BULLET.sub("", line).strip()
        if len(item) >= MIN_LIST_LINE_LENGTH and len(sections[current]) < MAX_LIST_ITEMS:
            sections[current].append(item)
    return sections["requirements"], sections["responsibilities"]


def build_fallback_job(raw: ScrapedJob, source_url: str, posted_date: datetime) -> JobListing:
    """JobListing straight from the scraped fields with fixed defaults. Always succeeds."""
    scraped_company = collapse_whitespace(raw.company)
    title, company_from_title = split_title_company(raw.title)
    if scraped_company and company_from_title.lower() != scraped_company.lower():
        # Only strip the suffix when it names the scraped company
        title = collapse_whitespace(raw.title)
    company = (
        scraped_company
        or company_from_title
        or infer_company_from_url(source_url or raw.url)
        or FALLBACK_COMPANY
    )
    description = truncate((raw.description or "").strip(), SCRAPED_DESCRIPTION_MAX_CHARS) or FALLBACK_DESCRIPTION
    requirements, responsibilities = extract_sections(description)
    return JobListing(
        id=generate_job_id(source_url),
        title=title or FALLBACK_TITLE,
        company=company,
        location=collapse_whitespace(raw.location),
        description=description,
        salary=collapse_whitespace(raw.salary) or FALLBACK_SALARY,
        currency=DEFAULT_CURRENCY,
        employment_type=collapse_whitespace(raw.employment_type) or FALLBACK_EMPLOYMENT_TYPE,
        workplace_type=FALLBACK_WORKPLACE_TYPE,
        requirements=requirements,
        responsibilities=responsibilities,
        posted_date=posted_date,
        source_url=source_url,
    )


def _normalize_workplace(value: Any, location: str) -> str:
    text = f"{value or ''} {location or ''}".lower()
    if "remote" in text:
        return "Remote"
    if "hybrid" in text:
        return "Hybrid"
    return FALLBACK_WORKPLACE_TYPE


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _items(value: Any, fallback: List[str]) -> List[str]:
    """LLM list field when it is a non-empty list or string, else the fallback list."""
    if isinstance(value, (list, tuple, str)) and value:
        return value
    return fallback


def _job_from_llm(
    parsed: dict,
    raw: ScrapedJob,
    source_url: str,
    posted_date: datetime,
) -> Optional[JobListing]:
    """Merge LLM fields over the fallback record so every required field stays populated."""
    data = {_CAMEL_TO_SNAKE.get(k, k): v for k, v in parsed.items()}
    base = build_fallback_job(raw, source_url, posted_date)
    location = _text(data.get("location")) or base.location
    company_info = data.get("company_info")
    try:
        return JobListing(
            id=base.id,
            title=_text(data.get("title")) or base.title,
            company=_text(data.get("company")) or base.company,
            location=location,
            description=_text(data.get("description")) or base.description,
            salary=_text(data.get("salary")) or base.salary,
            currency=_text(data.get("currency")).upper() or DEFAULT_CURRENCY,
            employment_type=_text(data.get("employment_type")) or base.employment_type,
            workplace_type=_normalize_workplace(data.get("workplace_type"), location),
            requirements=_items(data.get("requirements"), base.requirements),
            responsibilities=_items(data.get("responsibilities"), base.responsibilities),
            posted_date=posted_date,
            source_url=source_url,
            company_info=CompanyInfo.model_validate(company_info) if isinstance(company_info, dict) else None,
        )
    except (ValidationError, TypeError, ValueError) as e:
        logger.warning("LLM output validation failed for %s: %s", source_url, e)
        return None


async def structure_job(
    raw: ScrapedJob,
    source_url: str,
    refinements: SearchRefinements,
    generator: TextGenerator,
    posted_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Optional[JobListing]:
    """
    Normalize one scraped job. Returns None for empty input or a posting outside the
    freshness window; otherwise a JobListing from the LLM, or from the deterministic
    fallback when the provider fails or its output cannot be used. Never raises.
    """
    if raw is None or raw.is_empty:
        return None
    source_url = source_url or raw.url

    now = now or datetime.now(timezone.utc)
    verdict = _posting_freshness(raw, refinements.date_range, now)
    if not verdict.accept:
        logger.info("Rejecting stale posting (%s days): %s", verdict.age_days, source_url)
        return None
    posted = verdict.inferred_date or posted_date or now

    prompt = STRUCTURE_PROMPT.format(
        title=raw.title or "(not provided)",
        company=raw.company or "(not provided)",
        location=raw.location or "(not provided)",
        salary=raw.salary or "(not provided)",
        employment_type=raw.employment_type or "(not provided)",
        source_url=source_url,
        wanted=", ".join(refinements.all_titles) or "any role",
        description=truncate(raw.description, STRUCTURE_DESCRIPTION_MAX_CHARS),
        currency=DEFAULT_CURRENCY,
    )
    try:
        response = await generate_with_timeout(generator, prompt)
    except CollaboratorError as e:
        logger.warning("Structuring provider error for %s: %s; using fallback", source_url, e)
        return build_fallback_job(raw, source_url, posted)
    except Exception:
        logger.exception("Structuring failed for %s; using fallback", source_url)
        return build_fallback_job(raw, source_url, posted)

    parsed = parse_llm_json_object(response)
    if parsed is None:
        logger.warning("Unparseable structuring response for %s; using fallback", source_url)
        return build_fallback_job(raw, source_url, posted)
    return _job_from_llm(parsed, raw, source_url, posted) or build_fallback_job(raw, source_url, posted)


async def run_extractor_agent(
    raw_jobs: List[ScrapedJob],
    refinements: SearchRefinements,
    generator: TextGenerator,
    concurrency: int = EXTRACTOR_CONCURRENCY,
    now: Optional[datetime] = None,
) -> List[JobListing]:
    """
    Structure scraped jobs concurrently (bounded); returns the non-None results in input order.
    All jobs share one reference time so equal posting ages get equal dates.
    """
    now = now or datetime.now(timezone.utc)
    sem = asyncio.Semaphore(max(1, concurrency))

    async def _one(raw: ScrapedJob) -> Optional[JobListing]:
        async with sem:
            try:
                return await structure_job(raw, raw.url, refinements, generator, now=now)
            except Exception:
                logger.exception("Unexpected structuring error for %s", raw.url)
                return None

    results = await asyncio.gather(*(_one(r) for r in raw_jobs))
    jobs = [j for j in results if j is not None]
    logger.info("Extractor Agent finished: input=%s structured=%s", len(raw_jobs), len(jobs))
    return jobs

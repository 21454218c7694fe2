"""
Per-site extraction strategies for job pages.

A registry maps host predicates to SiteExtractor strategies; the first match wins and the
generic extractor is the default. Selectors are best-effort and will drift as boards change
their markup.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from jobgenie.config import SCRAPED_DESCRIPTION_MAX_CHARS
from jobgenie.schemas.scraped_job import FetchOutcome, ScrapedJob
from jobgenie.services.text_cleaner import clean_page_text, collapse_whitespace
from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)

MAX_LIST_CARDS = 15
MAX_LINKS_PER_SELECTOR = 10


def _first_text(root: Any, selectors: Iterable[str], min_len: int = 1) -> str:
    """Text of the first element matching any selector (in order) with at least min_len chars."""
    for selector in selectors:
        for el in root.select(selector):
            text = collapse_whitespace(el.get_text(" ", strip=True))
            if len(text) >= min_len:
                return text
    return ""


def _block_text(root: Any, selectors: Iterable[str], min_len: int = 1) -> str:
    """Like _first_text but keeps line breaks, for descriptions."""
    for selector in selectors:
        el = root.select_one(selector)
        if el is None:
            continue
        text = el.get_text("\n", strip=True)
        if len(text) >= min_len:
            return text[:SCRAPED_DESCRIPTION_MAX_CHARS]
    return ""


def _absolute(href: Optional[str], base_url: str) -> str:
    if not href:
        return ""
    return href if href.startswith("http") else urljoin(base_url, href)


class SiteExtractor(ABC):
    """Strategy turning a parsed page into a FetchOutcome."""

    name = "site"
    # Generic pages trust JSON-LD over DOM heuristics; known boards only use it to fill gaps
    prefers_json_ld = False

    @abstractmethod
    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        ...


class LinkedInExtractor(SiteExtractor):
    name = "linkedin"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        if "/jobs/search" in url or "/jobs/collections" in url:
            return self._extract_list(soup, url)
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, [".top-card-layout__title", "h1"]),
            company=_first_text(soup, [".topcard__org-name-link", ".topcard__flavor a"]),
            location=_first_text(soup, [".topcard__flavor--bullet"]),
            employment_type=_first_text(
                soup, [".description__job-criteria-text", ".jobs-unified-top-card__workplace-type"]
            ),
            description=_block_text(soup, [".show-more-less-html__markup", ".description__text"]),
            posted_date_text=_first_text(soup, ["span.posted-time-ago__text", "time"]),
        )
        return FetchOutcome.single(job)

    def _extract_list(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        jobs: List[ScrapedJob] = []
        for card in soup.select(".jobs-search__results-list li")[:MAX_LIST_CARDS]:
            link = card.select_one("a.base-card__full-link") or card.select_one("a")
            job = ScrapedJob(
                url=_absolute(link.get("href") if link else None, "https://www.linkedin.com"),
                title=_first_text(card, ["h3.base-search-card__title", ".job-card-list__title"]),
                company=_first_text(card, ["h4.base-search-card__subtitle", ".job-card-container__company-name"]),
                location=_first_text(card, ["span.job-search-card__location", ".job-card-container__metadata-item"]),
                posted_date_text=_first_text(card, ["time"]),
            )
            if job.title and job.url:
                jobs.append(job)
        return FetchOutcome.listing(jobs)


class IndeedExtractor(SiteExtractor):
    name = "indeed"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        if "-jobs.html" in url or "/jobs?" in url:
            return self._extract_list(soup)
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, [".jobsearch-JobInfoHeader-title", "h1"]),
            company=_first_text(
                soup,
                ["[data-company-name]", ".jobsearch-CompanyInfoWithoutHeaderImage .companyName", ".companyName"],
            ),
            location=_first_text(
                soup, ["[data-testid='inlineHeader-companyLocation']", ".jobsearch-JobInfoHeader-subtitle > div:last-child"]
            ),
            salary=_first_text(soup, ["#salaryInfoAndJobType span", ".jobsearch-JobMetadataHeader-item .attribute_snippet"]),
            employment_type=_first_text(soup, [".jobsearch-JobMetadataHeader-item"]),
            description=_block_text(soup, ["#jobDescriptionText"]),
            posted_date_text=_first_text(soup, [".jobsearch-JobMetadataFooter", "[data-testid='myJobsStateDate']"]),
        )
        return FetchOutcome.single(job)

    def _extract_list(self, soup: BeautifulSoup) -> FetchOutcome:
        jobs: List[ScrapedJob] = []
        cards = soup.select(".jobsearch-ResultsList .result, .jobsearch-SerpJobCard, [data-jk]")
        for card in cards[:MAX_LIST_CARDS]:
            link = card.select_one(".jobTitle a, h2 a")
            href = link.get("href") if link else None
            if not href and card.get("data-jk"):
                href = f"/viewjob?jk={card.get('data-jk')}"
            job = ScrapedJob(
                url=_absolute(href, "https://www.indeed.com"),
                title=_first_text(card, [".jobTitle span[title]", ".jobTitle"]),
                company=_first_text(card, [".companyName", "[data-testid='company-name']"]),
                location=_first_text(card, [".locationsContainer", ".companyLocation"]),
                salary=_first_text(card, [".salary-snippet"]),
                posted_date_text=_first_text(card, [".date"]),
            )
            if job.title and job.company and job.url:
                jobs.append(job)
        return FetchOutcome.listing(jobs)


class GlassdoorExtractor(SiteExtractor):
    name = "glassdoor"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        if "/job/jobs" in url.lower():
            jobs: List[ScrapedJob] = []
            for link in soup.select('[data-test="job-link"]')[:MAX_LIST_CARDS]:
                job = ScrapedJob(
                    url=_absolute(link.get("href"), "https://www.glassdoor.com"),
                    title=_first_text(link, [".job-title"]) or collapse_whitespace(link.get_text(" ", strip=True)),
                    company=_first_text(link, ['[data-test="employer-name"]']),
                    location=_first_text(link, ['[data-test="employer-location"]']),
                )
                if job.title and job.url:
                    jobs.append(job)
            return FetchOutcome.listing(jobs)
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, ['[data-test="job-title"]', "h1"]),
            company=_first_text(soup, ['[data-test="employer-name"]']),
            location=_first_text(soup, ['[data-test="location"]']),
            salary=_first_text(soup, ['[data-test="detailSalary"]', ".salary-estimate"]),
            description=_block_text(soup, [".jobDescriptionContent", ".desc", '[class*="JobDetails_jobDescription"]']),
        )
        return FetchOutcome.single(job)


class WellfoundExtractor(SiteExtractor):
    name = "wellfound"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, ['[class*="styles_title"]', "h1"]),
            company=_first_text(soup, ['[data-test="CompanyName"]', '[class*="styles_name"]']),
            location=_first_text(soup, ['[class*="styles_location"]']),
            salary=_first_text(soup, ['[class*="styles_salary"]']),
            employment_type=_first_text(soup, ['[class*="styles_jobType"]']),
            description=_block_text(soup, ['[class*="styles_description"]', ".job-description"]),
        )
        return FetchOutcome.single(job)


class GreenhouseExtractor(SiteExtractor):
    name = "greenhouse"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, ["#header h1", ".app-title", ".job__title h1", "h1"]),
            company=_first_text(soup, [".company-name", '[data-element="company-name"]']),
            location=_first_text(soup, [".location", ".job__location"]),
            employment_type=_first_text(soup, [".commitment"]),
            description=_block_text(soup, ["#content", ".job__description", ".content"]),
        )
        return FetchOutcome.single(job)


class LeverExtractor(SiteExtractor):
    name = "lever"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, [".posting-headline h2", "h2"]),
            company=_first_text(soup, [".posting-categories .company"]),
            location=_first_text(soup, [".posting-categories .location", ".location", ".workplaceTypes"]),
            employment_type=_first_text(soup, [".posting-categories .commitment", ".commitment"]),
            description=_block_text(soup, [".posting-page .section-wrapper.page-full-width", ".posting-description", ".section-wrapper"]),
        )
        return FetchOutcome.single(job)


class WorkdayExtractor(SiteExtractor):
    name = "workday"

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        job = ScrapedJob(
            url=url,
            title=_first_text(soup, ['[data-automation-id="jobPostingHeader"]', "h1"]),
            company=_first_text(soup, ['[data-automation-id="company"]']),
            location=_first_text(soup, ['[data-automation-id="locations"] dd', '[data-automation-id="locationText"]']),
            salary=_first_text(soup, ['[data-automation-id="salary"]']),
            employment_type=_first_text(soup, ['[data-automation-id="time"] dd', '[data-automation-id="jobType"]']),
            description=_block_text(soup, ['[data-automation-id="jobPostingDescription"]']),
            posted_date_text=_first_text(soup, ['[data-automation-id="postedOn"] dd', '[data-automation-id="postedOn"]']),
        )
        return FetchOutcome.single(job)


class GenericExtractor(SiteExtractor):
    """Heuristic selectors for unknown sites; reports a list when the page is mostly job links."""

    name = "generic"
    prefers_json_ld = True

    LINK_SELECTORS = (
        'a[href*="/jobs/view/"]',
        'a[href*="/viewjob"]',
        ".job-card a",
        "[data-job-id] a",
        ".jobsearch-SerpJobCard a",
    )

    def extract(self, soup: BeautifulSoup, url: str) -> FetchOutcome:
        job = ScrapedJob(
            url=url,
            title=_first_text(
                soup,
                ["h1", ".jobTitle", ".job-title", ".position-title", '[data-testid*="title"]', "h2.title", '[class*="title"]'],
                min_len=4,
            ),
            company=_first_text(
                soup,
                [".company", ".employer", ".companyName", "[data-company]", '[data-testid*="company"]', '[class*="company"]'],
                min_len=2,
            ),
            location=_first_text(
                soup, [".location", "[data-location]", '[data-testid*="location"]', '[class*="location"]'], min_len=3
            ),
            salary=_first_text(
                soup, [".salary", "[data-salary]", ".compensation", ".pay", '[class*="salary"]', '[class*="compensation"]'], min_len=3
            ),
            description=_block_text(
                soup,
                [
                    "#jobDescriptionText",
                    ".job-description",
                    ".description",
                    '[class*="description"]',
                    "article",
                    "main",
                    ".content",
                ],
                min_len=4,
            ),
            employment_type=_first_text(
                soup, [".employment-type", ".job-type", "[data-job-type]", '[class*="employment"]'], min_len=3
            ),
            posted_date_text=_first_text(soup, ['[class*="posted"]', "time"], min_len=3),
        )
        json_ld = extract_json_ld_job(soup, url)
        if json_ld is not None:
            job = merge_scraped(json_ld, job)
        links = self.find_job_links(soup, url)
        if len(links) > 1 and (not job.title or not job.company):
            return FetchOutcome.listing(links)
        return FetchOutcome.single(job)

    def find_job_links(self, soup: BeautifulSoup, base_url: str) -> List[ScrapedJob]:
        seen: set[str] = set()
        jobs: List[ScrapedJob] = []
        for selector in self.LINK_SELECTORS:
            for el in soup.select(selector)[:MAX_LINKS_PER_SELECTOR]:
                full_url = _absolute(el.get("href"), base_url)
                if not full_url or full_url in seen:
                    continue
                seen.add(full_url)
                card = el.find_parent(class_="job-card")
                jobs.append(
                    ScrapedJob(
                        url=full_url,
                        title=collapse_whitespace(el.get_text(" ", strip=True))
                        or (_first_text(card, [".title"]) if card else ""),
                        company=_first_text(card, [".company"]) if card else "",
                        location=_first_text(card, [".location"]) if card else "",
                    )
                )
        return jobs


# ---- JSON-LD (schema.org JobPosting) ----


def _iter_json_ld_nodes(data: Any) -> Iterable[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _iter_json_ld_nodes(item)
    elif isinstance(data, dict):
        yield data
        if isinstance(data.get("@graph"), list):
            yield from _iter_json_ld_nodes(data["@graph"])


def _is_job_posting(node: dict) -> bool:
    kind = node.get("@type")
    if isinstance(kind, list):
        return "JobPosting" in kind
    return kind == "JobPosting"


def _json_ld_location(node: dict) -> str:
    locations = node.get("jobLocation")
    if isinstance(locations, dict):
        locations = [locations]
    parts: List[str] = []
    for loc in locations or []:
        address = loc.get("address") if isinstance(loc, dict) else None
        if isinstance(address, dict):
            text = ", ".join(
                str(address[k]) for k in ("addressLocality", "addressRegion", "addressCountry")
                if isinstance(address.get(k), str) and address.get(k)
            )
            if text:
                parts.append(text)
    if not parts and str(node.get("jobLocationType", "")).upper() == "TELECOMMUTE":
        return "Remote"
    return "; ".join(parts)


def _json_ld_salary(node: dict) -> str:
    salary = node.get("baseSalary")
    if not isinstance(salary, dict):
        return str(salary) if isinstance(salary, (int, float, str)) and salary else ""
    currency = salary.get("currency") or ""
    value = salary.get("value")
    if isinstance(value, dict):
        low, high, single = value.get("minValue"), value.get("maxValue"), value.get("value")
        unit = value.get("unitText") or ""
        if low and high:
            text = f"{low} - {high}"
        else:
            text = str(single or low or high or "")
        return " ".join(p for p in (currency, text, f"per {unit.lower()}" if unit and text else "") if p)
    if value:
        return " ".join(p for p in (currency, str(value)) if p)
    return ""


def extract_json_ld_job(soup: BeautifulSoup, url: str) -> Optional[ScrapedJob]:
    """First schema.org JobPosting found in the page's JSON-LD blocks, if any."""
    for script in soup.select('script[type="application/ld+json"]'):
        raw = script.string or script.get_text() or ""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.debug("Ignoring unparseable JSON-LD block on %s", url)
            continue
        for node in _iter_json_ld_nodes(data):
            if not _is_job_posting(node):
                continue
            org = node.get("hiringOrganization")
            employment = node.get("employmentType")
            if isinstance(employment, list):
                employment = ", ".join(str(e) for e in employment)
            date_posted = str(node.get("datePosted") or "")
            return ScrapedJob(
                url=url,
                title=collapse_whitespace(str(node.get("title") or "")),
                company=collapse_whitespace(str(org.get("name") or "")) if isinstance(org, dict) else "",
                location=_json_ld_location(node),
                description=clean_page_text(str(node.get("description") or ""), SCRAPED_DESCRIPTION_MAX_CHARS),
                salary=_json_ld_salary(node),
                employment_type=str(employment or ""),
                posted_date_text=f"Posted on {date_posted[:10]}" if date_posted else "",
            )
    return None


def merge_scraped(primary: ScrapedJob, secondary: ScrapedJob) -> ScrapedJob:
    """Field-wise merge: non-empty primary values win, gaps come from secondary."""
    merged = {
        field: getattr(primary, field) or getattr(secondary, field)
        for field in ScrapedJob.model_fields
    }
    return ScrapedJob(**merged)


# ---- Registry ----

HostPredicate = Callable[[str], bool]


def host_matcher(*domains: str) -> HostPredicate:
    """Predicate matching a host equal to, or a subdomain of, any of the domains."""

    def _match(host: str) -> bool:
        return any(host == d or host.endswith("." + d) for d in domains)

    return _match


GENERIC_EXTRACTOR = GenericExtractor()

SITE_EXTRACTORS: List[Tuple[HostPredicate, SiteExtractor]] = [
    (host_matcher("indeed.com"), IndeedExtractor()),
    (host_matcher("linkedin.com"), LinkedInExtractor()),
    (host_matcher("glassdoor.com"), GlassdoorExtractor()),
    (host_matcher("angel.co", "wellfound.com"), WellfoundExtractor()),
    (host_matcher("greenhouse.io"), GreenhouseExtractor()),
    (host_matcher("lever.co"), LeverExtractor()),
    (host_matcher("myworkdayjobs.com", "workday.com"), WorkdayExtractor()),
]


def get_extractor(url: str) -> SiteExtractor:
    """Select the strategy for a URL once; the generic extractor is the default."""
    host = (urlparse(url).hostname or "").lower()
    for predicate, extractor in SITE_EXTRACTORS:
        if predicate(host):
            return extractor
    return GENERIC_EXTRACTOR


def extract_job_data(html_text: str, url: str) -> FetchOutcome:
    """Parse a fetched page into a single posting or a list of posting links."""
    soup = BeautifulSoup(html_text, "html.parser")
    extractor = get_extractor(url)
    outcome = extractor.extract(soup, url)
    if outcome.kind == "single" and outcome.job is not None and not extractor.prefers_json_ld:
        json_ld = extract_json_ld_job(soup, url)
        if json_ld is not None:
            outcome = FetchOutcome.single(merge_scraped(outcome.job, json_ld))
    logger.debug(
        "Extracted %s page via %s extractor: %s",
        outcome.kind,
        extractor.name,
        url,
    )
    return outcome

"""Configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env: try package dir then project root
_base = Path(__file__).resolve().parent
for _env_path in (_base / ".env", _base.parent / ".env"):
    if load_dotenv(_env_path):
        break
load_dotenv()  # also allow process env

# API keys – never hardcode
SERPAPI_KEY: str = os.getenv("SERPAPI_KEY", "")
SERPER_API_KEY: str = os.getenv("SERPER_API_KEY", "")
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
MODEL_NAME: str = os.getenv("MODEL_NAME", "gpt-4o-mini")

# "serpapi" or "serper"
SEARCH_PROVIDER: str = os.getenv("SEARCH_PROVIDER", "serpapi").strip().lower()
SEARCH_COUNTRY: str = os.getenv("SEARCH_COUNTRY", "us")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# HTTP / fetch settings
HTTP_MAX_RETRIES: int = 3
SEARCH_TIMEOUT_SECONDS: float = 15.0
LLM_TIMEOUT_SECONDS: float = 45.0
PAGE_FETCH_TIMEOUT_SECONDS: float = 20.0
PROXY_RELAY_URL: str = "https://api.allorigins.win/raw"

# Search limits
SEARCH_RESULTS_PER_QUERY: int = 10
MAX_SEARCH_URLS: int = 25  # Global cap on unique result URLs per run

# Page resolution limits
MAX_LIST_CHILDREN: int = 3  # Child postings followed per list page
MAX_RESOLVE_DEPTH: int = 2  # Search result page = depth 1, list children = depth 2
MAX_JOBS_ACCUMULATED: int = 25
MAX_JOBS_RETURNED: int = 20

# Concurrency
PAGE_FETCH_CONCURRENCY: int = 4
EXTRACTOR_CONCURRENCY: int = 5  # Max concurrent LLM structuring calls

# Text caps for LLM prompts and scraped content
INTENT_INPUT_MAX_CHARS: int = 2000
STRUCTURE_DESCRIPTION_MAX_CHARS: int = 3000
SCRAPED_DESCRIPTION_MAX_CHARS: int = 5000

# Defaults
DEFAULT_DATE_RANGE_DAYS: int = 3
DEFAULT_CURRENCY: str = "USD"

# Centralized site-scoped query variants (extensible: add a new entry per job board)
# All site-scoped query logic is generated from this dict; do not hardcode elsewhere.
SITE_QUERY_VARIANTS: dict = {
    "linkedin": {
        "label": "LinkedIn Jobs",
        "suffix": '"posted today" OR "posted yesterday" site:linkedin.com/jobs/view',
    },
    "indeed": {
        "label": "Indeed",
        "suffix": '"urgently hiring" site:indeed.com/viewjob',
    },
    "glassdoor": {
        "label": "Glassdoor",
        "suffix": '"new" "hiring" site:glassdoor.com',
    },
}

# Phrases appended to general queries to bias the engine toward recent postings
FRESHNESS_QUERY_TAIL: list = [
    "hiring now",
    "actively hiring",
    '"posted today" OR "posted yesterday" OR "posted 2 days ago"',
]

# URL fragments marking search/browse/auth pages rather than postings
NON_JOB_URL_MARKERS: tuple = (
    "/search?",
    "?q=",
    "&q=",
    "job-search",
    "browse-jobs",
    "/login",
    "/auth",
    "/feed",
    "/signup",
)

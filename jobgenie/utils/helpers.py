"""Helper utilities for JobGenie."""

import re
import secrets
import time
from urllib.parse import urlparse

from jobgenie.config import NON_JOB_URL_MARKERS


def normalize_url(url: str) -> str:
    """Normalize URL for deduplication (strip trailing slashes, fragments)."""
    if not url:
        return ""
    url = url.strip().rstrip("/")
    if "#" in url:
        url = url.split("#")[0]
    return url


def is_probable_job_url(url: str) -> bool:
    """False for search/browse/login pages that are not individual postings."""
    if not url or not url.lower().startswith(("http://", "https://")):
        return False
    url_lower = url.lower()
    return not any(marker in url_lower for marker in NON_JOB_URL_MARKERS)


def generate_job_id(url: str) -> str:
    """
    Unique id from the URL's last path segment, a random part and a timestamp.
    Two jobs from the same URL in the same run still get different ids.
    """
    path = urlparse(url or "").path.rstrip("/")
    tail = re.sub(r"[^a-zA-Z0-9]", "", path.split("/")[-1] if path else "")[:40] or "job"
    return f"job_{tail}_{secrets.token_hex(4)}_{time.time_ns()}"


def truncate(text: str, max_chars: int) -> str:
    """Cut text to max_chars without splitting the last word when possible."""
    text = text or ""
    if len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    space = cut.rfind(" ")
    return cut[:space] if space > max_chars * 0.8 else cut

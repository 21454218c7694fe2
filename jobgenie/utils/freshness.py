"""Classify posting freshness from natural-language date phrases ("posted today", "3 days ago")."""

import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional


class FreshnessVerdict(NamedTuple):
    """accept: include the posting; inferred_date: None means the caller supplies "now"."""

    accept: bool
    inferred_date: Optional[datetime]
    age_days: Optional[int]


_COUNT = r"(\d+|an?|one)"

_TODAY = re.compile(
    r"\b(?:posted|listed|published|added|reposted|active)\s+today\b|^\s*today\s*$|\bjust\s+(?:now|posted)\b",
    re.IGNORECASE,
)
_HOURS = re.compile(rf"\b{_COUNT}\+?\s*(?:h|hrs?|hours?)\s+ago\b", re.IGNORECASE)
_MINUTES = re.compile(rf"\b{_COUNT}\+?\s*(?:m|mins?|minutes?)\s+ago\b", re.IGNORECASE)
_YESTERDAY = re.compile(r"\byesterday\b", re.IGNORECASE)
_DAYS = re.compile(rf"\b{_COUNT}\+?\s*(?:d|days?)\s+ago\b", re.IGNORECASE)
_WEEKS = re.compile(rf"\b{_COUNT}\+?\s*(?:w|wks?|weeks?)\s+ago\b", re.IGNORECASE)
_MONTHS_OR_YEARS = re.compile(rf"\b{_COUNT}\+?\s*(?:months?|mos?|years?|yrs?)\s+ago\b", re.IGNORECASE)

_MONTHS_ABBR = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
_MONTHS_FULL = r"(?:january|february|march|april|may|june|july|august|september|october|november|december)"
_MONTH = rf"({_MONTHS_FULL}|{_MONTHS_ABBR})"
# Absolute dates only count when labelled as a posting date
_POSTED_PREFIX = r"(?:posted|published|date\s+posted)\s*(?:on|:)?\s*"
_POSTED_DAY_MONTH_YEAR = re.compile(rf"{_POSTED_PREFIX}(\d{{1,2}})\s+{_MONTH}\.?\s*,?\s*(\d{{4}})", re.IGNORECASE)
_POSTED_MONTH_DAY_YEAR = re.compile(rf"{_POSTED_PREFIX}{_MONTH}\.?\s+(\d{{1,2}})\s*,?\s*(\d{{4}})", re.IGNORECASE)
_POSTED_ISO = re.compile(rf"{_POSTED_PREFIX}(\d{{4}})-(\d{{2}})-(\d{{2}})", re.IGNORECASE)


def _count(token: str) -> int:
    token = token.lower()
    if token in ("a", "an", "one"):
        return 1
    return int(token)


def _month_num(mon_str: str) -> int:
    months = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]
    return months.index(mon_str.lower()[:3]) + 1


def _absolute_posted_date(text: str) -> Optional[datetime]:
    m = _POSTED_DAY_MONTH_YEAR.search(text)
    if m:
        day, mon, year = int(m.group(1)), _month_num(m.group(2)), int(m.group(3))
    else:
        m = _POSTED_MONTH_DAY_YEAR.search(text)
        if m:
            mon, day, year = _month_num(m.group(1)), int(m.group(2)), int(m.group(3))
        else:
            m = _POSTED_ISO.search(text)
            if not m:
                return None
            year, mon, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    try:
        return datetime(year, mon, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def classify_freshness(
    text: str,
    max_age_days: int,
    now: Optional[datetime] = None,
) -> FreshnessVerdict:
    """
    Decide whether text describing a posting's age falls inside the freshness window.

    Rules in priority order: today / hours / minutes ago -> accept; yesterday -> accept (1 day);
    N days ago -> accept iff N <= max_age_days; N weeks ago -> reject; months/years ago -> reject;
    a labelled absolute posting date -> accept iff within the window. Without any recognizable
    phrase the posting is accepted with inferred_date None.
    """
    now = now or datetime.now(timezone.utc)
    if not text or not text.strip():
        return FreshnessVerdict(True, None, None)

    if _TODAY.search(text):
        return FreshnessVerdict(True, now, 0)

    m = _HOURS.search(text)
    if m:
        hours = _count(m.group(1))
        posted = now - timedelta(hours=hours)
        return FreshnessVerdict(True, posted, (now - posted).days)

    if _MINUTES.search(text):
        return FreshnessVerdict(True, now, 0)

    if _YESTERDAY.search(text):
        return FreshnessVerdict(True, now - timedelta(days=1), 1)

    m = _DAYS.search(text)
    if m:
        days = _count(m.group(1))
        if days > max_age_days:
            return FreshnessVerdict(False, None, days)
        return FreshnessVerdict(True, now - timedelta(days=days), days)

    m = _WEEKS.search(text)
    if m:
        weeks = _count(m.group(1))
        if weeks < 1:
            return FreshnessVerdict(True, now, 0)
        return FreshnessVerdict(False, None, weeks * 7)

    if _MONTHS_OR_YEARS.search(text):
        return FreshnessVerdict(False, None, None)

    posted = _absolute_posted_date(text)
    if posted is not None and posted <= now:
        age = (now - posted).days
        if age > max_age_days:
            return FreshnessVerdict(False, None, age)
        return FreshnessVerdict(True, posted, age)

    return FreshnessVerdict(True, None, None)

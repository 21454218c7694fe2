"""Utility exports."""

from .freshness import FreshnessVerdict, classify_freshness
from .helpers import (
    generate_job_id,
    is_probable_job_url,
    normalize_url,
    truncate,
)
from .json_repair import JsonParseFailure, ParsedJson, parse_llm_json, parse_llm_json_object
from .logger import get_logger

__all__ = [
    "get_logger",
    "FreshnessVerdict",
    "classify_freshness",
    "generate_job_id",
    "is_probable_job_url",
    "normalize_url",
    "truncate",
    "JsonParseFailure",
    "ParsedJson",
    "parse_llm_json",
    "parse_llm_json_object",
]

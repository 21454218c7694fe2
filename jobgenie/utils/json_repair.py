"""Parse JSON out of free-form LLM responses, repairing common syntax slips."""

import json
import re
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

_CODE_FENCE = re.compile(r"```(?:json|javascript|js)?\s*", re.IGNORECASE)
_OBJECT_SPAN = re.compile(r"\{.*\}", re.DOTALL)
_ARRAY_SPAN = re.compile(r"\[.*\]", re.DOTALL)
_UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_UNDEFINED = re.compile(r"(:\s*|\[\s*|,\s*)(?:undefined|None)\b")


@dataclass(frozen=True)
class ParsedJson:
    """Successful parse; value is a dict or a list."""

    value: Any


@dataclass(frozen=True)
class JsonParseFailure:
    """Terminal parse failure; callers take their deterministic fallback branch."""

    reason: str


JsonParseResult = Union[ParsedJson, JsonParseFailure]


# A single quote opens a string only after one of these, and closes only before one of _VALUE_END
_VALUE_START = "{[,:"
_VALUE_END = ",}]:"


def _next_significant(text: str, start: int) -> str:
    for ch in text[start:]:
        if not ch.isspace():
            return ch
    return ""


def _string_end(text: str, start: int, quote: str) -> int:
    """Index just past the string opening at start; len(text) when it never closes."""
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote and (quote == '"' or _next_significant(text, i + 1) in _VALUE_END):
            return i + 1
        i += 1
    return len(text)


def _tokenize(span: str) -> List[Tuple[bool, str]]:
    """
    Split span into (is_string, text) runs. Single-quoted strings are re-encoded as
    double-quoted JSON strings; apostrophes inside them survive.
    """
    runs: List[Tuple[bool, str]] = []
    plain: List[str] = []
    last = ""
    i = 0
    while i < len(span):
        ch = span[i]
        if ch == '"' or (ch == "'" and last in _VALUE_START):
            end = _string_end(span, i, ch)
            if plain:
                runs.append((False, "".join(plain)))
                plain = []
            token = span[i:end]
            if ch == "'":
                inner = token[1:-1] if len(token) > 1 and token.endswith("'") else token[1:]
                token = json.dumps(inner.replace("\\'", "'"))
            runs.append((True, token))
            last = ch
            i = end
            continue
        plain.append(ch)
        if not ch.isspace():
            last = ch
        i += 1
    if plain:
        runs.append((False, "".join(plain)))
    return runs


def _repair(span: str) -> str:
    """Apply syntax repairs to the text between strings; string contents are left untouched."""
    parts: List[str] = []
    for is_string, text in _tokenize(span):
        if not is_string:
            text = _UNQUOTED_KEY.sub(r'\1"\2":', text)
            text = _TRAILING_COMMA.sub(r"\1", text)
            text = _UNDEFINED.sub(r"\1null", text)
        parts.append(text)
    return "".join(parts)


def _locate_span(text: str) -> str:
    """First {...} span (greedy), else first [...] span."""
    m = _OBJECT_SPAN.search(text)
    if m:
        return m.group(0)
    m = _ARRAY_SPAN.search(text)
    return m.group(0) if m else ""


def parse_llm_json(text: str) -> JsonParseResult:
    """
    Extract and decode a JSON object or array from LLM output.
    Strips code fences, collapses whitespace, locates the JSON span, then decodes it as-is
    or after light repairs (unquoted keys, single-quoted strings, trailing commas,
    undefined/None literals) applied outside string values. Never raises.
    """
    if not text or not text.strip():
        return JsonParseFailure("empty response")
    cleaned = _CODE_FENCE.sub("", text)
    cleaned = cleaned.replace("\r", "")
    cleaned = re.sub(r"[\n\t]", " ", cleaned).strip()

    span = _locate_span(cleaned)
    if not span:
        return JsonParseFailure("no JSON object or array found")

    for candidate in (span, _repair(span)):
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError):
            continue
        if isinstance(value, (dict, list)):
            return ParsedJson(value)
    return JsonParseFailure("JSON could not be decoded after repair")


def parse_llm_json_object(text: str) -> Union[dict, None]:
    """Convenience wrapper: the decoded object, or None for failures and non-object JSON."""
    result = parse_llm_json(text)
    if isinstance(result, ParsedJson) and isinstance(result.value, dict):
        return result.value
    return None

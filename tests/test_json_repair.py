"""Tests for LLM JSON parsing with repair."""

from __future__ import annotations

from jobgenie.utils.json_repair import JsonParseFailure, ParsedJson, parse_llm_json, parse_llm_json_object


def test_fenced_json_with_trailing_commas():
    text = """Here you go:
```json
{
  "title": "Backend Engineer",
  "company": "Acme Co",
  "requirements": ["Python", "SQL",],
  "salary": null,
}
```"""
    result = parse_llm_json(text)
    assert isinstance(result, ParsedJson)
    assert result.value == {
        "title": "Backend Engineer",
        "company": "Acme Co",
        "requirements": ["Python", "SQL"],
        "salary": None,
    }


def test_unquoted_keys_and_single_quotes():
    result = parse_llm_json("{title: 'Data Engineer', remote: true}")
    assert isinstance(result, ParsedJson)
    assert result.value == {"title": "Data Engineer", "remote": True}


def test_undefined_and_none_become_null():
    assert parse_llm_json_object('{"a": undefined, "b": None}') == {"a": None, "b": None}


def test_array_span():
    result = parse_llm_json('The skills are ["Python", "Go"] as requested')
    assert isinstance(result, ParsedJson)
    assert result.value == ["Python", "Go"]


def test_prose_only_is_failure():
    result = parse_llm_json("Sorry, I cannot help with that.")
    assert isinstance(result, JsonParseFailure)


def test_empty_is_failure():
    assert isinstance(parse_llm_json(""), JsonParseFailure)


def test_broken_json_is_failure_not_exception():
    assert isinstance(parse_llm_json('{"title": "x", "company": }'), JsonParseFailure)


def test_object_helper_rejects_arrays():
    assert parse_llm_json_object("[1, 2, 3]") is None


def test_repairs_leave_string_values_alone():
    text = '```json\n{"title": "Engineer", "description": "Python, Django: required",}\n```'
    assert parse_llm_json_object(text) == {"title": "Engineer", "description": "Python, Django: required"}


def test_none_inside_a_string_is_kept():
    text = '{"eligibility": "Visa: None required", "relocation": None,}'
    assert parse_llm_json_object(text) == {"eligibility": "Visa: None required", "relocation": None}


def test_single_quoted_value_with_apostrophe():
    text = "{title: 'Engineer', note: 'Don't apply twice', tags: ['a, b: c',]}"
    assert parse_llm_json_object(text) == {
        "title": "Engineer",
        "note": "Don't apply twice",
        "tags": ["a, b: c"],
    }

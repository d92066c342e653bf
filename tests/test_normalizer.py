"""Tests for parsing model output into an analysis record."""

import pytest

from qa_assistant.analysis.normalizer import (
    FALLBACK_SUMMARY_LENGTH,
    extract_json_text,
    fallback_analysis,
    normalize,
    parse_analysis,
)
from qa_assistant.llm.errors import ResponseParseError

DESCRIPTION = "Login button does nothing after the third failed attempt " * 4


def test_bare_json_is_parsed(valid_analysis_json):
    analysis = normalize(valid_analysis_json, DESCRIPTION)
    assert analysis.summary == "Login button unresponsive"
    assert analysis.affected_module == "Auth"
    assert analysis.priority == "High"
    assert analysis.severity == "Critical"


@pytest.mark.parametrize(
    "wrapper",
    [
        "```json\n{body}\n```",
        "```\n{body}\n```",
        "```JSON\n{body}\n```",
        "Here is the analysis:\n```json\n{body}\n```\nLet me know if you need more.",
    ],
)
def test_fenced_and_bare_json_give_same_record(valid_analysis_json, wrapper):
    fenced = wrapper.replace("{body}", valid_analysis_json)
    assert normalize(fenced, DESCRIPTION) == normalize(valid_analysis_json, DESCRIPTION)


def test_fence_inside_string_value_does_not_end_block():
    body = (
        '{"summary": "Login broken", '
        '"testCases": "```js\\nit(\'logs in\', () => {})\\n```", '
        '"priority": "High"}'
    )
    fenced = normalize(f"```json\n{body}\n```", "seed")
    assert fenced == normalize(body, "seed")
    assert fenced.summary == "Login broken"
    assert fenced.test_cases == "```js\nit('logs in', () => {})\n```"


def test_extract_json_text_without_fence_returns_input():
    assert extract_json_text('{"a": 1}') == '{"a": 1}'


def test_fallback_for_plain_prose():
    analysis = normalize("Sorry, I cannot help with that.", DESCRIPTION)
    assert analysis == fallback_analysis(DESCRIPTION)
    assert analysis.summary == DESCRIPTION[:FALLBACK_SUMMARY_LENGTH]
    assert analysis.reproduction_steps == "Reproduction steps could not be auto-generated"
    assert analysis.root_cause == "Analysis pending manual review"
    assert analysis.affected_module == "Unknown"
    assert analysis.suggested_fix == "Manual analysis required"
    assert analysis.test_cases == "Test cases require manual creation"
    assert analysis.priority == "Medium"
    assert analysis.severity == "Major"


def test_fallback_is_deterministic():
    assert normalize("not json", "short bug") == normalize("still not json", "short bug")
    assert normalize("not json", "short bug").summary == "short bug"


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "   ",
        "[1, 2, 3]",
        '"just a string"',
        "```json\n{broken\n```",
        "[" * 100000 + "]" * 100000,
        '{"a":' * 100000 + "1" + "}" * 100000,
    ],
)
def test_unusable_output_never_raises(raw):
    analysis = normalize(raw, "Cart badge stale")
    assert analysis.summary == "Cart badge stale"
    assert analysis.affected_module == "Unknown"


def test_parse_analysis_raises_on_non_object():
    with pytest.raises(ResponseParseError):
        parse_analysis("[]")


def test_non_text_values_are_coerced():
    raw = '{"summary": "x", "reproductionSteps": ["Open app", "Tap login"], "priority": null, "testCases": 3}'
    analysis = normalize(raw, "seed")
    assert analysis.reproduction_steps == "Open app\nTap login"
    assert analysis.priority == ""
    assert analysis.test_cases == "3"


def test_missing_and_extra_keys_are_kept_as_is():
    analysis = normalize('{"summary": "Only summary", "confidence": 0.7}', "seed")
    assert analysis.summary == "Only summary"
    assert analysis.root_cause == ""
    assert analysis.to_dict()["confidence"] == 0.7


def test_unexpected_priority_is_not_rewritten():
    analysis = normalize('{"summary": "s", "priority": "P0", "severity": "Huge"}', "seed")
    assert analysis.priority == "P0"
    assert analysis.severity == "Huge"

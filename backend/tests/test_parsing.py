import json

import pytest

from app.services.ai.errors import InvalidShape, UnparsableResponse
from app.services.ai.parsing import (
    extract_json_candidate,
    parse_json_response,
    strip_code_fence,
)


def test_strip_code_fence_removes_json_fence():
    text = '```json\n{"diagnosis": "Asthma"}\n```'

    assert strip_code_fence(text) == '{"diagnosis": "Asthma"}'


def test_strip_code_fence_leaves_plain_text():
    assert strip_code_fence("  plain reply  ") == "plain reply"


def test_parse_fenced_object():
    parsed = parse_json_response('```json\n{"diagnosis": "Asthma"}\n```', "case generation")

    assert parsed == {"diagnosis": "Asthma"}


def test_parse_object_surrounded_by_prose():
    text = 'Here is the case you asked for:\n{"diagnosis": "Gout", "primaryInfo": "x"}\nGood luck!'

    assert parse_json_response(text, "case generation") == {
        "diagnosis": "Gout",
        "primaryInfo": "x",
    }


def test_parse_array_shape():
    text = 'Findings:\n[{"finding": "Fever"}, {"finding": "Tachycardia"}]'

    parsed = parse_json_response(text, "key findings", shape="array")

    assert [item["finding"] for item in parsed] == ["Fever", "Tachycardia"]


def test_any_shape_prefers_earliest_bracket():
    assert extract_json_candidate('x [1, {"a": 2}] y', "any") == '[1, {"a": 2}]'
    assert extract_json_candidate('x {"a": [1]} y', "any") == '{"a": [1]}'


def test_raw_newlines_inside_strings_are_recovered():
    text = '{"primaryInfo": "line one\nline two"}'

    parsed = parse_json_response(text, "case generation")

    assert parsed == {"primaryInfo": "line one line two"}


def test_malformed_json_raises_unparsable():
    with pytest.raises(UnparsableResponse) as excinfo:
        parse_json_response('{"diagnosis": "Asthma",,}', "case generation")

    error = excinfo.value
    assert error.context == "case generation"
    assert error.message == "The AI returned malformed JSON for case generation. Please try again."
    assert error.raw_text == '{"diagnosis": "Asthma",,}'


def test_scalar_json_is_invalid_shape():
    with pytest.raises(InvalidShape):
        parse_json_response("42", "patient profile")


def test_array_where_object_expected_is_invalid_shape():
    with pytest.raises(InvalidShape) as excinfo:
        parse_json_response("[1, 2]", "feedback")

    assert "invalid format for feedback" in excinfo.value.message


def test_empty_text_is_unparsable():
    with pytest.raises(UnparsableResponse):
        parse_json_response("", "feedback")


def test_closing_brace_before_opening_brace_is_unparsable():
    with pytest.raises(UnparsableResponse) as excinfo:
        parse_json_response('Oops } this came first { "diagnosis"', "case generation")

    assert excinfo.value.attempted == 'Oops } this came first { "diagnosis"'


def test_prose_without_brackets_is_unparsable():
    with pytest.raises(UnparsableResponse):
        parse_json_response("I'm sorry, I can't produce that case right now.", "case generation")


@pytest.mark.parametrize(
    "prefix, suffix",
    [
        ("", ""),
        ("Sure! Here it is:\n", ""),
        ("", "\nLet me know if you need changes."),
        ("Output follows.  ", "  -- end of output"),
    ],
)
@pytest.mark.parametrize(
    "payload, shape",
    [
        ({"diagnosis": "Gout", "openingLine": "My toe is killing me."}, "object"),
        ({"results": [{"name": "Urate", "value": 0.52}]}, "object"),
        ([{"finding": "Tophi"}, {"finding": "Warm joint"}], "array"),
    ],
)
def test_json_is_recovered_from_surrounding_text(prefix, suffix, payload, shape):
    text = prefix + json.dumps(payload) + suffix

    assert parse_json_response(text, "feedback", shape=shape) == payload


@pytest.mark.parametrize(
    "text",
    [
        '```json\n{"diagnosis": "Asthma"}\n```',
        'Here you go: {"diagnosis": "Gout", "tags": ["a", "b"]} thanks',
        '{"primaryInfo": "line one\nline two"}',
    ],
)
def test_parsing_is_idempotent(text):
    candidate = extract_json_candidate(text)
    parsed = parse_json_response(text, "case generation")

    assert extract_json_candidate(candidate) == candidate
    assert parse_json_response(json.dumps(parsed), "case generation") == parsed

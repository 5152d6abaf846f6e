"""
Unit tests for parse_model_response().
"""

import pytest

from ragdesk.agent.parser import parse_model_response


def test_answer_with_handover_true() -> None:
    result = parse_model_response('{"answer":"X","handoverToHumanNeeded":true}')
    assert result.is_success
    assert result.value.answer == "X"
    assert result.value.handover_to_human_needed is True


def test_missing_flag_defaults_to_false() -> None:
    result = parse_model_response('{"answer":"X"}')
    assert result.is_success
    assert result.value == ("X", False)


@pytest.mark.parametrize("flag", ['"true"', "1", "null", "false", '{"x": 1}'])
def test_only_literal_true_sets_the_flag(flag: str) -> None:
    result = parse_model_response('{"answer": "X", "handoverToHumanNeeded": %s}' % flag)
    assert result.is_success
    assert result.value.handover_to_human_needed is False


def test_extra_fields_are_ignored() -> None:
    result = parse_model_response('{"answer": "X", "confidence": 0.3, "sources": []}')
    assert result.is_success
    assert result.value.answer == "X"


@pytest.mark.parametrize(
    "content, message",
    [
        (None, "Model response is empty"),
        ("", "Model response is empty"),
        ("   \n", "Model response is empty"),
        ("Tesla is a car company.", "Failed to parse model response as JSON"),
        ('["answer", "X"]', "Model response is not a JSON object"),
        ('"X"', "Model response is not a JSON object"),
        ('{"handoverToHumanNeeded": true}', "JSON response missing 'answer' property or it is not a string"),
        ('{"answer": 42}', "JSON response missing 'answer' property or it is not a string"),
    ],
)
def test_failures(content, message) -> None:
    result = parse_model_response(content)
    assert not result.is_success
    assert result.error_message == message


def test_deeply_nested_json_is_a_failure() -> None:
    result = parse_model_response("[" * 100000)
    assert not result.is_success
    assert result.error_message.startswith("Unexpected error parsing model response:")

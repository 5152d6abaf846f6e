"""
Parse the final-answer model output into (answer, handover flag).

Expected shape: {"answer": "...", "handoverToHumanNeeded": true|false}.
Unknown fields are ignored; only a literal JSON true sets the flag.
"""

import json
from typing import NamedTuple

from ragdesk.core.result import Result


class ParsedAnswer(NamedTuple):
    answer: str
    handover_to_human_needed: bool


def parse_model_response(content: str | None) -> Result[ParsedAnswer]:
    if content is None or not content.strip():
        return Result.failure("Model response is empty")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        return Result.failure("Failed to parse model response as JSON")
    except (RecursionError, ValueError) as e:
        return Result.failure(f"Unexpected error parsing model response: {e}")
    if not isinstance(payload, dict):
        return Result.failure("Model response is not a JSON object")
    answer = payload.get("answer")
    if not isinstance(answer, str):
        return Result.failure("JSON response missing 'answer' property or it is not a string")
    handover = payload.get("handoverToHumanNeeded") is True
    return Result.success(ParsedAnswer(answer=answer, handover_to_human_needed=handover))

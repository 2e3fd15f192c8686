"""Recover JSON payloads from free-form model output."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Literal

from app.services.ai.errors import InvalidShape, UnparsableResponse

logger = logging.getLogger("clerksmart.ai.parsing")

Shape = Literal["object", "array", "any"]

_FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")

_BRACKETS = {"object": ("{", "}"), "array": ("[", "]")}


def strip_code_fence(text: str) -> str:
    """Return the content of a fenced code block, or the text unchanged."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match and match.group(2):
        return match.group(2).strip()
    return stripped


def _resolve_brackets(text: str, shape: Shape) -> tuple[str, str]:
    if shape != "any":
        return _BRACKETS[shape]
    first_brace = text.find("{")
    first_square = text.find("[")
    if first_square != -1 and (first_brace == -1 or first_square < first_brace):
        return _BRACKETS["array"]
    return _BRACKETS["object"]


def extract_json_candidate(text: str, shape: Shape = "object") -> str:
    """Strip fences and surrounding prose, leaving the bracketed JSON span."""
    open_char, close_char = _resolve_brackets(text, shape)
    candidate = strip_code_fence(text)
    start = candidate.find(open_char)
    end = candidate.rfind(close_char)
    if start != -1 and end != -1 and end > start:
        candidate = candidate[start : end + 1]
    return candidate


def _has_shape(value: Any, shape: Shape) -> bool:
    if shape == "object":
        return isinstance(value, dict)
    if shape == "array":
        return isinstance(value, list)
    return isinstance(value, (dict, list))


def parse_json_response(text: str, context: str, shape: Shape = "object") -> Any:
    """Parse a model response into a JSON object or array.

    ``context`` names the calling operation and only appears in logs and
    error messages. Raises ``UnparsableResponse`` when no valid JSON can be
    recovered and ``InvalidShape`` when the JSON is not of the requested
    shape; partial or guessed data is never returned.
    """
    raw = text or ""
    candidate = extract_json_candidate(raw, shape)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as first_error:
        logger.warning("Failed to parse JSON response for %s: %s", context, first_error)
        collapsed = _WHITESPACE_RE.sub(" ", candidate).strip()
        try:
            parsed = json.loads(collapsed)
        except json.JSONDecodeError as second_error:
            logger.error(
                "Second parsing attempt failed for %s: %s\nRaw text from AI: %s\nAttempted to parse: %s",
                context,
                second_error,
                raw,
                candidate,
            )
            raise UnparsableResponse(
                f"The AI returned malformed JSON for {context}. Please try again.",
                context=context,
                raw_text=raw,
                attempted=candidate,
            ) from second_error

    if not _has_shape(parsed, shape):
        logger.error(
            "Response for %s is not a JSON %s\nRaw text from AI: %s",
            context,
            "array" if shape == "array" else "object",
            raw,
        )
        raise InvalidShape(
            f"The AI returned an invalid format for {context}. Please try again.",
            context=context,
            raw_text=raw,
            attempted=candidate,
        )
    return parsed

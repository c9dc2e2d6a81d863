"""Response unwrapping and defensive parsing of analysis payloads."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from .errors import EmptyResponseError, MalformedResultError
from .models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\n?")
_FENCE_CLOSE = re.compile(r"\n?```$")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, optionally tagged ``json``.

    Text that does not start with a fence is only trimmed.
    """
    clean = text.strip()
    if clean.startswith("```"):
        clean = _FENCE_OPEN.sub("", clean, count=1)
        clean = _FENCE_CLOSE.sub("", clean, count=1)
    return clean


def parse_analysis(text: str | None) -> AnalysisResult:
    """Parse raw model text into a validated AnalysisResult.

    Raises:
        EmptyResponseError: No text at all.
        MalformedResultError: Not JSON, or JSON that does not match the schema.
    """
    if text is None or not text.strip():
        raise EmptyResponseError("No response generated.")

    clean = strip_code_fence(text)
    try:
        payload = json.loads(clean)
    except json.JSONDecodeError as exc:
        logger.warning("Analysis response is not JSON: %r", clean[:200])
        raise MalformedResultError(
            f"Analysis result was incomplete. Please try again. ({exc.msg})"
        ) from exc

    if not isinstance(payload, dict):
        raise MalformedResultError(
            f"Analysis result must be a JSON object, got {type(payload).__name__}"
        )

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Analysis response failed schema validation: %s", exc)
        raise MalformedResultError(
            f"Analysis result did not match the expected schema: {exc.error_count()} error(s)"
        ) from exc


def analysis_response_schema() -> dict:
    """JSON schema sent as ``response_json_schema`` (field names by alias)."""
    return AnalysisResult.model_json_schema(by_alias=True)

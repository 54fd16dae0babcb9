"""
Turn raw provider text into a `CorrectionResult`.

Provider output is untrusted: it may be wrapped in markdown fences, surrounded by
prose, or not JSON at all. Normalization is a single pass:

1. strip fencing
2. parse JSON, falling back to the first `{` .. last `}` substring
3. validate the text fields, coerce `alternatives`

A sentence in the wrong language overrides all of the above with the rejection
sentinel, so that check runs first.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import ValidationError

from app.corrections.language import is_language_mismatch
from app.corrections.schemas import (
    MAX_ALTERNATIVES,
    CorrectionRequest,
    CorrectionResult,
    _ProviderReply,
)
from app.domain.exceptions import InvalidShapeError, UnparsableResponseError

_OPENING_FENCE_RE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_CLOSING_FENCE_RE = re.compile(r"\n?```$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker, if present."""

    cleaned = text.strip()
    cleaned = _OPENING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def extract_json_object(text: str, *, raw_text: str | None = None) -> dict[str, Any]:
    """
    Parse `text` as a JSON object.

    Falls back to the substring between the first `{` and the last `}` when the
    whole text is not valid JSON (e.g. "Sure! {...} Hope that helps.").
    """

    raw = text if raw_text is None else raw_text

    # RecursionError: deeply nested input ("[[[[...") exhausts the decoder stack.
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        start = text.find("{")
        end = text.rfind("}")
        if start == -1 or end <= start:
            raise UnparsableResponseError("No JSON object found", raw_text=raw) from None
        try:
            parsed = json.loads(text[start : end + 1])
        except (json.JSONDecodeError, RecursionError):
            raise UnparsableResponseError("Embedded JSON is invalid", raw_text=raw) from None

    if not isinstance(parsed, dict):
        raise InvalidShapeError("JSON must be an object", raw_text=raw)
    return parsed


def coerce_result(
    payload: dict[str, Any],
    *,
    language: str,
    raw_text: str,
    max_alternatives: int = MAX_ALTERNATIVES,
) -> CorrectionResult:
    """
    Validate the parsed object against the response contract.

    Shape rules live on `_ProviderReply`; an empty `corrected` is the model
    rejecting the sentence itself and becomes the rejection sentinel.
    """

    try:
        reply = _ProviderReply.model_validate(payload)
    except ValidationError as exc:
        raise InvalidShapeError(
            f"Provider JSON failed validation ({exc.error_count()} errors)", raw_text=raw_text
        ) from exc

    if reply.corrected.strip() == "":
        return CorrectionResult.rejection(language)

    return CorrectionResult(
        corrected=reply.corrected,
        explanation=reply.explanation,
        alternatives=reply.alternatives[: min(max_alternatives, MAX_ALTERNATIVES)],
    )


def normalize_provider_output(
    raw_text: str,
    *,
    request: CorrectionRequest,
    max_alternatives: int = MAX_ALTERNATIVES,
    min_guard_length: int = 10,
) -> CorrectionResult:
    """
    Normalize one provider reply for `request`.

    A sentence in the wrong language yields the rejection sentinel whatever the
    provider said, even when its reply is unparsable. Otherwise raises
    ResponseParseError subclasses for output that cannot be used.
    """

    if is_language_mismatch(request.sentence, request.language, min_length=min_guard_length):
        return CorrectionResult.rejection(request.language)

    cleaned = strip_code_fences(raw_text)
    payload = extract_json_object(cleaned, raw_text=raw_text)
    return coerce_result(
        payload,
        language=request.language,
        raw_text=raw_text,
        max_alternatives=max_alternatives,
    )

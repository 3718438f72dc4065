"""Parse and validate raw model output into a candidate Recipe."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from pydantic import ValidationError as PydanticValidationError

from recipebox.models.recipe import Recipe
from recipebox.utils.exceptions import (
    EmptyResponseError,
    MalformedJSONError,
    SchemaViolation,
    SchemaViolationError,
)

logger = logging.getLogger(__name__)

# ```json ... ``` or ``` ... ```, anywhere in the response
_FENCE_RE = re.compile(r"```[A-Za-z0-9_+-]*[ \t]*\r?\n?([\s\S]*?)\s*```")


def strip_code_fence(text: str) -> str:
    """Return the payload of the first fenced code block, or the trimmed text if unfenced."""
    t = (text or "").strip()
    match = _FENCE_RE.search(t)
    if match:
        return match.group(1).strip()
    return t


def _field_path(loc: tuple) -> str:
    parts: List[str] = []
    for item in loc:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        else:
            parts.append(f".{item}" if parts else str(item))
    return "".join(parts) or "<root>"


def violations_from_pydantic(error: PydanticValidationError) -> List[SchemaViolation]:
    """Flatten pydantic errors to (field path, constraint) pairs."""
    violations = []
    for err in error.errors():
        message = err.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append(SchemaViolation(_field_path(tuple(err.get("loc", ()))), message))
    return violations


def validate_candidate(data: Any) -> Recipe:
    """
    Validate an already-decoded JSON value against the Recipe schema.

    Raises:
        MalformedJSONError: If the value is not a JSON object
        SchemaViolationError: If any field fails validation
    """
    if not isinstance(data, dict):
        raise MalformedJSONError(
            "Recipe JSON must be an object",
            [SchemaViolation("<root>", f"expected object, got {type(data).__name__}")],
        )

    try:
        return Recipe.model_validate(data)
    except PydanticValidationError as e:
        violations = violations_from_pydantic(e)
        summary = "; ".join(f"{v.field}: {v.constraint}" for v in violations)
        logger.warning("Extracted recipe failed validation: %s", summary)
        raise SchemaViolationError(f"Invalid recipe format: {summary}", violations) from e


def parse_candidate(text: str) -> Recipe:
    """
    Turn raw model output into a validated candidate Recipe.

    Args:
        text: Model response text, raw JSON or JSON inside a fenced code block

    Returns:
        Validated Recipe

    Raises:
        EmptyResponseError: If there is no content to parse
        MalformedJSONError: If the content is not a JSON object
        SchemaViolationError: If the JSON does not match the recipe schema
    """
    if not text or not text.strip():
        raise EmptyResponseError("No content returned from extraction model")

    payload = strip_code_fence(text)
    if not payload:
        raise EmptyResponseError("Extraction model returned an empty code block")

    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as e:
        # huge integer literals raise ValueError, deep nesting RecursionError
        logger.warning("Extracted content is not valid JSON: %s", e)
        if isinstance(e, json.JSONDecodeError):
            message, constraint = e.msg, f"invalid JSON at line {e.lineno} column {e.colno}"
        else:
            message = constraint = f"unparseable JSON ({type(e).__name__})"
        raise MalformedJSONError(
            f"Extracted content is not valid JSON: {message}",
            [SchemaViolation("<root>", constraint)],
        ) from e

    return validate_candidate(data)

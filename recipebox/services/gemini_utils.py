"""Shared helpers for reading Gemini responses."""

from __future__ import annotations

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _first_text_part(parts: Any) -> str:
    for p in parts or []:
        pt = p.get("text") if isinstance(p, dict) else getattr(p, "text", None)
        if isinstance(pt, str) and pt.strip():
            return pt
    return ""


def get_response_text(response: Any) -> str:
    """
    Extract text from a google-genai response.

    Tries response.text first, then the first candidate's content parts.
    Returns an empty string when the response carries no text.
    """
    if response is None:
        return ""

    # response.text raises on some SDK versions when the candidate was blocked
    try:
        t = getattr(response, "text", None)
    except ValueError:
        t = None
    if isinstance(t, str) and t.strip():
        return t

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        return _first_text_part(getattr(content, "parts", None))

    return ""


def response_debug_summary(response: Any) -> Dict[str, Any]:
    """Compact description of a response, for explaining "HTTP 200 but empty text"."""
    out: Dict[str, Any] = {"candidates": 0}
    candidates = getattr(response, "candidates", None) or []
    out["candidates"] = len(candidates)
    if candidates:
        c0 = candidates[0]
        out["finish_reason"] = str(getattr(c0, "finish_reason", None))
        content = getattr(c0, "content", None)
        out["parts"] = len(getattr(content, "parts", None) or [])
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None:
        out["block_reason"] = str(getattr(feedback, "block_reason", None))
    return out


def log_empty_response(prefix: str, response: Any) -> None:
    summary = response_debug_summary(response)
    logger.warning(f"{prefix} empty response text. summary={summary}")

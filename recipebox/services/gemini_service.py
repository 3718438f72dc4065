"""
Gemini LLM service for recipe extraction and audio transcription.

Key design:
- One call per input unit (one photo, one transcript). Callers fan out.
- Lowest practical temperature for repeatable extraction.
- No automatic retries: an empty or failed call is reported to the caller.
- This service returns raw model text; parsing and validation live in
  recipe_parser.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from recipebox.config import settings
from recipebox.services.gemini_utils import get_response_text, log_empty_response
from recipebox.services.prompts import (
    build_image_extraction_prompt,
    build_text_extraction_prompt,
    build_transcription_prompt,
)
from recipebox.utils.exceptions import EmptyResponseError, GeminiError

logger = logging.getLogger(__name__)


class GeminiService:
    """Service for interacting with Gemini API."""

    def __init__(self, client: Optional[genai.Client] = None) -> None:
        self._client = client

    @property
    def client(self) -> genai.Client:
        """Get or create Gemini client (lazy initialization)."""
        if self._client is None:
            if not settings.gemini_api_key:
                raise GeminiError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(
                api_key=settings.gemini_api_key,
                http_options=types.HttpOptions(timeout=settings.http_timeout * 1000),
            )
        return self._client

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------

    async def extract_recipe_text_from_image(self, image_data: bytes, mime_type: str) -> str:
        """
        Ask Gemini Vision for recipe JSON from one photo.

        The response may be raw JSON or JSON inside a fenced code block.
        """
        contents = [
            build_image_extraction_prompt(),
            types.Part.from_bytes(data=image_data, mime_type=mime_type),
        ]
        logger.info("Extracting recipe from image (mime_type=%s, bytes=%d)", mime_type, len(image_data))
        return await self._call_gemini(
            model=settings.gemini_image_model,
            contents=contents,
            response_mime_type=None,
            label="image extraction",
        )

    async def extract_recipe_text_from_transcript(self, text: str) -> str:
        """Ask Gemini for recipe JSON from plain text."""
        logger.info("Extracting recipe from text (chars=%d)", len(text))
        return await self._call_gemini(
            model=settings.gemini_text_model,
            contents=build_text_extraction_prompt(text),
            response_mime_type="application/json",
            label="text extraction",
        )

    async def transcribe_audio(self, audio_data: bytes, mime_type: str) -> str:
        """Transcribe a spoken recipe to plain text."""
        contents = [
            build_transcription_prompt(),
            types.Part.from_bytes(data=audio_data, mime_type=mime_type),
        ]
        logger.info("Transcribing audio (mime_type=%s, bytes=%d)", mime_type, len(audio_data))
        text = await self._call_gemini(
            model=settings.gemini_audio_model,
            contents=contents,
            response_mime_type=None,
            label="transcription",
        )
        return text.strip()

    # ---------------------------------------------------------------------
    # Core Gemini call
    # ---------------------------------------------------------------------

    async def _call_gemini(
        self,
        *,
        model: str,
        contents: Any,
        response_mime_type: Optional[str],
        label: str,
    ) -> str:
        """
        Single Gemini call. The SDK client is blocking, so it runs in a worker thread.

        Raises:
            EmptyResponseError: If the call succeeded but returned no text
            GeminiError: If the call itself failed
        """
        client = self.client
        config = types.GenerateContentConfig(
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_tokens,
            response_mime_type=response_mime_type,
        )

        def _sync_call() -> Any:
            return client.models.generate_content(model=model, contents=contents, config=config)

        try:
            resp = await asyncio.to_thread(_sync_call)
        except Exception as e:
            logger.error("Gemini %s call failed: %s", label, str(e), exc_info=True)
            raise GeminiError(f"Gemini {label} failed: {str(e)}") from e

        text = get_response_text(resp)
        if not text.strip():
            log_empty_response(f"Gemini {label}", resp)
            raise EmptyResponseError(f"No response from AI ({label})")

        logger.debug("Gemini raw response (%s):\n%s", label, text)
        return text.strip()

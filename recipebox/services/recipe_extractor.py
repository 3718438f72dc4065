"""Unified recipe extraction service: one entry point for one or many inputs."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from recipebox.models.recipe import Recipe
from recipebox.services.audio_service import AudioService
from recipebox.services.gemini_service import GeminiService
from recipebox.services.image_service import ImageService
from recipebox.services.recipe_merger import merge_recipes
from recipebox.services.recipe_parser import parse_candidate
from recipebox.utils.exceptions import EmptyBatchError, ValidationError

logger = logging.getLogger(__name__)

ImageInput = Tuple[bytes, Optional[str]]


class RecipeExtractor:
    """Turns photos, transcripts and voice recordings into validated recipes."""

    def __init__(self, gemini_service: Optional[GeminiService] = None):
        self.gemini_service = gemini_service or GeminiService()
        self.image_service = ImageService()
        self.audio_service = AudioService()

    async def extract_from_image(self, image_data: bytes, mime_type: Optional[str] = None) -> Recipe:
        """Extract one candidate recipe from one photo."""
        validated, detected_mime = self.image_service.validate_image(image_data, mime_type)
        return await self._extract_validated_image(validated, detected_mime)

    async def _extract_validated_image(self, image_data: bytes, mime_type: str) -> Recipe:
        prepared, prepared_mime = self.image_service.prepare_for_vision(image_data, mime_type)
        text = await self.gemini_service.extract_recipe_text_from_image(prepared, prepared_mime)
        return parse_candidate(text)

    async def extract_from_text(self, text: str) -> Recipe:
        """Extract one candidate recipe from free text (e.g. a voice transcript)."""
        if not text or not text.strip():
            raise ValidationError("No text provided")
        raw = await self.gemini_service.extract_recipe_text_from_transcript(text.strip())
        return parse_candidate(raw)

    async def extract_from_images(self, images: Sequence[ImageInput]) -> Recipe:
        """
        Extract a single recipe from one or more photos of the same recipe.

        Each photo is extracted independently and concurrently; results are
        merged in upload order once every extraction has finished. If any
        photo fails, the whole submission fails.

        Raises:
            EmptyBatchError: If no images are given
            ImageProcessingError, GeminiError, SchemaViolationError: From any single photo
        """
        if not images:
            raise EmptyBatchError("No image files provided")

        # Validate everything up front so a bad upload fails before any model call
        validated = [self.image_service.validate_image(data, mime_type) for data, mime_type in images]

        logger.info("Extracting recipe from %d image(s)", len(images))
        results = await asyncio.gather(
            *(self._extract_validated_image(data, mime) for data, mime in validated),
            return_exceptions=True,
        )

        candidates: List[Recipe] = []
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Image %d/%d failed extraction: %s",
                    index + 1,
                    len(images),
                    result,
                    extra={"failed_index": index},
                )
                # first failure in upload order fails the whole submission
                raise result
            candidates.append(result)

        return merge_recipes(candidates)

    async def transcribe(self, audio_data: bytes, content_type: Optional[str]) -> str:
        """Transcribe a voice recording to text."""
        validated, mime_type = self.audio_service.validate_audio(audio_data, content_type)
        return await self.gemini_service.transcribe_audio(validated, mime_type)

"""Recipe extraction and storage endpoints."""

import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status

from recipebox.api.dependencies import get_recipe_extractor, get_recipe_store
from recipebox.config import settings
from recipebox.middleware.rate_limit import rate_limit_dependency
from recipebox.models.recipe import (
    CreateRecipeRequest,
    Recipe,
    StoredRecipe,
    StoredRecipeWithDetails,
    TextParseRequest,
)
from recipebox.services.recipe_extractor import RecipeExtractor
from recipebox.services.recipe_store import RecipeStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["recipes"])


# -----------------------
# Extraction
# -----------------------


@router.post("/parse-image", response_model=Recipe)
async def parse_recipe_image(
    request: Request,
    image: Optional[List[UploadFile]] = File(None, description="One or more photos of the same recipe"),
    _: None = Depends(rate_limit_dependency),
    recipe_extractor: RecipeExtractor = Depends(get_recipe_extractor),
) -> Recipe:
    """
    Extract one recipe from one or more photos.

    Photos are treated as successive pages of the same recipe and merged in
    upload order.
    """
    files = image or []
    logger.info(
        "Route /recipes/parse-image called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/recipes/parse-image",
            "params": {
                "count": len(files),
                "files": [{"filename": f.filename, "content_type": f.content_type} for f in files],
            },
        },
    )

    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "No image files provided"},
        )
    if len(files) > settings.max_images_per_request:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Too many images",
                "detail": f"At most {settings.max_images_per_request} images per recipe",
            },
        )

    images = [(await f.read(), f.content_type) for f in files]

    try:
        return await asyncio.wait_for(
            recipe_extractor.extract_from_images(images),
            timeout=settings.extract_timeout,
        )
    except asyncio.TimeoutError as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={
                "error": "Timeout",
                "detail": f"Recipe extraction took too long (> {settings.extract_timeout:.0f}s). "
                          f"Try fewer or clearer photos.",
            },
        ) from e


@router.post("/parse-text", response_model=Recipe)
async def parse_recipe_text(
    request: Request,
    body: TextParseRequest,
    _: None = Depends(rate_limit_dependency),
    recipe_extractor: RecipeExtractor = Depends(get_recipe_extractor),
) -> Recipe:
    """Extract a recipe from free text, such as a voice transcript."""
    logger.info(
        "Route /recipes/parse-text called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/recipes/parse-text",
            "params": {"chars": len(body.text)},
        },
    )
    return await recipe_extractor.extract_from_text(body.text)


@router.post("/transcribe")
async def transcribe_audio(
    request: Request,
    audio: UploadFile = File(..., description="Voice recording"),
    _: None = Depends(rate_limit_dependency),
    recipe_extractor: RecipeExtractor = Depends(get_recipe_extractor),
) -> Dict[str, str]:
    """Transcribe a spoken recipe; feed the text to /recipes/parse-text."""
    logger.info(
        "Route /recipes/transcribe called",
        extra={
            "request_id": getattr(request.state, "request_id", None),
            "route": "/recipes/transcribe",
            "params": {"filename": audio.filename, "content_type": audio.content_type},
        },
    )
    data = await audio.read()
    text = await recipe_extractor.transcribe(data, audio.content_type)
    return {"text": text}


# -----------------------
# Storage
# -----------------------


@router.post("", response_model=StoredRecipeWithDetails, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    body: CreateRecipeRequest,
    store: RecipeStore = Depends(get_recipe_store),
) -> StoredRecipeWithDetails:
    """Save a reviewed recipe."""
    return await store.create_recipe(body, image_url=body.image_url)


@router.get("", response_model=List[StoredRecipe])
async def list_recipes(store: RecipeStore = Depends(get_recipe_store)) -> List[StoredRecipe]:
    return await store.list_recipes()


@router.get("/{recipe_id}", response_model=StoredRecipeWithDetails)
async def get_recipe(recipe_id: str, store: RecipeStore = Depends(get_recipe_store)) -> StoredRecipeWithDetails:
    """A recipe with ingredients and steps in cooking order."""
    return await store.get_recipe(recipe_id)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(recipe_id: str, store: RecipeStore = Depends(get_recipe_store)) -> Response:
    await store.delete_recipe(recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

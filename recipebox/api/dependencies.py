"""Shared API dependencies."""

from functools import lru_cache

from recipebox.services.recipe_extractor import RecipeExtractor
from recipebox.services.recipe_store import RecipeStore


@lru_cache(maxsize=1)
def get_recipe_extractor() -> RecipeExtractor:
    """Process-wide extractor; the Gemini client inside it is created lazily."""
    return RecipeExtractor()


def get_recipe_store() -> RecipeStore:
    return RecipeStore()

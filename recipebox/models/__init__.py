"""Pydantic models."""

from recipebox.models.recipe import (
    CreateRecipeRequest,
    Ingredient,
    Instruction,
    Recipe,
    RecipeIngredientRow,
    RecipeInstructionRow,
    StoredRecipe,
    StoredRecipeWithDetails,
    TextParseRequest,
)

__all__ = [
    "CreateRecipeRequest",
    "Ingredient",
    "Instruction",
    "Recipe",
    "RecipeIngredientRow",
    "RecipeInstructionRow",
    "StoredRecipe",
    "StoredRecipeWithDetails",
    "TextParseRequest",
]

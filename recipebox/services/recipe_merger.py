"""
Merge several candidate recipes into one.

Multi-photo submissions are treated as successive pages of the same recipe:
the first candidate is the base, and every later candidate is folded into it
in submission order. Field policies:

- ingredients: deduplicated by lowercased, trimmed name, in order of first
  appearance; differing amounts are joined as "<existing>, <new>"
- instructions: concatenated, never deduplicated or reordered
- time_estimation: summed
- servings: maximum of the stated values
- health_score: pairwise rounded mean, folded left to right
- description: appended with ". " when different
- cuisine_type, main_ingredient: appended with ", " when different
- name: always the first candidate's
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from recipebox.models.recipe import Ingredient, Instruction, Recipe, round_half_up
from recipebox.utils.exceptions import EmptyBatchError

logger = logging.getLogger(__name__)


def ingredient_key(name: str) -> str:
    """Identity key used to detect the same ingredient across candidates."""
    return name.strip().lower()


def merge_amounts(existing: Optional[str], new: Optional[str]) -> Optional[str]:
    if new is None:
        return existing
    if existing is None:
        return new
    if existing == new:
        return existing
    return f"{existing}, {new}"


def merge_ingredients(candidates: Sequence[Recipe]) -> List[Ingredient]:
    merged: Dict[str, Ingredient] = {}
    for recipe in candidates:
        for ingredient in recipe.ingredients:
            key = ingredient_key(ingredient.name)
            existing = merged.get(key)
            if existing is None:
                merged[key] = ingredient
                continue
            amount = merge_amounts(existing.amount, ingredient.amount)
            if amount != existing.amount:
                merged[key] = existing.model_copy(update={"amount": amount})
    # dict preserves first-insertion order even when a value is replaced
    return list(merged.values())


def merge_instructions(candidates: Sequence[Recipe]) -> List[Instruction]:
    return [step for recipe in candidates for step in recipe.instructions]


def _append_text(current: Optional[str], new: Optional[str], separator: str) -> Optional[str]:
    if new is None or new == current:
        return current
    if current is None:
        return new
    return f"{current}{separator}{new}"


def _max_servings(current: Optional[int], new: Optional[int]) -> Optional[int]:
    if new is None:
        return current
    if current is None:
        return new
    return max(current, new)


def _average_health(current: Optional[int], new: Optional[int]) -> Optional[int]:
    if new is None:
        return current
    if current is None:
        return new
    return round_half_up((current + new) / 2)


def merge_recipes(candidates: Sequence[Recipe]) -> Recipe:
    """
    Fold an ordered, non-empty list of candidate recipes into one recipe.

    Args:
        candidates: Candidate recipes in submission order

    Returns:
        The merged recipe. A single candidate is returned unchanged.

    Raises:
        EmptyBatchError: If no candidates are given
    """
    if not candidates:
        raise EmptyBatchError("No recipes to merge")

    if len(candidates) == 1:
        return candidates[0]

    base = candidates[0]
    description = base.description
    cuisine_type = base.cuisine_type
    main_ingredient = base.main_ingredient
    servings = base.servings
    health_score = base.health_score

    for recipe in candidates[1:]:
        description = _append_text(description, recipe.description, ". ")
        servings = _max_servings(servings, recipe.servings)
        health_score = _average_health(health_score, recipe.health_score)
        cuisine_type = _append_text(cuisine_type, recipe.cuisine_type, ", ")
        main_ingredient = _append_text(main_ingredient, recipe.main_ingredient, ", ")

    merged = Recipe(
        name=base.name,
        description=description,
        cuisine_type=cuisine_type,
        main_ingredient=main_ingredient,
        time_estimation=sum(recipe.time_estimation for recipe in candidates),
        servings=servings,
        health_score=health_score,
        ingredients=merge_ingredients(candidates),
        instructions=merge_instructions(candidates),
    )

    logger.info(
        "Merged %d candidate recipes",
        len(candidates),
        extra={
            "candidates": len(candidates),
            "ingredients": len(merged.ingredients),
            "instructions": len(merged.instructions),
            "time_estimation": merged.time_estimation,
        },
    )
    return merged

"""
Recipe persistence on Supabase, through its PostgREST HTTP API.

A recipe is stored as one `recipes` row plus ordered child rows in
`recipe_ingredients` and `recipe_instructions`. Each child carries a
zero-based `order`; instructions also carry `step_number = order + 1`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from recipebox.config import settings
from recipebox.models.recipe import (
    Recipe,
    RecipeIngredientRow,
    RecipeInstructionRow,
    StoredRecipe,
    StoredRecipeWithDetails,
)
from recipebox.utils.exceptions import RecipeNotFoundError, StorageError

logger = logging.getLogger(__name__)

RECIPES_TABLE = "recipes"
INGREDIENTS_TABLE = "recipe_ingredients"
INSTRUCTIONS_TABLE = "recipe_instructions"


def build_recipe_rows(
    recipe: Recipe, image_url: Optional[str] = None
) -> Tuple[Dict[str, Any], List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Split a recipe into its parent payload and ordered child payloads.

    Child payloads do not carry `recipe_id`; it is assigned once the parent
    row exists.
    """
    parent = {
        "name": recipe.name.strip(),
        "description": recipe.description,
        "cuisine_type": recipe.cuisine_type,
        "main_ingredient": recipe.main_ingredient,
        "time_estimation": recipe.time_estimation,
        "servings": recipe.servings,
        "health_score": recipe.health_score,
        "image_url": image_url,
    }
    ingredients = [
        {
            "name": ing.name.strip(),
            "amount": ing.amount.strip() if ing.amount else None,
            "order": index,
        }
        for index, ing in enumerate(recipe.ingredients)
    ]
    instructions = [
        {
            "step_number": index + 1,
            "instruction": step.instruction.strip(),
            "order": index,
        }
        for index, step in enumerate(recipe.instructions)
    ]
    return parent, ingredients, instructions


class RecipeStore:
    """Async client for the recipe tables."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.supabase_url) or ""
        self.api_key = (api_key if api_key is not None else settings.supabase_key) or ""
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def _client(self) -> httpx.AsyncClient:
        if not self.configured:
            raise StorageError("Recipe storage is not configured", configured=False)
        return httpx.AsyncClient(
            base_url=f"{self.base_url.rstrip('/')}/rest/v1",
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=float(settings.http_timeout),
            transport=self._transport,
        )

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        returning: bool = False,
    ) -> Any:
        headers = {"Prefer": "return=representation"} if returning else {}
        try:
            response = await client.request(method, f"/{table}", params=params, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Storage {method} {table} failed: {e.response.status_code}",
                extra={"table": table, "status_code": e.response.status_code, "body": e.response.text[:500]},
            )
            raise StorageError(f"Storage {method} {table} failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Storage {method} {table} failed: {str(e)}", exc_info=True)
            raise StorageError(f"Storage {method} {table} failed: {str(e)}") from e

        if not response.content:
            return None
        return response.json()

    async def _rollback(self, client: httpx.AsyncClient, table: str, params: Dict[str, str]) -> None:
        """Delete rows during a rollback; failures are logged, not raised."""
        try:
            await self._request(client, "DELETE", table, params=params)
        except StorageError as e:
            logger.error(f"Rollback of {table} failed: {e}", extra={"table": table, "params": params})

    async def create_recipe(self, recipe: Recipe, image_url: Optional[str] = None) -> StoredRecipeWithDetails:
        """
        Persist a recipe with its ingredients and instructions.

        If a child insert fails, the parent row is removed again so no
        half-saved recipe is left behind.
        """
        parent, ingredients, instructions = build_recipe_rows(recipe, image_url)

        async with self._client() as client:
            rows = await self._request(client, "POST", RECIPES_TABLE, json=parent, returning=True)
            if not rows:
                raise StorageError("Storage did not return the created recipe")
            stored = StoredRecipe.model_validate(rows[0])

            try:
                ingredient_rows: List[Dict[str, Any]] = []
                if ingredients:
                    payload = [dict(row, recipe_id=stored.id) for row in ingredients]
                    ingredient_rows = await self._request(
                        client, "POST", INGREDIENTS_TABLE, json=payload, returning=True
                    ) or []

                instruction_rows: List[Dict[str, Any]] = []
                if instructions:
                    payload = [dict(row, recipe_id=stored.id) for row in instructions]
                    instruction_rows = await self._request(
                        client, "POST", INSTRUCTIONS_TABLE, json=payload, returning=True
                    ) or []
            except StorageError:
                logger.warning("Rolling back recipe %s after child insert failure", stored.id)
                await self._rollback(client, INGREDIENTS_TABLE, {"recipe_id": f"eq.{stored.id}"})
                await self._rollback(client, RECIPES_TABLE, {"id": f"eq.{stored.id}"})
                raise

        logger.info(
            "Stored recipe",
            extra={
                "recipe_id": stored.id,
                "ingredients": len(ingredient_rows),
                "instructions": len(instruction_rows),
            },
        )
        return StoredRecipeWithDetails(
            **stored.model_dump(),
            ingredients=sorted(
                (RecipeIngredientRow.model_validate(r) for r in ingredient_rows), key=lambda r: r.order
            ),
            instructions=sorted(
                (RecipeInstructionRow.model_validate(r) for r in instruction_rows), key=lambda r: r.order
            ),
        )

    async def list_recipes(self) -> List[StoredRecipe]:
        """All recipes, newest first."""
        async with self._client() as client:
            rows = await self._request(
                client, "GET", RECIPES_TABLE, params={"select": "*", "order": "created_at.desc"}
            ) or []
        return [StoredRecipe.model_validate(row) for row in rows]

    async def get_recipe(self, recipe_id: str) -> StoredRecipeWithDetails:
        """One recipe with its children in cooking order."""
        async with self._client() as client:
            rows = await self._request(
                client, "GET", RECIPES_TABLE, params={"select": "*", "id": f"eq.{recipe_id}"}
            ) or []
            if not rows:
                raise RecipeNotFoundError(f"Recipe {recipe_id} not found")

            child_params = {"select": "*", "recipe_id": f"eq.{recipe_id}", "order": "order.asc"}
            ingredient_rows = await self._request(client, "GET", INGREDIENTS_TABLE, params=child_params) or []
            instruction_rows = await self._request(client, "GET", INSTRUCTIONS_TABLE, params=child_params) or []

        return StoredRecipeWithDetails(
            **StoredRecipe.model_validate(rows[0]).model_dump(),
            ingredients=[RecipeIngredientRow.model_validate(r) for r in ingredient_rows],
            instructions=[RecipeInstructionRow.model_validate(r) for r in instruction_rows],
        )

    async def delete_recipe(self, recipe_id: str) -> None:
        """Delete a recipe and its children."""
        async with self._client() as client:
            # children first so the foreign keys never dangle
            child_params = {"recipe_id": f"eq.{recipe_id}"}
            await self._request(client, "DELETE", INGREDIENTS_TABLE, params=child_params)
            await self._request(client, "DELETE", INSTRUCTIONS_TABLE, params=child_params)
            rows = await self._request(
                client, "DELETE", RECIPES_TABLE, params={"id": f"eq.{recipe_id}"}, returning=True
            )
            if not rows:
                raise RecipeNotFoundError(f"Recipe {recipe_id} not found")
        logger.info("Deleted recipe", extra={"recipe_id": recipe_id})

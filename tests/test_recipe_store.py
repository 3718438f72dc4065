"""Tests for recipe persistence against a mocked PostgREST API."""

import asyncio
import json

import httpx
import pytest

from recipebox.models.recipe import Recipe
from recipebox.services.recipe_store import RecipeStore, build_recipe_rows
from recipebox.utils.exceptions import RecipeNotFoundError, StorageError

RECIPE = Recipe.model_validate({
    "name": " Pancakes ",
    "time_estimation": 25,
    "servings": 4,
    "ingredients": [{"name": "Flour", "amount": " 1 cup "}, {"name": "Egg"}],
    "instructions": [{"instruction": "Mix"}, {"instruction": "Cook"}, {"instruction": "Serve"}],
})


class FakePostgrest:
    """Minimal in-memory stand-in for the three recipe tables."""

    def __init__(self, fail_table=None, fail_delete=()):
        self.tables = {"recipes": [], "recipe_ingredients": [], "recipe_instructions": []}
        self.requests = []
        self.fail_table = fail_table
        self.fail_delete = set(fail_delete)
        self._next_id = 1

    def __call__(self, request: httpx.Request) -> httpx.Response:
        table = request.url.path.rsplit("/", 1)[-1]
        self.requests.append((request.method, table, dict(request.url.params)))
        assert request.headers["apikey"] == "service-key"
        assert request.headers["Authorization"] == "Bearer service-key"

        if table == self.fail_table and request.method == "POST":
            return httpx.Response(400, json={"message": "bad row"})
        if table in self.fail_delete and request.method == "DELETE":
            return httpx.Response(500, json={"message": "delete failed"})

        rows = self.tables[table]
        if request.method == "POST":
            payload = json.loads(request.content)
            payload = payload if isinstance(payload, list) else [payload]
            created = []
            for row in payload:
                row = dict(row, id=f"{table}-{self._next_id}")
                self._next_id += 1
                rows.append(row)
                created.append(row)
            return httpx.Response(201, json=created)

        matches = [r for r in rows if self._matches(r, request.url.params)]
        if request.method == "GET":
            if request.url.params.get("order") == "order.asc":
                matches = sorted(matches, key=lambda r: r["order"])
            return httpx.Response(200, json=matches)
        if request.method == "DELETE":
            self.tables[table] = [r for r in rows if r not in matches]
            return httpx.Response(200, json=matches)
        return httpx.Response(405)

    @staticmethod
    def _matches(row, params):
        for key, value in params.items():
            if value.startswith("eq.") and str(row.get(key)) != value[3:]:
                return False
        return True


def make_store(backend):
    return RecipeStore(
        base_url="https://example.supabase.co",
        api_key="service-key",
        transport=httpx.MockTransport(backend),
    )


def test_build_recipe_rows_orders_children():
    parent, ingredients, instructions = build_recipe_rows(RECIPE, image_url="https://img/x.jpg")

    assert parent["name"] == "Pancakes"
    assert parent["image_url"] == "https://img/x.jpg"
    assert parent["health_score"] is None
    assert ingredients == [
        {"name": "Flour", "amount": "1 cup", "order": 0},
        {"name": "Egg", "amount": None, "order": 1},
    ]
    assert [(i["order"], i["step_number"]) for i in instructions] == [(0, 1), (1, 2), (2, 3)]


def test_create_recipe_inserts_parent_then_children():
    backend = FakePostgrest()
    store = make_store(backend)

    stored = asyncio.run(store.create_recipe(RECIPE))

    assert [(m, t) for m, t, _ in backend.requests] == [
        ("POST", "recipes"),
        ("POST", "recipe_ingredients"),
        ("POST", "recipe_instructions"),
    ]
    assert stored.name == "Pancakes"
    assert all(row.recipe_id == stored.id for row in stored.ingredients + stored.instructions)
    assert [s.step_number for s in stored.instructions] == [1, 2, 3]
    assert [i.order for i in stored.ingredients] == [0, 1]


def test_create_recipe_without_children_skips_child_inserts():
    backend = FakePostgrest()
    store = make_store(backend)

    stored = asyncio.run(store.create_recipe(Recipe(name="Water", time_estimation=0)))

    assert [t for _, t, _ in backend.requests] == ["recipes"]
    assert stored.ingredients == []
    assert stored.instructions == []


def test_create_recipe_rolls_back_parent_on_child_failure():
    backend = FakePostgrest(fail_table="recipe_instructions")
    store = make_store(backend)

    with pytest.raises(StorageError):
        asyncio.run(store.create_recipe(RECIPE))

    assert backend.tables["recipes"] == []
    assert backend.tables["recipe_ingredients"] == []


def test_failed_rollback_keeps_original_error_and_still_deletes_parent():
    backend = FakePostgrest(fail_table="recipe_instructions", fail_delete={"recipe_ingredients"})
    store = make_store(backend)

    with pytest.raises(StorageError, match="POST recipe_instructions"):
        asyncio.run(store.create_recipe(RECIPE))

    assert backend.tables["recipes"] == []
    assert [(m, t) for m, t, _ in backend.requests][-2:] == [
        ("DELETE", "recipe_ingredients"),
        ("DELETE", "recipes"),
    ]


def test_get_recipe_returns_children_in_order():
    backend = FakePostgrest()
    store = make_store(backend)
    created = asyncio.run(store.create_recipe(RECIPE))
    backend.tables["recipe_instructions"].reverse()

    fetched = asyncio.run(store.get_recipe(created.id))

    assert [s.instruction for s in fetched.instructions] == ["Mix", "Cook", "Serve"]
    assert [i.name for i in fetched.ingredients] == ["Flour", "Egg"]


def test_get_missing_recipe_raises_not_found():
    store = make_store(FakePostgrest())
    with pytest.raises(RecipeNotFoundError):
        asyncio.run(store.get_recipe("nope"))


def test_list_recipes_requests_newest_first():
    backend = FakePostgrest()
    store = make_store(backend)
    asyncio.run(store.create_recipe(RECIPE))

    recipes = asyncio.run(store.list_recipes())

    assert len(recipes) == 1
    assert backend.requests[-1][2]["order"] == "created_at.desc"


def test_delete_recipe_removes_children():
    backend = FakePostgrest()
    store = make_store(backend)
    created = asyncio.run(store.create_recipe(RECIPE))

    asyncio.run(store.delete_recipe(created.id))

    assert all(not rows for rows in backend.tables.values())


def test_delete_missing_recipe_raises_not_found():
    store = make_store(FakePostgrest())
    with pytest.raises(RecipeNotFoundError):
        asyncio.run(store.delete_recipe("nope"))


def test_unconfigured_store_raises():
    store = RecipeStore(base_url="", api_key="")
    with pytest.raises(StorageError) as exc_info:
        asyncio.run(store.list_recipes())
    assert exc_info.value.configured is False

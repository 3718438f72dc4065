"""Tests for merging candidate recipes."""

import pytest

from recipebox.models.recipe import Ingredient, Instruction, Recipe
from recipebox.services.recipe_merger import ingredient_key, merge_amounts, merge_recipes
from recipebox.utils.exceptions import EmptyBatchError


def steps(*texts):
    return [Instruction(instruction=t) for t in texts]


def test_merge_empty_batch_fails():
    with pytest.raises(EmptyBatchError):
        merge_recipes([])


def test_merge_single_candidate_is_returned_unchanged(make_recipe):
    only = make_recipe(
        description="desc",
        servings=2,
        health_score=55,
        ingredients=[{"name": " Flour ", "amount": "1 cup"}, {"name": "flour", "amount": "2 cups"}],
    )
    assert merge_recipes([only]) is only


def test_ingredient_key_is_trimmed_and_lowercased():
    assert ingredient_key("  Flour ") == "flour"
    assert ingredient_key("Brown Sugar") == "brown sugar"


def test_merge_amounts_policy():
    assert merge_amounts(None, "1 tsp") == "1 tsp"
    assert merge_amounts("1 tsp", None) == "1 tsp"
    assert merge_amounts("1 tsp", "1 tsp") == "1 tsp"
    assert merge_amounts("1 tsp", "2 tsp") == "1 tsp, 2 tsp"
    assert merge_amounts(None, None) is None


def test_ingredients_dedupe_case_and_whitespace_insensitive(make_recipe):
    merged = merge_recipes([
        make_recipe(ingredients=[{"name": "Flour", "amount": "1 cup"}]),
        make_recipe(ingredients=[{"name": " flour ", "amount": None}]),
    ])
    assert merged.ingredients == [Ingredient(name="Flour", amount="1 cup")]


def test_ingredient_amount_adopted_when_missing(make_recipe):
    merged = merge_recipes([
        make_recipe(ingredients=[{"name": "salt"}]),
        make_recipe(ingredients=[{"name": "salt", "amount": "1 tsp"}]),
    ])
    assert merged.ingredients == [Ingredient(name="salt", amount="1 tsp")]


def test_ingredient_amounts_concatenated_when_different(make_recipe):
    merged = merge_recipes([
        make_recipe(ingredients=[{"name": "salt", "amount": "1 tsp"}]),
        make_recipe(ingredients=[{"name": "salt", "amount": "2 tsp"}]),
        make_recipe(ingredients=[{"name": "Salt", "amount": "2 tsp"}]),
    ])
    # "2 tsp" differs from the accumulated "1 tsp, 2 tsp", so it is appended again
    assert merged.ingredients == [Ingredient(name="salt", amount="1 tsp, 2 tsp, 2 tsp")]


def test_ingredients_keep_first_appearance_order(make_recipe):
    merged = merge_recipes([
        make_recipe(ingredients=[{"name": "Egg"}, {"name": "Milk"}]),
        make_recipe(ingredients=[{"name": "Sugar"}, {"name": "egg", "amount": "2"}, {"name": "Butter"}]),
    ])
    assert [i.name for i in merged.ingredients] == ["Egg", "Milk", "Sugar", "Butter"]
    assert merged.ingredients[0].amount == "2"


def test_identical_candidates_have_no_duplicate_ingredients(make_recipe):
    candidate = make_recipe(ingredients=[{"name": "Flour"}, {"name": "Egg", "amount": "1"}])
    merged = merge_recipes([candidate, candidate, candidate])
    assert {ingredient_key(i.name) for i in merged.ingredients} == {"flour", "egg"}
    assert len(merged.ingredients) == 2
    assert merged.ingredients[1].amount == "1"


def test_instructions_concatenate_in_candidate_order(make_recipe):
    a = make_recipe(instructions=steps("Mix", "Rest"))
    b = make_recipe(instructions=steps("Mix", "Bake"))
    c = make_recipe(instructions=[])
    merged = merge_recipes([a, b, c])
    assert merged.instructions == a.instructions + b.instructions
    assert len(merged.instructions) == 4


def test_time_estimation_is_summed_including_zero(make_recipe):
    merged = merge_recipes([
        make_recipe(time_estimation=10),
        make_recipe(time_estimation=0),
        make_recipe(time_estimation=20),
    ])
    assert merged.time_estimation == 30


@pytest.mark.parametrize(
    "first, second, expected",
    [(None, 4, 4), (4, 6, 6), (6, 4, 6), (4, None, 4), (None, None, None)],
)
def test_servings_takes_maximum(make_recipe, first, second, expected):
    merged = merge_recipes([make_recipe(servings=first), make_recipe(servings=second)])
    assert merged.servings == expected


@pytest.mark.parametrize(
    "first, second, expected",
    [(80, 60, 70), (None, 90, 90), (90, None, 90), (None, None, None), (71, 80, 76)],
)
def test_health_score_pairwise_average(make_recipe, first, second, expected):
    merged = merge_recipes([make_recipe(health_score=first), make_recipe(health_score=second)])
    assert merged.health_score == expected


def test_health_score_folds_left_to_right(make_recipe):
    # ((100 + 0) / 2 + 80) / 2 = 65; the global mean would be 60
    merged = merge_recipes([
        make_recipe(health_score=100),
        make_recipe(health_score=0),
        make_recipe(health_score=80),
    ])
    assert merged.health_score == 65


def test_description_appends_with_period(make_recipe):
    merged = merge_recipes([
        make_recipe(description="Fluffy"),
        make_recipe(description="Fluffy"),
        make_recipe(description="Serve warm"),
        make_recipe(description=None),
    ])
    assert merged.description == "Fluffy. Serve warm"


def test_description_seeded_when_base_missing(make_recipe):
    merged = merge_recipes([make_recipe(), make_recipe(description="Crispy")])
    assert merged.description == "Crispy"


def test_cuisine_and_main_ingredient_append_with_comma(make_recipe):
    merged = merge_recipes([
        make_recipe(cuisine_type="Italian", main_ingredient=None),
        make_recipe(cuisine_type="Italian", main_ingredient="Beef"),
        make_recipe(cuisine_type="French", main_ingredient="Pork"),
    ])
    assert merged.cuisine_type == "Italian, French"
    assert merged.main_ingredient == "Beef, Pork"


def test_name_always_from_first_candidate(make_recipe):
    merged = merge_recipes([make_recipe(name="Pancakes"), make_recipe(name="Waffles")])
    assert merged.name == "Pancakes"


def test_merge_does_not_mutate_inputs(make_recipe):
    a = make_recipe(ingredients=[{"name": "salt", "amount": "1 tsp"}], servings=2)
    b = make_recipe(ingredients=[{"name": "salt", "amount": "2 tsp"}], servings=4)
    merge_recipes([a, b])
    assert a.ingredients[0].amount == "1 tsp"
    assert a.servings == 2


def test_pancakes_and_waffles_scenario():
    a = Recipe.model_validate({
        "name": "Pancakes",
        "time_estimation": 10,
        "servings": 2,
        "ingredients": [{"name": "Flour", "amount": "1 cup"}],
        "instructions": [{"instruction": "Mix dry ingredients"}],
    })
    b = Recipe.model_validate({
        "name": "Waffles",
        "time_estimation": 15,
        "servings": 4,
        "health_score": 70,
        "ingredients": [{"name": "flour", "amount": "1.5 cups"}, {"name": "Egg", "amount": "1"}],
        "instructions": [{"instruction": "Cook in waffle iron"}],
    })

    merged = merge_recipes([a, b])

    assert merged.model_dump() == {
        "name": "Pancakes",
        "description": None,
        "cuisine_type": None,
        "main_ingredient": None,
        "time_estimation": 25,
        "servings": 4,
        "health_score": 70,
        "ingredients": [
            {"name": "Flour", "amount": "1 cup, 1.5 cups"},
            {"name": "Egg", "amount": "1"},
        ],
        "instructions": [
            {"instruction": "Mix dry ingredients"},
            {"instruction": "Cook in waffle iron"},
        ],
    }

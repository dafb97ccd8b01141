"""Tests for cross-recipe ingredient aggregation."""

from __future__ import annotations

from larder.models.recipe import Ingredient, IngredientWithSource, MeasurementUnit, Recipe
from larder.models.shopping import ItemSource, ShoppingListCategory
from larder.shopping.aggregator import (
    aggregate_ingredients,
    cluster_compatible,
    extract_ingredients,
    group_by_normalized_name,
    shopping_inputs_from_recipes,
)


def _entry(name, quantity, unit, recipe_id):
    return IngredientWithSource(
        ingredient=Ingredient(name=name, quantity=quantity, unit=unit),
        recipe_id=recipe_id,
    )


def test_same_ingredient_merges_across_recipes():
    result = aggregate_ingredients(
        [
            _entry("Fresh Tomatoes", 2, MeasurementUnit.UNIT, "r1"),
            _entry("tomatoes", 3, None, "r2"),
        ]
    )

    assert len(result) == 1
    tomato = result[0]
    assert tomato.normalized_name == "tomato"
    assert tomato.quantity == 5
    assert tomato.unit is MeasurementUnit.UNIT
    assert tomato.original_names == ["Fresh Tomatoes", "tomatoes"]
    assert tomato.recipe_ids == ["r1", "r2"]
    assert tomato.category is ShoppingListCategory.PRODUCE


def test_volume_amounts_are_summed_in_display_unit():
    result = aggregate_ingredients(
        [
            _entry("milk", 1, MeasurementUnit.CUP, "r1"),
            _entry("Milk", 8, MeasurementUnit.TBSP, "r2"),
        ]
    )

    assert [(row.quantity, row.unit) for row in result] == [(1.5, MeasurementUnit.CUP)]
    assert result[0].category is ShoppingListCategory.DAIRY


def test_incompatible_units_split_without_losing_recipes():
    result = aggregate_ingredients(
        [
            _entry("butter", 1, MeasurementUnit.CUP, "r1"),
            _entry("butter", 4, MeasurementUnit.OZ, "r2"),
            _entry("butter", 2, MeasurementUnit.TBSP, "r3"),
        ]
    )

    assert [(row.quantity, row.unit) for row in result] == [
        (1.13, MeasurementUnit.CUP),
        (4, MeasurementUnit.OZ),
    ]
    assert result[0].recipe_ids == ["r1", "r3"]
    assert result[1].recipe_ids == ["r2"]
    assert {rid for row in result for rid in row.recipe_ids} == {"r1", "r2", "r3"}
    assert {row.category for row in result} == {ShoppingListCategory.DAIRY}


def test_quantityless_group_emits_single_row():
    result = aggregate_ingredients(
        [
            _entry("salt", None, None, "r1"),
            _entry("Salt", 0, MeasurementUnit.TSP, "r2"),
        ]
    )

    assert len(result) == 1
    assert result[0].quantity is None
    assert result[0].unit is None
    assert result[0].recipe_ids == ["r1", "r2"]
    assert result[0].original_names == ["salt", "Salt"]


def test_quantityless_entry_rides_along_with_measured_row():
    result = aggregate_ingredients(
        [
            _entry("olive oil", 2, MeasurementUnit.TBSP, "r1"),
            _entry("olive oil", None, None, "r2"),
        ]
    )

    assert len(result) == 1
    assert result[0].quantity == 2
    assert result[0].recipe_ids == ["r1", "r2"]


def test_groups_keep_first_seen_order():
    entries = [
        _entry("onion", 1, None, "r1"),
        _entry("garlic", 2, MeasurementUnit.CLOVE, "r1"),
        _entry("Onions", 1, None, "r2"),
    ]

    assert list(group_by_normalized_name(entries)) == ["onion", "garlic"]
    assert [row.normalized_name for row in aggregate_ingredients(entries)] == ["onion", "garlic"]


def test_cluster_compatible_partitions_by_family():
    entries = [
        _entry("flour", 1, MeasurementUnit.CUP, "r1"),
        _entry("flour", 100, MeasurementUnit.GRAM, "r2"),
        _entry("flour", 2, MeasurementUnit.TBSP, "r3"),
    ]

    clusters = cluster_compatible(entries)
    assert [[entry.recipe_id for entry in cluster] for cluster in clusters] == [["r1", "r3"], ["r2"]]


def test_empty_input():
    assert aggregate_ingredients([]) == []
    assert shopping_inputs_from_recipes([]) == []


def test_extract_ingredients_tags_recipe_id():
    recipe = Recipe(
        id="soup",
        ingredients=[Ingredient(name="carrot", quantity=2), Ingredient(name="celery")],
    )

    entries = extract_ingredients(recipe)
    assert [entry.recipe_id for entry in entries] == ["soup", "soup"]
    assert [entry.ingredient.name for entry in entries] == ["carrot", "celery"]


def test_shopping_inputs_from_recipes_builds_recipe_rows():
    recipes = [
        Recipe(id="r1", ingredients=[Ingredient(name="Fresh Tomatoes", quantity=2)]),
        Recipe(id="r2", ingredients=[Ingredient(name="tomato", quantity=1)]),
    ]

    [payload] = shopping_inputs_from_recipes(recipes)
    assert payload.name == "tomato"
    assert payload.quantity == 3
    assert payload.source is ItemSource.RECIPE
    assert payload.original_name == "Fresh Tomatoes"
    assert payload.recipe_id == "r1"
    assert payload.category is ShoppingListCategory.PRODUCE
    assert payload.checked is False

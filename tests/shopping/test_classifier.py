"""Tests for keyword-based category classification."""

from __future__ import annotations

import pytest

from larder.models.shopping import CATEGORY_ORDER, ShoppingListCategory
from larder.shopping.classifier import (
    all_categories,
    classify_ingredient,
    is_valid_category,
    keywords_for,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("tomato", ShoppingListCategory.PRODUCE),
        ("Fresh Basil", ShoppingListCategory.PRODUCE),
        ("bell pepper", ShoppingListCategory.PRODUCE),
        ("eggplant", ShoppingListCategory.PRODUCE),
        ("whole milk", ShoppingListCategory.DAIRY),
        ("cheddar cheese", ShoppingListCategory.DAIRY),
        ("eggs", ShoppingListCategory.DAIRY),
        ("chicken breast", ShoppingListCategory.MEAT_SEAFOOD),
        ("salmon fillet", ShoppingListCategory.MEAT_SEAFOOD),
        ("pepperoni", ShoppingListCategory.MEAT_SEAFOOD),
        ("all-purpose flour", ShoppingListCategory.PANTRY),
        ("chicken broth", ShoppingListCategory.PANTRY),
        ("olive oil", ShoppingListCategory.PANTRY),
        ("black pepper", ShoppingListCategory.PANTRY),
        ("garlic powder", ShoppingListCategory.PANTRY),
        ("frozen peas", ShoppingListCategory.FROZEN),
        ("frozen vegetable", ShoppingListCategory.FROZEN),
        ("vanilla ice cream", ShoppingListCategory.FROZEN),
        ("sourdough bread", ShoppingListCategory.BAKERY),
        ("bagel", ShoppingListCategory.BAKERY),
        ("paper towels", ShoppingListCategory.OTHER),
        ("batteries", ShoppingListCategory.OTHER),
    ],
)
def test_classify_ingredient(name, expected):
    assert classify_ingredient(name) is expected


@pytest.mark.parametrize("name", ["", "   ", "\t\n"])
def test_blank_names_are_other(name):
    assert classify_ingredient(name) is ShoppingListCategory.OTHER


def test_classification_ignores_case_and_spacing():
    assert classify_ingredient("  WHOLE    MILK ") is ShoppingListCategory.DAIRY


def test_all_categories_in_display_order():
    categories = all_categories()
    assert categories == list(CATEGORY_ORDER)
    assert len(categories) == 7
    assert categories[-1] is ShoppingListCategory.OTHER


def test_is_valid_category_is_strict():
    assert is_valid_category("Produce")
    assert is_valid_category("Meat & Seafood")
    assert is_valid_category(ShoppingListCategory.DAIRY)
    assert not is_valid_category("produce")
    assert not is_valid_category("Snacks")
    assert not is_valid_category(None)


def test_keywords_for_returns_copy():
    produce = keywords_for(ShoppingListCategory.PRODUCE)
    assert "tomato" in produce

    produce.append("not-a-vegetable")
    assert "not-a-vegetable" not in keywords_for(ShoppingListCategory.PRODUCE)


def test_keywords_for_other_and_unknown_is_empty():
    assert keywords_for(ShoppingListCategory.OTHER) == []
    assert keywords_for("Nope") == []

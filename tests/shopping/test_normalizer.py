"""Tests for ingredient name normalization."""

from __future__ import annotations

import pytest

from larder.shopping.normalizer import (
    are_ingredients_similar,
    normalization_key,
    normalize_ingredient_name,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Fresh Tomatoes", "tomato"),
        ("  Diced   Onions ", "onion"),
        ("Chicken Breasts", "chicken breast"),
        ("Unsalted Butter", "butter"),
        ("Large Eggs", "egg"),
        ("Garlic (minced)", "garlic"),
        ("Extra Virgin Olive Oil", "extra virgin olive oil"),
        ("Black Pepper", "black pepper"),
        ("red onions", "red onion"),
        ("strawberries", "strawberry"),
        ("", ""),
        ("   ", ""),
    ],
)
def test_normalize_ingredient_name(raw, expected):
    assert normalize_ingredient_name(raw) == expected


def test_normalize_is_idempotent():
    once = normalize_ingredient_name("Freshly Grated Parmesan Cheese")
    assert normalize_ingredient_name(once) == once


def test_keep_compound_descriptor_survives():
    # "powder" alone would be noise, but "baking powder" is its own ingredient.
    assert normalize_ingredient_name("Baking Powder") == "baking powder"
    assert normalize_ingredient_name("Brown Sugar") == "brown sugar"


def test_normalization_key_matches_normalized_name():
    assert normalization_key("Fresh Tomatoes") == normalize_ingredient_name("Fresh Tomatoes")


def test_are_ingredients_similar():
    assert are_ingredients_similar("Fresh Tomatoes", "tomato")
    assert are_ingredients_similar("Large Eggs", "eggs")
    assert not are_ingredients_similar("milk", "butter")

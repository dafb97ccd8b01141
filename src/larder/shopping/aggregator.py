"""Merge same-ingredient entries across recipes into shopping quantities."""

from __future__ import annotations

import logging
from typing import Iterable, List

from larder.models.recipe import IngredientWithSource, Recipe
from larder.models.shopping import (
    AggregatedIngredient,
    ItemSource,
    ShoppingListItemCreate,
)
from larder.shopping.classifier import classify_ingredient
from larder.shopping.normalizer import normalization_key
from larder.shopping.units import aggregate_quantities, are_units_compatible

logger = logging.getLogger(__name__)


def _distinct(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _has_quantity(entry: IngredientWithSource) -> bool:
    quantity = entry.ingredient.quantity
    return quantity is not None and quantity > 0


def group_by_normalized_name(
    entries: Iterable[IngredientWithSource],
) -> dict[str, list[IngredientWithSource]]:
    """Bucket entries by normalized name, preserving first-seen order."""

    groups: dict[str, list[IngredientWithSource]] = {}
    for entry in entries:
        groups.setdefault(normalization_key(entry.ingredient.name), []).append(entry)
    return groups


def cluster_compatible(entries: List[IngredientWithSource]) -> list[list[IngredientWithSource]]:
    """Partition entries into unit-family clusters, ordered by first appearance."""

    clusters: list[list[IngredientWithSource]] = []
    for entry in entries:
        for cluster in clusters:
            if are_units_compatible(cluster[0].ingredient.unit, entry.ingredient.unit):
                cluster.append(entry)
                break
        else:
            clusters.append([entry])
    return clusters


def _aggregate_group(normalized_name: str, entries: List[IngredientWithSource]) -> list[AggregatedIngredient]:
    category = classify_ingredient(normalized_name)
    with_quantity = [entry for entry in entries if _has_quantity(entry)]

    if not with_quantity:
        return [
            AggregatedIngredient(
                normalized_name=normalized_name,
                original_names=_distinct(entry.ingredient.name for entry in entries),
                quantity=None,
                unit=entries[0].ingredient.unit,
                recipe_ids=_distinct(entry.recipe_id for entry in entries),
                category=category,
            )
        ]

    results: list[AggregatedIngredient] = []
    for cluster in cluster_compatible(with_quantity):
        merged = aggregate_quantities(entry.ingredient for entry in cluster)
        if merged is not None:
            results.append(
                AggregatedIngredient(
                    normalized_name=normalized_name,
                    original_names=_distinct(entry.ingredient.name for entry in cluster),
                    quantity=merged.quantity,
                    unit=merged.unit,
                    recipe_ids=_distinct(entry.recipe_id for entry in cluster),
                    category=category,
                )
            )
            continue

        logger.warning(
            "Could not merge %d entries for %r; keeping them as separate rows",
            len(cluster),
            normalized_name,
        )
        for entry in cluster:
            results.append(
                AggregatedIngredient(
                    normalized_name=normalized_name,
                    original_names=[entry.ingredient.name],
                    quantity=entry.ingredient.quantity,
                    unit=entry.ingredient.unit,
                    recipe_ids=[entry.recipe_id],
                    category=category,
                )
            )

    _attach_quantityless_recipes(results, entries, with_quantity)
    return results


def _attach_quantityless_recipes(
    results: list[AggregatedIngredient],
    entries: List[IngredientWithSource],
    with_quantity: List[IngredientWithSource],
) -> None:
    # A "to taste" line from another recipe still needs that recipe recorded
    # on some row of the group; it rides along with the first row.
    counted = {id(entry) for entry in with_quantity}
    leftovers = [entry for entry in entries if id(entry) not in counted]
    if not leftovers or not results:
        return
    head = results[0]
    head.original_names = _distinct([*head.original_names, *(e.ingredient.name for e in leftovers)])
    head.recipe_ids = _distinct([*head.recipe_ids, *(e.recipe_id for e in leftovers)])


def aggregate_ingredients(entries: Iterable[IngredientWithSource]) -> list[AggregatedIngredient]:
    """Group by normalized name, merge unit-compatible amounts, keep provenance."""

    results: list[AggregatedIngredient] = []
    for normalized_name, group in group_by_normalized_name(entries).items():
        results.extend(_aggregate_group(normalized_name, group))
    logger.debug("Aggregated ingredient entries into %d rows", len(results))
    return results


def extract_ingredients(recipe: Recipe) -> list[IngredientWithSource]:
    return [IngredientWithSource(ingredient=ingredient, recipe_id=recipe.id) for ingredient in recipe.ingredients]


def shopping_inputs_from_recipes(recipes: Iterable[Recipe]) -> list[ShoppingListItemCreate]:
    """Aggregate every recipe's ingredients into recipe-sourced creation records."""

    entries = [entry for recipe in recipes for entry in extract_ingredients(recipe)]
    return [
        ShoppingListItemCreate(
            name=aggregated.normalized_name,
            quantity=aggregated.quantity,
            unit=aggregated.unit,
            category=aggregated.category,
            source=ItemSource.RECIPE,
            original_name=aggregated.original_names[0] if aggregated.original_names else None,
            recipe_id=aggregated.recipe_ids[0] if aggregated.recipe_ids else None,
        )
        for aggregated in aggregate_ingredients(entries)
    ]


__all__ = [
    "group_by_normalized_name",
    "cluster_compatible",
    "aggregate_ingredients",
    "extract_ingredients",
    "shopping_inputs_from_recipes",
]

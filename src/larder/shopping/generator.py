"""Shopping list generation from queued recipes and manual input."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from larder import metrics
from larder.models.recipe import Ingredient, Recipe
from larder.models.shopping import (
    ItemSource,
    ManualItemInput,
    ShoppingListItem,
    ShoppingListItemCreate,
    ShoppingListItemUpdate,
)
from larder.shopping.aggregator import shopping_inputs_from_recipes
from larder.shopping.classifier import classify_ingredient
from larder.shopping.errors import ShoppingListValidationError
from larder.shopping.normalizer import normalization_key
from larder.shopping.ports import ShoppingListStore
from larder.shopping.units import Measure, aggregate_quantities, are_units_compatible

logger = logging.getLogger(__name__)

MAX_ITEM_NAME_LENGTH = 100
MAX_ITEM_QUANTITY = 1000


def validate_manual_item(payload: ManualItemInput) -> str:
    """Return the trimmed item name or raise :class:`ShoppingListValidationError`.

    The trimmed name is only used for checks and classification; callers
    persist ``payload.name`` as typed.
    """

    name = (payload.name or "").strip()
    if not name:
        raise ShoppingListValidationError("Item name is required")
    if len(name) > MAX_ITEM_NAME_LENGTH:
        raise ShoppingListValidationError(
            f"Item name must be {MAX_ITEM_NAME_LENGTH} characters or less"
        )
    if payload.quantity is not None and not 0 < payload.quantity <= MAX_ITEM_QUANTITY:
        raise ShoppingListValidationError(
            f"Quantity must be greater than 0 and at most {MAX_ITEM_QUANTITY}"
        )
    return name


class ShoppingListGenerator:
    """Stateless orchestration of the shopping pipeline over a store.

    Every store failure propagates to the caller unchanged.
    """

    def __init__(self, store: ShoppingListStore) -> None:
        self._store = store

    async def generate_from_queue(self, recipes: Sequence[Recipe]) -> list[ShoppingListItem]:
        """Create aggregated recipe rows for ``recipes`` in one bulk call."""

        if not recipes:
            return []

        payloads = shopping_inputs_from_recipes(recipes)
        if not payloads:
            return []

        items = await self._store.create_bulk(payloads)
        metrics.ITEMS_GENERATED.labels(source=ItemSource.RECIPE.value).inc(len(items))
        logger.info("Generated %d shopping list rows from %d recipes", len(items), len(recipes))
        return items

    async def regenerate_list(self, recipes: Sequence[Recipe]) -> list[ShoppingListItem]:
        """Rebuild the recipe-sourced rows; manual rows are never touched."""

        await self._store.delete_by_source(ItemSource.RECIPE)
        await self.generate_from_queue(recipes)
        return await self._store.get_all()

    async def add_manual_item(self, payload: ManualItemInput) -> ShoppingListItem:
        name = validate_manual_item(payload)
        category = payload.category or classify_ingredient(name)

        item = await self._store.create_item(
            ShoppingListItemCreate(
                name=payload.name,
                quantity=payload.quantity,
                unit=payload.unit,
                category=category,
                source=ItemSource.MANUAL,
                original_name=payload.name,
            )
        )
        metrics.ITEMS_GENERATED.labels(source=ItemSource.MANUAL.value).inc()
        logger.debug(
            "Added manual item %s to %s",
            item.id,
            category.value,
            extra={"operation": "add_manual_item"},
        )
        return item

    async def add_recipe_to_shopping_list(self, recipe: Recipe) -> list[ShoppingListItem]:
        """Merge one recipe into the current list.

        Rows that already hold a compatible amount of the same ingredient are
        updated in place; everything else becomes a new recipe row. Only the
        new rows are returned.
        """

        if not recipe.ingredients:
            return []

        existing = await self._store.get_all()
        existing_keys = [(normalization_key(item.name), item) for item in existing]
        pending_updates: dict[str, Measure] = {}
        to_create: list[ShoppingListItemCreate] = []

        for ingredient in recipe.ingredients:
            key = normalization_key(ingredient.name)
            match = next((item for item_key, item in existing_keys if item_key == key), None)

            merged = self._merge_into(match, ingredient, pending_updates) if match else None
            if merged is not None:
                pending_updates[match.id] = merged  # type: ignore[union-attr]
                continue

            to_create.append(
                ShoppingListItemCreate(
                    name=key,
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                    category=classify_ingredient(key),
                    source=ItemSource.RECIPE,
                    original_name=ingredient.name,
                    recipe_id=recipe.id,
                )
            )

        for item_id, measure in pending_updates.items():
            await self._store.update_item(
                ShoppingListItemUpdate(id=item_id, quantity=measure.quantity, unit=measure.unit)
            )

        created: list[ShoppingListItem] = []
        if to_create:
            created = await self._store.create_bulk(to_create)
            metrics.ITEMS_GENERATED.labels(source=ItemSource.RECIPE.value).inc(len(created))
        logger.info(
            "Added recipe %s: %d new rows, %d merged",
            recipe.id,
            len(created),
            len(pending_updates),
            extra={"operation": "add_recipe", "recipe_id": recipe.id},
        )
        return created

    @staticmethod
    def _merge_into(
        item: ShoppingListItem,
        ingredient: Ingredient,
        pending_updates: dict[str, Measure],
    ) -> Optional[Measure]:
        current = pending_updates.get(item.id, Measure(item.quantity, item.unit))
        if current.quantity is None or ingredient.quantity is None:
            return None
        if not are_units_compatible(current.unit, ingredient.unit):
            return None
        total = aggregate_quantities([current, ingredient])
        if total is None:
            return None
        return Measure(total.quantity, total.unit)

    async def remove_recipe_ingredients(self, recipe_id: str) -> None:
        await self._store.delete_by_recipe_id(recipe_id)

    async def is_recipe_in_list(self, recipe_id: str) -> bool:
        return bool(await self._store.get_by_recipe_id(recipe_id))

    async def clear_recipe_items(self) -> None:
        await self._store.delete_by_source(ItemSource.RECIPE)

    async def clear_all_items(self) -> None:
        await self._store.clear_all()


__all__ = [
    "MAX_ITEM_NAME_LENGTH",
    "MAX_ITEM_QUANTITY",
    "ShoppingListGenerator",
    "validate_manual_item",
]

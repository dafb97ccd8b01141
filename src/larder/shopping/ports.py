"""Interfaces the shopping pipeline consumes.

Implementations are expected to scope every call to the current user; the
pipeline itself never passes user identifiers.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from larder.models.recipe import MealPlanEntry, Recipe
from larder.models.shopping import (
    GroupedShoppingListItems,
    ItemSource,
    ShoppingListItem,
    ShoppingListItemCreate,
    ShoppingListItemUpdate,
)


class ShoppingListStore(Protocol):
    async def create_item(self, payload: ShoppingListItemCreate) -> ShoppingListItem: ...

    async def create_bulk(self, payloads: Sequence[ShoppingListItemCreate]) -> list[ShoppingListItem]: ...

    async def get_all(self) -> list[ShoppingListItem]: ...

    async def get_all_by_category(self) -> GroupedShoppingListItems: ...

    async def get_by_recipe_id(self, recipe_id: str) -> list[ShoppingListItem]: ...

    async def update_checked_state(self, item_id: str, checked: bool) -> ShoppingListItem: ...

    async def update_item(self, update: ShoppingListItemUpdate) -> ShoppingListItem: ...

    async def delete_item(self, item_id: str) -> None: ...

    async def delete_by_source(self, source: ItemSource) -> None: ...

    async def delete_by_recipe_id(self, recipe_id: str) -> None: ...

    async def clear_all(self) -> None: ...


class RecipeSource(Protocol):
    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]: ...


class MealPlanQueue(Protocol):
    async def queued_recipe_ids(self, start: date, end: date) -> list[str]:
        """Distinct recipe ids planned between ``start`` and ``end`` inclusive."""
        ...

    async def schedule_recipe(self, recipe_id: str, planned_for: date) -> MealPlanEntry: ...

    async def unschedule_recipe(self, recipe_id: str) -> int:
        """Drop every plan of ``recipe_id``; returns how many were removed."""
        ...


__all__ = ["ShoppingListStore", "RecipeSource", "MealPlanQueue"]

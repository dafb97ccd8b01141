"""Shared pytest fixtures for the Larder test suite."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Sequence

import pytest

from larder.config import get_settings
from larder.db.repository import reset_repository_state
from larder.models.recipe import MealPlanEntry, Recipe
from larder.models.shopping import (
    CATEGORY_ORDER,
    GroupedShoppingListItems,
    ItemSource,
    ShoppingListItem,
    ShoppingListItemCreate,
    ShoppingListItemUpdate,
    group_by_category,
)
from larder.shopping.coordinator import ShoppingListCoordinator
from larder.shopping.generator import ShoppingListGenerator

TODAY = date(2024, 3, 4)


class StoreUnavailable(RuntimeError):
    """Raised by the in-memory store for operations listed in ``fail_on``."""


class InMemoryShoppingListStore:
    """Dictionary-backed store that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.items: dict[str, ShoppingListItem] = {}
        self.calls: list[str] = []
        self.fail_on: set[str] = set()
        self._next_id = 0
        self._clock = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise StoreUnavailable(f"{operation} unavailable")

    def _build(self, payload: ShoppingListItemCreate) -> ShoppingListItem:
        self._next_id += 1
        created_at = self._clock + timedelta(seconds=self._next_id)
        return ShoppingListItem(
            id=f"item-{self._next_id}",
            created_at=created_at,
            **payload.model_dump(),
        )

    def _require(self, item_id: str) -> ShoppingListItem:
        if item_id not in self.items:
            raise ValueError(f"Shopping list item {item_id} not found")
        return self.items[item_id]

    async def create_item(self, payload: ShoppingListItemCreate) -> ShoppingListItem:
        self._enter("create_item")
        item = self._build(payload)
        self.items[item.id] = item
        return item

    async def create_bulk(self, payloads: Sequence[ShoppingListItemCreate]) -> list[ShoppingListItem]:
        self._enter("create_bulk")
        created = [self._build(payload) for payload in payloads]
        for item in created:
            self.items[item.id] = item
        return created

    async def get_all(self) -> list[ShoppingListItem]:
        self._enter("get_all")
        return sorted(
            self.items.values(),
            key=lambda item: (CATEGORY_ORDER.index(item.category), item.name.lower()),
        )

    async def get_all_by_category(self) -> GroupedShoppingListItems:
        self._enter("get_all_by_category")
        return group_by_category(self.items.values())

    async def get_by_recipe_id(self, recipe_id: str) -> list[ShoppingListItem]:
        self._enter("get_by_recipe_id")
        return [item for item in self.items.values() if item.recipe_id == recipe_id]

    async def update_checked_state(self, item_id: str, checked: bool) -> ShoppingListItem:
        self._enter("update_checked_state")
        item = self._require(item_id).model_copy(update={"checked": checked})
        self.items[item_id] = item
        return item

    async def update_item(self, update: ShoppingListItemUpdate) -> ShoppingListItem:
        self._enter("update_item")
        item = self._require(update.id).model_copy(update=update.changes())
        self.items[update.id] = item
        return item

    async def delete_item(self, item_id: str) -> None:
        self._enter("delete_item")
        self._require(item_id)
        del self.items[item_id]

    async def delete_by_source(self, source: ItemSource) -> None:
        self._enter("delete_by_source")
        self.items = {key: item for key, item in self.items.items() if item.source is not source}

    async def delete_by_recipe_id(self, recipe_id: str) -> None:
        self._enter("delete_by_recipe_id")
        self.items = {key: item for key, item in self.items.items() if item.recipe_id != recipe_id}

    async def clear_all(self) -> None:
        self._enter("clear_all")
        self.items = {}


class InMemoryRecipeSource:
    def __init__(self) -> None:
        self.recipes: dict[str, Recipe] = {}

    def add(self, recipe: Recipe) -> Recipe:
        self.recipes[recipe.id] = recipe
        return recipe

    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return self.recipes.get(recipe_id)


class InMemoryMealPlanQueue:
    def __init__(self) -> None:
        self.entries: list[tuple[str, date]] = []
        self.requested: list[tuple[date, date]] = []
        self.fail = False

    def plan(self, recipe_id: str, planned_for: date = TODAY) -> None:
        self.entries.append((recipe_id, planned_for))

    async def queued_recipe_ids(self, start: date, end: date) -> list[str]:
        self.requested.append((start, end))
        if self.fail:
            raise StoreUnavailable("meal plan queue unavailable")
        ordered = sorted(self.entries, key=lambda entry: entry[1])
        return list(dict.fromkeys(recipe_id for recipe_id, day in ordered if start <= day <= end))

    async def schedule_recipe(self, recipe_id: str, planned_for: date) -> MealPlanEntry:
        if self.fail:
            raise StoreUnavailable("meal plan queue unavailable")
        self.plan(recipe_id, planned_for)
        return MealPlanEntry(id=len(self.entries), recipe_id=recipe_id, planned_for=planned_for)

    async def unschedule_recipe(self, recipe_id: str) -> int:
        if self.fail:
            raise StoreUnavailable("meal plan queue unavailable")
        kept = [entry for entry in self.entries if entry[0] != recipe_id]
        removed = len(self.entries) - len(kept)
        self.entries = kept
        return removed


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_larder.db"
    monkeypatch.setenv("LARDER_DATABASE_PATH", str(db_path))
    monkeypatch.setenv("LARDER_USER_ID", "tester")
    get_settings.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("LARDER_DATABASE_PATH", raising=False)
    monkeypatch.delenv("LARDER_USER_ID", raising=False)
    get_settings.cache_clear()


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def store() -> InMemoryShoppingListStore:
    return InMemoryShoppingListStore()


@pytest.fixture()
def recipe_source() -> InMemoryRecipeSource:
    return InMemoryRecipeSource()


@pytest.fixture()
def meal_queue() -> InMemoryMealPlanQueue:
    return InMemoryMealPlanQueue()


@pytest.fixture()
def generator(store) -> ShoppingListGenerator:
    return ShoppingListGenerator(store)


@pytest.fixture()
def coordinator(generator, store, recipe_source, meal_queue) -> ShoppingListCoordinator:
    """Coordinator over the in-memory fakes with a short debounce and fixed clock."""

    instance = ShoppingListCoordinator(
        generator,
        store,
        recipe_source,
        meal_queue,
        debounce_seconds=0.02,
        clock=lambda: TODAY,
    )
    yield instance
    instance.close()

"""Shopping list models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from larder.models.recipe import MeasurementUnit


class ShoppingListCategory(str, Enum):
    """Store aisle an item is shelved under."""

    PRODUCE = "Produce"
    DAIRY = "Dairy"
    MEAT_SEAFOOD = "Meat & Seafood"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    BAKERY = "Bakery"
    OTHER = "Other"


CATEGORY_ORDER: tuple[ShoppingListCategory, ...] = (
    ShoppingListCategory.PRODUCE,
    ShoppingListCategory.DAIRY,
    ShoppingListCategory.MEAT_SEAFOOD,
    ShoppingListCategory.PANTRY,
    ShoppingListCategory.FROZEN,
    ShoppingListCategory.BAKERY,
    ShoppingListCategory.OTHER,
)


class ItemSource(str, Enum):
    """Origin of a shopping list row."""

    RECIPE = "recipe"
    MANUAL = "manual"


class ShoppingListItem(BaseModel):
    """Single entry on the shopping list."""

    id: str
    name: str
    quantity: Optional[float] = Field(default=None)
    unit: Optional[MeasurementUnit] = Field(default=None)
    checked: bool = Field(default=False)
    recipe_id: Optional[str] = Field(default=None)
    meal_plan_id: Optional[str] = Field(default=None)
    category: ShoppingListCategory = Field(default=ShoppingListCategory.OTHER)
    source: ItemSource = Field(default=ItemSource.RECIPE)
    original_name: Optional[str] = Field(default=None)
    created_at: datetime

    model_config = ConfigDict(frozen=True)


class ShoppingListItemCreate(BaseModel):
    """Creation record handed to the shopping list store."""

    name: str
    quantity: Optional[float] = Field(default=None)
    unit: Optional[MeasurementUnit] = Field(default=None)
    checked: bool = Field(default=False)
    recipe_id: Optional[str] = Field(default=None)
    meal_plan_id: Optional[str] = Field(default=None)
    category: ShoppingListCategory
    source: ItemSource
    original_name: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class ShoppingListItemUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied."""

    id: str
    name: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[MeasurementUnit] = None
    checked: Optional[bool] = None
    category: Optional[ShoppingListCategory] = None

    model_config = ConfigDict(frozen=True)

    def changes(self) -> dict[str, object]:
        """Return the explicitly provided fields other than ``id``."""

        return {
            key: getattr(self, key)
            for key in self.model_fields_set
            if key != "id"
        }


class ManualItemInput(BaseModel):
    """User-authored item; validated by the generator before persistence."""

    name: str
    quantity: Optional[float] = Field(default=None)
    unit: Optional[MeasurementUnit] = Field(default=None)
    category: Optional[ShoppingListCategory] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class AggregatedIngredient(BaseModel):
    """Same-named ingredient entries merged across recipes.

    ``original_names`` and ``recipe_ids`` hold distinct values in first-seen order.
    """

    normalized_name: str
    original_names: list[str] = Field(default_factory=list)
    quantity: Optional[float] = Field(default=None)
    unit: Optional[MeasurementUnit] = Field(default=None)
    recipe_ids: list[str] = Field(default_factory=list)
    category: ShoppingListCategory = Field(default=ShoppingListCategory.OTHER)


GroupedShoppingListItems = dict[ShoppingListCategory, list[ShoppingListItem]]


def empty_groups() -> GroupedShoppingListItems:
    return {category: [] for category in CATEGORY_ORDER}


def group_by_category(items: Iterable[ShoppingListItem]) -> GroupedShoppingListItems:
    """Bucket items per category (all categories present, display order, sorted by name)."""

    grouped = empty_groups()
    for item in items:
        grouped[item.category].append(item)
    for bucket in grouped.values():
        bucket.sort(key=lambda entry: entry.name.lower())
    return grouped


def group_by_source(
    items: Iterable[ShoppingListItem],
) -> tuple[list[ShoppingListItem], list[ShoppingListItem]]:
    """Split items into (recipe items, manual items)."""

    recipe_items: list[ShoppingListItem] = []
    manual_items: list[ShoppingListItem] = []
    for item in items:
        if item.source is ItemSource.RECIPE:
            recipe_items.append(item)
        else:
            manual_items.append(item)
    return recipe_items, manual_items


def group_by_checked(
    items: Iterable[ShoppingListItem],
) -> tuple[list[ShoppingListItem], list[ShoppingListItem]]:
    """Split items into (checked, unchecked)."""

    checked: list[ShoppingListItem] = []
    unchecked: list[ShoppingListItem] = []
    for item in items:
        (checked if item.checked else unchecked).append(item)
    return checked, unchecked


def items_for_recipe(items: Iterable[ShoppingListItem], recipe_id: str) -> list[ShoppingListItem]:
    return [item for item in items if item.recipe_id == recipe_id]


def checked_count(items: Iterable[ShoppingListItem]) -> int:
    return sum(1 for item in items if item.checked)


def unchecked_count(items: Iterable[ShoppingListItem]) -> int:
    return sum(1 for item in items if not item.checked)


def are_all_checked(items: Iterable[ShoppingListItem]) -> bool:
    materialized = list(items)
    return bool(materialized) and all(item.checked for item in materialized)


__all__ = [
    "ShoppingListCategory",
    "CATEGORY_ORDER",
    "ItemSource",
    "ShoppingListItem",
    "ShoppingListItemCreate",
    "ShoppingListItemUpdate",
    "ManualItemInput",
    "AggregatedIngredient",
    "GroupedShoppingListItems",
    "empty_groups",
    "group_by_category",
    "group_by_source",
    "group_by_checked",
    "items_for_recipe",
    "checked_count",
    "unchecked_count",
    "are_all_checked",
]

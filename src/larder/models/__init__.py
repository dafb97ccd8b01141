"""Pydantic models defining shared data contracts."""

from larder.models.recipe import (
    Ingredient,
    IngredientWithSource,
    MealPlanEntry,
    MealType,
    MeasurementUnit,
    Recipe,
)
from larder.models.shopping import (
    CATEGORY_ORDER,
    AggregatedIngredient,
    GroupedShoppingListItems,
    ItemSource,
    ManualItemInput,
    ShoppingListCategory,
    ShoppingListItem,
    ShoppingListItemCreate,
    ShoppingListItemUpdate,
)

__all__ = [
    "Ingredient",
    "IngredientWithSource",
    "MealPlanEntry",
    "MealType",
    "MeasurementUnit",
    "Recipe",
    "CATEGORY_ORDER",
    "AggregatedIngredient",
    "GroupedShoppingListItems",
    "ItemSource",
    "ManualItemInput",
    "ShoppingListCategory",
    "ShoppingListItem",
    "ShoppingListItemCreate",
    "ShoppingListItemUpdate",
]

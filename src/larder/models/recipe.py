"""Recipe and meal-plan models feeding the shopping list."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MeasurementUnit(str, Enum):
    """Closed set of units an ingredient quantity may be expressed in."""

    TSP = "tsp"
    TBSP = "tbsp"
    CUP = "cup"
    FL_OZ = "fl oz"
    ML = "ml"
    LITER = "liter"
    OZ = "oz"
    LB = "lb"
    GRAM = "gram"
    KG = "kg"
    UNIT = "unit"
    PIECE = "piece"
    SLICE = "slice"
    CLOVE = "clove"
    HEAD = "head"
    BUNCH = "bunch"
    CAN = "can"
    BOTTLE = "bottle"
    PACKAGE = "package"
    BAG = "bag"
    BOX = "box"


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class Ingredient(BaseModel):
    """Ingredient line as authored on a recipe."""

    name: str
    quantity: Optional[float] = Field(default=None)
    unit: Optional[MeasurementUnit] = Field(default=None)

    model_config = ConfigDict(frozen=True)


class Recipe(BaseModel):
    """Recipe with its ordered ingredient list."""

    id: str
    title: str = Field(default="")
    ingredients: list[Ingredient] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class IngredientWithSource(BaseModel):
    """Ingredient tagged with the recipe that contributed it."""

    ingredient: Ingredient
    recipe_id: str

    model_config = ConfigDict(frozen=True)


class MealPlanEntry(BaseModel):
    """Recipe scheduled on a given day."""

    id: int
    recipe_id: str
    planned_for: date
    meal_type: MealType = Field(default=MealType.DINNER)

    model_config = ConfigDict(frozen=True)


__all__ = [
    "MeasurementUnit",
    "MealType",
    "Ingredient",
    "Recipe",
    "IngredientWithSource",
    "MealPlanEntry",
]

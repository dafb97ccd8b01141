"""Recipe and meal-plan persistence helpers."""
# mypy: ignore-errors

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import delete, select

from larder.models.recipe import MealPlanEntry, MealType, Recipe

from .models import MealPlanORM, RecipeIngredientORM, RecipeORM
from .repository import session_scope

logger = logging.getLogger(__name__)


def _to_model(row: RecipeORM) -> Recipe:
    return Recipe.model_validate(
        {
            "id": row.id,
            "title": row.title,
            "ingredients": [
                {"name": line.name, "quantity": line.quantity, "unit": line.unit}
                for line in row.ingredients
            ],
        }
    )


def _to_entry(row: MealPlanORM) -> MealPlanEntry:
    return MealPlanEntry.model_validate(
        {
            "id": row.id,
            "recipe_id": row.recipe_id,
            "planned_for": row.planned_for,
            "meal_type": row.meal_type,
        }
    )


def save_recipe(recipe: Recipe, *, user_id: str) -> Recipe:
    """Insert or replace a recipe and its ingredient lines."""

    with session_scope() as session:
        db_recipe = session.get(RecipeORM, recipe.id)
        if db_recipe is not None and db_recipe.user_id != user_id:
            raise ValueError(f"Recipe {recipe.id} belongs to another user")
        if db_recipe is None:
            db_recipe = RecipeORM(id=recipe.id, user_id=user_id)
            session.add(db_recipe)

        db_recipe.title = recipe.title
        db_recipe.ingredients = [
            RecipeIngredientORM(
                position=position,
                name=ingredient.name,
                quantity=ingredient.quantity,
                unit=ingredient.unit.value if ingredient.unit else None,
            )
            for position, ingredient in enumerate(recipe.ingredients)
        ]
        session.flush()
        return _to_model(db_recipe)


def get_recipe(recipe_id: str, *, user_id: str) -> Optional[Recipe]:
    with session_scope() as session:
        row = session.get(RecipeORM, recipe_id)
        if row is None or row.user_id != user_id:
            return None
        return _to_model(row)


def list_recipes(*, user_id: str) -> List[Recipe]:
    with session_scope() as session:
        rows = (
            session.execute(
                select(RecipeORM).where(RecipeORM.user_id == user_id).order_by(RecipeORM.title.asc())
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def schedule_recipe(
    recipe_id: str,
    planned_for: date,
    *,
    user_id: str,
    meal_type: MealType = MealType.DINNER,
) -> MealPlanEntry:
    """Queue ``recipe_id`` for ``planned_for``; the recipe must exist."""

    with session_scope() as session:
        recipe = session.get(RecipeORM, recipe_id)
        if recipe is None or recipe.user_id != user_id:
            raise ValueError(f"Recipe {recipe_id} not found")
        entry = MealPlanORM(
            user_id=user_id,
            recipe_id=recipe_id,
            planned_for=planned_for,
            meal_type=meal_type.value,
        )
        session.add(entry)
        session.flush()
        return _to_entry(entry)


def delete_meal_plans_by_recipe(recipe_id: str, *, user_id: str) -> int:
    with session_scope() as session:
        result = session.execute(
            delete(MealPlanORM).where(
                MealPlanORM.user_id == user_id,
                MealPlanORM.recipe_id == recipe_id,
            )
        )
        return result.rowcount or 0


def list_queued_recipe_ids(start: date, end: date, *, user_id: str) -> List[str]:
    """Distinct recipe ids planned within ``[start, end]``, earliest plan first."""

    with session_scope() as session:
        rows = session.execute(
            select(MealPlanORM.recipe_id)
            .where(
                MealPlanORM.user_id == user_id,
                MealPlanORM.planned_for >= start,
                MealPlanORM.planned_for <= end,
            )
            .order_by(MealPlanORM.planned_for.asc(), MealPlanORM.id.asc())
        ).scalars()
        return list(dict.fromkeys(rows))


class SqlRecipeSource:
    """Recipe source over the SQLite tables; session work runs in a worker thread."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return await asyncio.to_thread(get_recipe, recipe_id, user_id=self.user_id)


class SqlMealPlanQueue:
    """Meal-plan queue over the SQLite tables; session work runs in a worker thread."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    async def queued_recipe_ids(self, start: date, end: date) -> List[str]:
        return await asyncio.to_thread(list_queued_recipe_ids, start, end, user_id=self.user_id)

    async def schedule_recipe(self, recipe_id: str, planned_for: date) -> MealPlanEntry:
        return await asyncio.to_thread(schedule_recipe, recipe_id, planned_for, user_id=self.user_id)

    async def unschedule_recipe(self, recipe_id: str) -> int:
        removed = await asyncio.to_thread(delete_meal_plans_by_recipe, recipe_id, user_id=self.user_id)
        logger.debug(
            "Removed %d meal plans of recipe %s",
            removed,
            recipe_id,
            extra={"user_id": self.user_id, "operation": "unschedule_recipe", "recipe_id": recipe_id},
        )
        return removed


__all__ = [
    "save_recipe",
    "get_recipe",
    "list_recipes",
    "schedule_recipe",
    "delete_meal_plans_by_recipe",
    "list_queued_recipe_ids",
    "SqlRecipeSource",
    "SqlMealPlanQueue",
]

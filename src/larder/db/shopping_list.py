"""Shopping list persistence helpers."""
# mypy: ignore-errors

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import case, delete, func, select

from larder.models.shopping import (
    CATEGORY_ORDER,
    GroupedShoppingListItems,
    ItemSource,
    ShoppingListItem,
    ShoppingListItemCreate,
    ShoppingListItemUpdate,
    group_by_category,
)

from .models import ShoppingListItemORM
from .repository import session_scope

logger = logging.getLogger(__name__)

_UNSET = object()

_CATEGORY_RANK = case(
    {category.value: index for index, category in enumerate(CATEGORY_ORDER)},
    value=ShoppingListItemORM.category,
    else_=len(CATEGORY_ORDER),
)


def _to_model(row: ShoppingListItemORM) -> ShoppingListItem:
    return ShoppingListItem.model_validate(
        {
            "id": row.id,
            "name": row.name,
            "quantity": row.quantity,
            "unit": row.unit,
            "checked": row.checked,
            "recipe_id": row.recipe_id,
            "meal_plan_id": row.meal_plan_id,
            "category": row.category,
            "source": row.source,
            "original_name": row.original_name,
            "created_at": row.created_at,
        }
    )


def _to_row(payload: ShoppingListItemCreate, user_id: str) -> ShoppingListItemORM:
    return ShoppingListItemORM(
        id=str(uuid4()),
        user_id=user_id,
        name=payload.name,
        quantity=float(payload.quantity) if payload.quantity is not None else None,
        unit=payload.unit.value if payload.unit else None,
        checked=payload.checked,
        recipe_id=payload.recipe_id,
        meal_plan_id=payload.meal_plan_id,
        category=payload.category.value,
        source=payload.source.value,
        original_name=payload.original_name,
    )


def _get_owned(session, item_id: str, user_id: str) -> ShoppingListItemORM:
    db_item = session.get(ShoppingListItemORM, item_id)
    if db_item is None or db_item.user_id != user_id:
        raise ValueError(f"Shopping list item {item_id} not found")
    return db_item


def list_shopping_items(*, user_id: str, recipe_id: Optional[str] = None) -> List[ShoppingListItem]:
    """Return the user's items in category display order, then by name."""

    with session_scope() as session:
        statement = select(ShoppingListItemORM).where(ShoppingListItemORM.user_id == user_id)
        if recipe_id is not None:
            statement = statement.where(ShoppingListItemORM.recipe_id == recipe_id)
        rows = (
            session.execute(
                statement.order_by(
                    _CATEGORY_RANK,
                    func.lower(ShoppingListItemORM.name).asc(),
                    ShoppingListItemORM.created_at.asc(),
                )
            )
            .scalars()
            .all()
        )
        return [_to_model(row) for row in rows]


def create_shopping_item(payload: ShoppingListItemCreate, *, user_id: str) -> ShoppingListItem:
    with session_scope() as session:
        db_item = _to_row(payload, user_id)
        session.add(db_item)
        session.flush()
        return _to_model(db_item)


def create_shopping_items(
    payloads: Sequence[ShoppingListItemCreate], *, user_id: str
) -> List[ShoppingListItem]:
    """Insert every payload in one transaction; nothing is stored if any insert fails."""

    if not payloads:
        return []

    with session_scope() as session:
        rows = [_to_row(payload, user_id) for payload in payloads]
        session.add_all(rows)
        session.flush()
        return [_to_model(row) for row in rows]


def update_shopping_item(
    item_id: str,
    *,
    user_id: str,
    name: str | object = _UNSET,
    quantity: float | None | object = _UNSET,
    unit: str | None | object = _UNSET,
    checked: bool | object = _UNSET,
    category: str | object = _UNSET,
) -> ShoppingListItem:
    with session_scope() as session:
        db_item = _get_owned(session, item_id, user_id)

        if name is not _UNSET:
            db_item.name = str(name)
        if quantity is not _UNSET:
            db_item.quantity = float(quantity) if quantity is not None else None  # type: ignore[arg-type]
        if unit is not _UNSET:
            db_item.unit = getattr(unit, "value", unit) if unit else None  # type: ignore[assignment]
        if checked is not _UNSET:
            db_item.checked = bool(checked)
        if category is not _UNSET:
            db_item.category = getattr(category, "value", category)  # type: ignore[assignment]

        session.flush()
        return _to_model(db_item)


def delete_shopping_item(item_id: str, *, user_id: str) -> None:
    with session_scope() as session:
        db_item = _get_owned(session, item_id, user_id)
        session.delete(db_item)


def delete_items_by_source(source: ItemSource, *, user_id: str) -> int:
    with session_scope() as session:
        result = session.execute(
            delete(ShoppingListItemORM).where(
                ShoppingListItemORM.user_id == user_id,
                ShoppingListItemORM.source == source.value,
            )
        )
        return result.rowcount or 0


def delete_items_by_recipe(recipe_id: str, *, user_id: str) -> int:
    with session_scope() as session:
        result = session.execute(
            delete(ShoppingListItemORM).where(
                ShoppingListItemORM.user_id == user_id,
                ShoppingListItemORM.recipe_id == recipe_id,
            )
        )
        return result.rowcount or 0


def reset_shopping_list(*, user_id: str) -> None:
    """Remove all of the user's shopping list items."""

    with session_scope() as session:
        session.execute(delete(ShoppingListItemORM).where(ShoppingListItemORM.user_id == user_id))


def get_shopping_item(item_id: str, *, user_id: str) -> Optional[ShoppingListItem]:
    with session_scope() as session:
        row = session.get(ShoppingListItemORM, item_id)
        if row is None or row.user_id != user_id:
            return None
        return _to_model(row)


class SqlShoppingListStore:
    """Shopping list store backed by the SQLite tables, scoped to one user.

    Each call runs its blocking session work in a worker thread.
    """

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    async def create_item(self, payload: ShoppingListItemCreate) -> ShoppingListItem:
        return await asyncio.to_thread(create_shopping_item, payload, user_id=self.user_id)

    async def create_bulk(self, payloads: Sequence[ShoppingListItemCreate]) -> List[ShoppingListItem]:
        return await asyncio.to_thread(create_shopping_items, payloads, user_id=self.user_id)

    async def get_all(self) -> List[ShoppingListItem]:
        return await asyncio.to_thread(list_shopping_items, user_id=self.user_id)

    async def get_all_by_category(self) -> GroupedShoppingListItems:
        return group_by_category(await self.get_all())

    async def get_by_recipe_id(self, recipe_id: str) -> List[ShoppingListItem]:
        return await asyncio.to_thread(list_shopping_items, user_id=self.user_id, recipe_id=recipe_id)

    async def update_checked_state(self, item_id: str, checked: bool) -> ShoppingListItem:
        return await asyncio.to_thread(update_shopping_item, item_id, user_id=self.user_id, checked=checked)

    async def update_item(self, update: ShoppingListItemUpdate) -> ShoppingListItem:
        return await asyncio.to_thread(
            update_shopping_item, update.id, user_id=self.user_id, **update.changes()
        )

    async def delete_item(self, item_id: str) -> None:
        await asyncio.to_thread(delete_shopping_item, item_id, user_id=self.user_id)

    async def delete_by_source(self, source: ItemSource) -> None:
        removed = await asyncio.to_thread(delete_items_by_source, source, user_id=self.user_id)
        logger.debug(
            "Removed %d %s rows",
            removed,
            source.value,
            extra={"user_id": self.user_id, "operation": "delete_by_source"},
        )

    async def delete_by_recipe_id(self, recipe_id: str) -> None:
        removed = await asyncio.to_thread(delete_items_by_recipe, recipe_id, user_id=self.user_id)
        logger.debug(
            "Removed %d rows of recipe %s",
            removed,
            recipe_id,
            extra={"user_id": self.user_id, "operation": "delete_by_recipe_id", "recipe_id": recipe_id},
        )

    async def clear_all(self) -> None:
        await asyncio.to_thread(reset_shopping_list, user_id=self.user_id)


__all__ = [
    "list_shopping_items",
    "create_shopping_item",
    "create_shopping_items",
    "update_shopping_item",
    "delete_shopping_item",
    "delete_items_by_source",
    "delete_items_by_recipe",
    "reset_shopping_list",
    "get_shopping_item",
    "SqlShoppingListStore",
]

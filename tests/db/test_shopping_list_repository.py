"""Unit tests for the shopping list repository helpers."""

from __future__ import annotations

import asyncio
import threading

import pytest

from larder.db.models import ShoppingListItemORM
from larder.db import shopping_list
from larder.db.repository import session_scope
from larder.db.shopping_list import (
    SqlShoppingListStore,
    create_shopping_item,
    create_shopping_items,
    delete_items_by_recipe,
    delete_items_by_source,
    delete_shopping_item,
    get_shopping_item,
    list_shopping_items,
    reset_shopping_list,
    update_shopping_item,
)
from larder.models.recipe import MeasurementUnit
from larder.models.shopping import (
    ItemSource,
    ShoppingListCategory,
    ShoppingListItemCreate,
    ShoppingListItemUpdate,
)

USER = "tester"


def _payload(name, category=ShoppingListCategory.OTHER, source=ItemSource.MANUAL, **extra):
    return ShoppingListItemCreate(name=name, category=category, source=source, **extra)


def test_create_and_list_in_category_order():
    create_shopping_item(_payload("Spinach", ShoppingListCategory.PRODUCE), user_id=USER)
    create_shopping_item(_payload("bread", ShoppingListCategory.BAKERY), user_id=USER)
    create_shopping_item(_payload("apples", ShoppingListCategory.PRODUCE), user_id=USER)
    create_shopping_item(_payload("milk", ShoppingListCategory.DAIRY), user_id=USER)

    items = list_shopping_items(user_id=USER)

    assert [item.name for item in items] == ["apples", "Spinach", "milk", "bread"]
    assert all(item.id for item in items)
    assert all(item.created_at for item in items)


def test_create_round_trips_enums_and_keeps_name_as_given():
    item = create_shopping_item(
        _payload(
            "  olive oil ",
            ShoppingListCategory.PANTRY,
            ItemSource.RECIPE,
            quantity=2,
            unit=MeasurementUnit.TBSP,
            recipe_id="pasta",
            original_name="Olive Oil",
        ),
        user_id=USER,
    )

    assert item.name == "  olive oil "
    assert item.unit is MeasurementUnit.TBSP
    assert item.category is ShoppingListCategory.PANTRY
    assert item.source is ItemSource.RECIPE
    assert item.recipe_id == "pasta"
    assert item.checked is False

    with session_scope() as session:
        row = session.get(ShoppingListItemORM, item.id)
        assert row is not None
        assert row.unit == "tbsp"
        assert row.user_id == USER


def test_rows_are_scoped_per_user():
    create_shopping_item(_payload("mine"), user_id=USER)
    other = create_shopping_item(_payload("theirs"), user_id="someone-else")

    assert [item.name for item in list_shopping_items(user_id=USER)] == ["mine"]
    assert get_shopping_item(other.id, user_id=USER) is None
    with pytest.raises(ValueError):
        delete_shopping_item(other.id, user_id=USER)


def test_bulk_create_and_selective_deletes():
    created = create_shopping_items(
        [
            _payload("tomato", ShoppingListCategory.PRODUCE, ItemSource.RECIPE, recipe_id="r1"),
            _payload("basil", ShoppingListCategory.PRODUCE, ItemSource.RECIPE, recipe_id="r2"),
            _payload("soap"),
        ],
        user_id=USER,
    )
    assert len(created) == 3
    assert create_shopping_items([], user_id=USER) == []

    assert delete_items_by_recipe("r2", user_id=USER) == 1
    assert [item.name for item in list_shopping_items(user_id=USER)] == ["tomato", "soap"]

    assert delete_items_by_source(ItemSource.RECIPE, user_id=USER) == 1
    assert [item.name for item in list_shopping_items(user_id=USER)] == ["soap"]


def test_update_and_delete_shopping_item():
    item = create_shopping_item(_payload("olive oil", quantity=1, unit=MeasurementUnit.BOTTLE), user_id=USER)

    updated = update_shopping_item(item.id, user_id=USER, quantity=2, checked=True)
    assert updated.checked is True
    assert updated.quantity == 2
    assert updated.unit is MeasurementUnit.BOTTLE

    cleared = update_shopping_item(item.id, user_id=USER, quantity=None, unit=None, checked=False)
    assert cleared.quantity is None
    assert cleared.unit is None
    assert cleared.checked is False

    delete_shopping_item(item.id, user_id=USER)
    assert get_shopping_item(item.id, user_id=USER) is None


def test_reset_shopping_list():
    create_shopping_item(_payload("lemons"), user_id=USER)
    create_shopping_item(_payload("garlic"), user_id=USER)
    create_shopping_item(_payload("kept"), user_id="someone-else")

    reset_shopping_list(user_id=USER)

    assert list_shopping_items(user_id=USER) == []
    assert len(list_shopping_items(user_id="someone-else")) == 1


def test_update_missing_item_raises():
    with pytest.raises(ValueError):
        update_shopping_item("does-not-exist", user_id=USER, name="nope")


def test_sql_store_implements_store_port():
    store = SqlShoppingListStore(USER)

    async def scenario():
        item = await store.create_item(_payload("milk", ShoppingListCategory.DAIRY))
        await store.create_bulk(
            [_payload("tomato", ShoppingListCategory.PRODUCE, ItemSource.RECIPE, recipe_id="r1")]
        )
        await store.update_checked_state(item.id, True)
        await store.update_item(
            ShoppingListItemUpdate(id=item.id, quantity=1.5, unit=MeasurementUnit.CUP)
        )
        grouped = await store.get_all_by_category()
        by_recipe = await store.get_by_recipe_id("r1")
        await store.delete_by_recipe_id("r1")
        remaining = await store.get_all()
        await store.clear_all()
        return grouped, by_recipe, remaining, await store.get_all()

    grouped, by_recipe, remaining, final = asyncio.run(scenario())

    assert [item.name for item in grouped[ShoppingListCategory.PRODUCE]] == ["tomato"]
    [milk] = grouped[ShoppingListCategory.DAIRY]
    assert (milk.quantity, milk.unit, milk.checked) == (1.5, MeasurementUnit.CUP, True)
    assert [item.name for item in by_recipe] == ["tomato"]
    assert [item.name for item in remaining] == ["milk"]
    assert final == []


def test_sql_store_runs_session_work_in_worker_thread(monkeypatch):
    threads = []

    def recording_list(*, user_id, recipe_id=None):
        threads.append(threading.get_ident())
        return []

    monkeypatch.setattr(shopping_list, "list_shopping_items", recording_list)

    async def scenario():
        await SqlShoppingListStore(USER).get_all()
        return threading.get_ident()

    loop_thread = asyncio.run(scenario())

    assert len(threads) == 1
    assert threads[0] != loop_thread

"""Observable shopping list state with optimistic updates and debounced regeneration."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Optional
from uuid import uuid4

from larder import metrics
from larder.models.recipe import Recipe
from larder.models.shopping import (
    GroupedShoppingListItems,
    ItemSource,
    ManualItemInput,
    ShoppingListItem,
    group_by_category,
    items_for_recipe,
)
from larder.shopping.classifier import classify_ingredient
from larder.shopping.errors import ShoppingListError, ShoppingListValidationError
from larder.shopping.generator import ShoppingListGenerator, validate_manual_item
from larder.shopping.ports import MealPlanQueue, RecipeSource, ShoppingListStore

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5
MAX_RETRY_ATTEMPTS = 3
QUEUE_WINDOW_DAYS = 30
MAX_RETRIES_MESSAGE = "Maximum retry attempts reached. Please try again later."

Items = List[ShoppingListItem]


def _without_recipe(items: Items, recipe_id: str) -> Items:
    dropped = {item.id for item in items_for_recipe(items, recipe_id)}
    return [item for item in items if item.id not in dropped]


@dataclass(frozen=True)
class ShoppingListState:
    """Immutable view handed to subscribers."""

    items: GroupedShoppingListItems
    flat_items: Items
    is_loading: bool
    is_regenerating: bool
    error: Optional[str]
    has_queued_recipes: bool


@dataclass(frozen=True)
class Operation:
    """Last user-facing action, kept so it can be retried."""

    kind: str
    item_id: Optional[str] = None
    recipe_id: Optional[str] = None
    payload: Optional[ManualItemInput] = None


@dataclass
class OptimisticCommand:
    """Local change plus the persistence call that confirms it.

    ``apply`` maps the visible items to their optimistic form; ``persist`` runs
    afterwards and its result is passed to ``confirm`` (if given) to settle the
    visible items. A failing ``persist`` restores the pre-image.
    """

    code: str
    apply: Callable[[Items], Items]
    persist: Callable[[], Awaitable[object]]
    confirm: Optional[Callable[[Items, object], Items]] = field(default=None)


class ShoppingListCoordinator:
    """Live shopping list consumed by a UI layer."""

    def __init__(
        self,
        generator: ShoppingListGenerator,
        store: ShoppingListStore,
        recipes: RecipeSource,
        queue: MealPlanQueue,
        *,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        max_retry_attempts: int = MAX_RETRY_ATTEMPTS,
        queue_window_days: int = QUEUE_WINDOW_DAYS,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._generator = generator
        self._store = store
        self._recipes = recipes
        self._queue = queue
        self._debounce_seconds = debounce_seconds
        self._max_retry_attempts = max_retry_attempts
        self._queue_window_days = queue_window_days
        self._clock = clock

        self._flat_items: Items = []
        self.is_loading = True
        self.is_regenerating = False
        self.error: Optional[str] = None
        self.has_queued_recipes = False

        self._last_operation: Optional[Operation] = None
        self._retry_count = 0
        self._pending_queue_changes: list[str] = []
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[Callable[[ShoppingListState], None]] = []

    # -- observable state -------------------------------------------------

    @property
    def flat_items(self) -> Items:
        return list(self._flat_items)

    @property
    def items(self) -> GroupedShoppingListItems:
        return group_by_category(self._flat_items)

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def pending_queue_changes(self) -> list[str]:
        return list(self._pending_queue_changes)

    def state(self) -> ShoppingListState:
        return ShoppingListState(
            items=self.items,
            flat_items=self.flat_items,
            is_loading=self.is_loading,
            is_regenerating=self.is_regenerating,
            error=self.error,
            has_queued_recipes=self.has_queued_recipes,
        )

    def subscribe(self, listener: Callable[[ShoppingListState], None]) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.state()
        for listener in list(self._listeners):
            listener(snapshot)

    def _set_items(self, items: Items) -> None:
        self._flat_items = list(items)
        self._notify()

    def _set_error(self, message: Optional[str]) -> None:
        self.error = message
        self._notify()

    def _fail(self, code: str, exc: BaseException, fallback: str) -> ShoppingListError:
        message = str(exc) or fallback
        metrics.STORE_FAILURES.labels(operation=code).inc()
        logger.error(
            "Shopping list operation failed: %s",
            message,
            exc_info=exc,
            extra={"operation": code},
        )
        self._set_error(message)
        return ShoppingListError(code, message, exc)

    async def _execute(self, command: OptimisticCommand) -> object:
        pre_image = list(self._flat_items)
        self._set_items(command.apply(pre_image))
        try:
            result = await command.persist()
        except Exception as exc:
            self._set_items(pre_image)
            raise self._fail(command.code, exc, "Shopping list update failed") from exc
        if command.confirm is not None:
            self._set_items(command.confirm(self._flat_items, result))
        self._retry_count = 0
        return result

    # -- loading ----------------------------------------------------------

    async def initialize(self) -> None:
        self.is_loading = True
        self._notify()
        try:
            await self.refresh_list()
            await self._fetch_queued_recipes()
        except ShoppingListError:
            logger.warning("Shopping list initialization incomplete; error=%s", self.error)
        finally:
            self.is_loading = False
            self._notify()

    async def _fetch_queued_recipes(self) -> list[Recipe]:
        start = self._clock()
        end = start + timedelta(days=self._queue_window_days)
        try:
            recipe_ids = await self._queue.queued_recipe_ids(start, end)
            self.has_queued_recipes = bool(recipe_ids)
            recipes: list[Recipe] = []
            for recipe_id in recipe_ids:
                recipe = await self._recipes.get_recipe(recipe_id)
                if recipe is None:
                    logger.warning("Queued recipe %s no longer exists", recipe_id)
                    continue
                recipes.append(recipe)
            return recipes
        except Exception as exc:
            raise self._fail("FETCH_QUEUE_FAILED", exc, "Failed to fetch queued recipes") from exc

    async def refresh_list(self) -> None:
        self.error = None
        try:
            items = await self._store.get_all()
        except Exception as exc:
            raise self._fail("REFRESH_FAILED", exc, "Failed to refresh shopping list") from exc
        self._retry_count = 0
        self._set_items(items)

    # -- regeneration -----------------------------------------------------

    async def regenerate_list(self) -> None:
        """Rebuild recipe rows from the current queue; manual rows survive."""

        self.is_regenerating = True
        self.error = None
        self._last_operation = Operation("regenerate")
        self._notify()
        try:
            recipes = await self._fetch_queued_recipes()
            try:
                items = await self._generator.regenerate_list(recipes)
            except Exception as exc:
                raise self._fail(
                    "REGENERATION_FAILED", exc, "Failed to regenerate shopping list"
                ) from exc
        except ShoppingListError:
            metrics.REGENERATIONS.labels(status="failed").inc()
            raise
        else:
            metrics.REGENERATIONS.labels(status="succeeded").inc()
            self._retry_count = 0
            self._pending_queue_changes = []
            self._set_items(items)
        finally:
            self.is_regenerating = False
            self.is_loading = False
            self._notify()

    def handle_recipe_added_to_queue(self, recipe_id: str) -> None:
        self._pending_queue_changes.append(f"add:{recipe_id}")
        self._schedule_regeneration()

    def handle_recipe_removed_from_queue(self, recipe_id: str) -> None:
        self._pending_queue_changes.append(f"remove:{recipe_id}")
        self._schedule_regeneration()

    def _schedule_regeneration(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self._debounce_seconds, self._start_debounced_regeneration)

    def _start_debounced_regeneration(self) -> None:
        self._debounce_handle = None
        task = asyncio.get_running_loop().create_task(self._run_debounced_regeneration())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_debounced_regeneration(self) -> None:
        try:
            await self.regenerate_list()
        except ShoppingListError as exc:
            # Already reflected in ``error``; nobody awaits this task.
            logger.error("Debounced regeneration failed: %s", exc.message)

    async def wait_for_pending(self) -> None:
        """Wait until scheduled and running regenerations have settled."""

        while self._debounce_handle is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(self._debounce_seconds / 4 or 0.01)

    # -- item actions -----------------------------------------------------

    def _find(self, item_id: str) -> Optional[ShoppingListItem]:
        return next((item for item in self._flat_items if item.id == item_id), None)

    async def toggle_item_checked(self, item_id: str) -> None:
        item = self._find(item_id)
        if item is None:
            logger.warning("Item with ID %s not found for toggle", item_id)
            return

        new_state = not item.checked
        self._last_operation = Operation("toggle", item_id=item_id)
        await self._execute(
            OptimisticCommand(
                code="TOGGLE_FAILED",
                apply=lambda items: [
                    entry.model_copy(update={"checked": new_state}) if entry.id == item_id else entry
                    for entry in items
                ],
                persist=lambda: self._store.update_checked_state(item_id, new_state),
            )
        )

    async def add_manual_item(self, payload: ManualItemInput) -> None:
        self.error = None
        self._last_operation = Operation("add", payload=payload)
        try:
            name = validate_manual_item(payload)
        except ShoppingListValidationError as exc:
            self._set_error(str(exc))
            raise ShoppingListError("VALIDATION_ERROR", str(exc), exc) from exc

        placeholder = ShoppingListItem(
            id=f"pending-{uuid4()}",
            name=payload.name,
            quantity=payload.quantity,
            unit=payload.unit,
            category=payload.category or classify_ingredient(name),
            source=ItemSource.MANUAL,
            original_name=payload.name,
            created_at=datetime.now(timezone.utc),
        )

        def _confirm(items: Items, created: object) -> Items:
            return [created if entry.id == placeholder.id else entry for entry in items]  # type: ignore[misc]

        await self._execute(
            OptimisticCommand(
                code="ADD_FAILED",
                apply=lambda items: [*items, placeholder],
                persist=lambda: self._generator.add_manual_item(payload),
                confirm=_confirm,
            )
        )

    async def delete_item(self, item_id: str) -> None:
        if self._find(item_id) is None:
            logger.warning("Item with ID %s not found for deletion", item_id)
            return

        self._last_operation = Operation("delete", item_id=item_id)
        await self._execute(
            OptimisticCommand(
                code="DELETE_FAILED",
                apply=lambda items: [entry for entry in items if entry.id != item_id],
                persist=lambda: self._store.delete_item(item_id),
            )
        )

    async def handle_recipe_marked_as_cooked(self, recipe_id: str) -> None:
        """Drop a cooked recipe's rows; the meal plan itself is not changed here."""

        self.error = None
        self._last_operation = Operation("remove_recipe", recipe_id=recipe_id)
        await self._execute(
            OptimisticCommand(
                code="REMOVE_RECIPE_FAILED",
                apply=lambda items: _without_recipe(items, recipe_id),
                persist=lambda: self._generator.remove_recipe_ingredients(recipe_id),
            )
        )

    async def toggle_recipe_in_list(self, recipe_id: str) -> bool:
        """Add a recipe's ingredients to the list, or drop them if already there.

        Adding merges into compatible rows and plans the recipe for today;
        removing deletes its rows and every meal plan of it. A recipe without
        ingredients is left alone. Returns whether the recipe is on the list
        afterwards.

        A failed toggle is not replayed by :meth:`retry_last_operation`, which
        reloads the list instead.
        """

        self.error = None
        self._last_operation = None
        try:
            in_list = await self._generator.is_recipe_in_list(recipe_id)
            recipe = None if in_list else await self._recipes.get_recipe(recipe_id)
        except Exception as exc:
            raise self._fail("RECIPE_TOGGLE_FAILED", exc, "Failed to update meal plan") from exc

        if in_list:

            async def _remove() -> None:
                await self._generator.remove_recipe_ingredients(recipe_id)
                await self._queue.unschedule_recipe(recipe_id)

            await self._execute(
                OptimisticCommand(
                    code="RECIPE_TOGGLE_FAILED",
                    apply=lambda items: _without_recipe(items, recipe_id),
                    persist=_remove,
                )
            )
            return False

        if recipe is None:
            raise self._fail(
                "RECIPE_TOGGLE_FAILED",
                LookupError(f"Recipe {recipe_id} not found"),
                "Failed to update meal plan",
            )
        if not recipe.ingredients:
            logger.info(
                "Recipe %s has no ingredients to add",
                recipe_id,
                extra={"operation": "toggle_recipe", "recipe_id": recipe_id},
            )
            return False

        async def _add() -> Items:
            await self._generator.add_recipe_to_shopping_list(recipe)
            await self._queue.schedule_recipe(recipe_id, self._clock())
            return await self._store.get_all()

        await self._execute(
            OptimisticCommand(
                code="RECIPE_TOGGLE_FAILED",
                apply=list,
                persist=_add,
                confirm=lambda _items, fresh: list(fresh),  # type: ignore[arg-type]
            )
        )
        self.has_queued_recipes = True
        self._notify()
        return True

    # -- error handling ---------------------------------------------------

    async def retry_last_operation(self) -> None:
        if self._retry_count >= self._max_retry_attempts:
            self._set_error(MAX_RETRIES_MESSAGE)
            return

        operation = self._last_operation
        if operation is None:
            await self.refresh_list()
            return

        self._retry_count += 1
        self._set_error(None)
        logger.info("Retrying %s (attempt %d)", operation.kind, self._retry_count)
        try:
            if operation.kind == "toggle" and operation.item_id is not None:
                await self.toggle_item_checked(operation.item_id)
            elif operation.kind == "add" and operation.payload is not None:
                await self.add_manual_item(operation.payload)
            elif operation.kind == "delete" and operation.item_id is not None:
                await self.delete_item(operation.item_id)
            elif operation.kind == "remove_recipe" and operation.recipe_id is not None:
                await self.handle_recipe_marked_as_cooked(operation.recipe_id)
            elif operation.kind == "regenerate":
                await self.regenerate_list()
        except ShoppingListError as exc:
            logger.warning("Retry of %s failed: %s", operation.kind, exc.message)

    def clear_error(self) -> None:
        self._retry_count = 0
        self._set_error(None)

    def close(self) -> None:
        """Cancel a pending debounced regeneration; in-flight calls still finish."""

        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None
        self._listeners.clear()


__all__ = [
    "DEBOUNCE_SECONDS",
    "MAX_RETRY_ATTEMPTS",
    "QUEUE_WINDOW_DAYS",
    "MAX_RETRIES_MESSAGE",
    "ShoppingListState",
    "Operation",
    "OptimisticCommand",
    "ShoppingListCoordinator",
]

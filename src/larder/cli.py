"""Command-line interface for Larder."""

from __future__ import annotations

import asyncio
import json
from datetime import date
from typing import Optional

import typer

from larder.config import get_settings
from larder.db.recipes import SqlMealPlanQueue, SqlRecipeSource, save_recipe, schedule_recipe
from larder.db.shopping_list import SqlShoppingListStore
from larder.logging_utils import configure_logging
from larder.models.recipe import MeasurementUnit, Recipe
from larder.models.shopping import (
    ManualItemInput,
    ShoppingListCategory,
    are_all_checked,
    checked_count,
    group_by_checked,
    group_by_source,
    items_for_recipe,
    unchecked_count,
)
from larder.shopping.classifier import classify_ingredient
from larder.shopping.coordinator import ShoppingListCoordinator
from larder.shopping.errors import ShoppingListError
from larder.shopping.generator import ShoppingListGenerator
from larder.shopping.normalizer import normalize_ingredient_name
from larder.shopping.units import format_quantity

app = typer.Typer(help="Larder shopping list commands.")


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)


def _build_coordinator() -> ShoppingListCoordinator:
    settings = get_settings()
    store = SqlShoppingListStore(settings.user_id)
    return ShoppingListCoordinator(
        ShoppingListGenerator(store),
        store,
        SqlRecipeSource(settings.user_id),
        SqlMealPlanQueue(settings.user_id),
        debounce_seconds=settings.regenerate_debounce_seconds,
        max_retry_attempts=settings.max_retry_attempts,
        queue_window_days=settings.queue_window_days,
    )


def _fail(exc: ShoppingListError) -> None:
    typer.secho(f"Error ({exc.code}): {exc.message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("import-recipes")
def import_recipes(path: str = typer.Argument(..., help="JSON file with a list of recipes.")) -> None:
    """Store the recipes from a JSON file (a list, or an object with a ``recipes`` key)."""

    with open(path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if isinstance(payload, dict):
        payload = payload.get("recipes", [])

    user_id = get_settings().user_id
    recipes = [Recipe.model_validate(entry) for entry in payload]
    for recipe in recipes:
        save_recipe(recipe, user_id=user_id)
    typer.echo(f"Imported {len(recipes)} recipe(s).")


@app.command()
def queue(
    recipe_id: str = typer.Argument(..., help="Recipe to plan."),
    planned_for: Optional[str] = typer.Option(None, "--date", help="ISO date; defaults to today."),
) -> None:
    """Plan a saved recipe so it feeds the next regeneration."""

    day = date.fromisoformat(planned_for) if planned_for else date.today()
    try:
        entry = schedule_recipe(recipe_id, day, user_id=get_settings().user_id)
    except ValueError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Queued {entry.recipe_id} for {entry.planned_for.isoformat()}.")


@app.command()
def regenerate() -> None:
    """Rebuild recipe items from the meal-plan queue; manual items are kept."""

    coordinator = _build_coordinator()
    try:
        asyncio.run(coordinator.regenerate_list())
    except ShoppingListError as exc:
        _fail(exc)
    typer.echo(f"Shopping list regenerated: {len(coordinator.flat_items)} item(s).")


@app.command("add-item")
def add_item(
    name: str = typer.Argument(..., help="Item name."),
    quantity: Optional[float] = typer.Option(None, "--quantity", help="Amount to buy."),
    unit: Optional[MeasurementUnit] = typer.Option(None, "--unit", help="Unit of the amount."),
    category: Optional[ShoppingListCategory] = typer.Option(
        None, "--category", help="Aisle; inferred from the name when omitted."
    ),
) -> None:
    """Add a manual item to the shopping list."""

    coordinator = _build_coordinator()
    payload = ManualItemInput(name=name, quantity=quantity, unit=unit, category=category)
    try:
        asyncio.run(coordinator.add_manual_item(payload))
    except ShoppingListError as exc:
        _fail(exc)
    item = coordinator.flat_items[-1]
    typer.echo(f"Added {item.name} to {item.category.value} ({item.id}).")


@app.command()
def show(as_json: bool = typer.Option(False, "--json", help="Emit JSON grouped by category.")) -> None:
    """Print the shopping list grouped by category, unchecked items first."""

    coordinator = _build_coordinator()
    try:
        asyncio.run(coordinator.refresh_list())
    except ShoppingListError as exc:
        _fail(exc)

    grouped = coordinator.items
    if as_json:
        payload = {
            category.value: [item.model_dump(mode="json") for item in items]
            for category, items in grouped.items()
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    flat_items = coordinator.flat_items
    if not flat_items:
        typer.echo("Shopping list is empty.")
        return

    for category, items in grouped.items():
        if not items:
            continue
        typer.echo(f"{category.value}:")
        checked, unchecked = group_by_checked(items)
        for item in [*unchecked, *checked]:
            mark = "x" if item.checked else " "
            amount = format_quantity(item.quantity, item.unit)
            suffix = f" ({amount})" if amount else ""
            typer.echo(f"  [{mark}] {item.name}{suffix}  {item.id}")

    recipe_items, manual_items = group_by_source(flat_items)
    typer.echo(
        f"{checked_count(flat_items)} checked, {unchecked_count(flat_items)} to buy "
        f"({len(recipe_items)} from recipes, {len(manual_items)} manual)."
    )
    if are_all_checked(flat_items):
        typer.secho("Everything is checked off.", fg=typer.colors.GREEN)


@app.command()
def toggle(item_id: str = typer.Argument(..., help="Item to check or uncheck.")) -> None:
    """Flip the checked state of an item."""

    coordinator = _build_coordinator()

    async def _run() -> None:
        await coordinator.refresh_list()
        await coordinator.toggle_item_checked(item_id)

    try:
        asyncio.run(_run())
    except ShoppingListError as exc:
        _fail(exc)

    item = next((entry for entry in coordinator.flat_items if entry.id == item_id), None)
    if item is None:
        typer.secho(f"Shopping list item {item_id} not found", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{item.name}: {'checked' if item.checked else 'unchecked'}.")


@app.command("toggle-recipe")
def toggle_recipe(recipe_id: str = typer.Argument(..., help="Saved recipe to add or remove.")) -> None:
    """Merge a recipe into the list and plan it for today, or take it back off."""

    coordinator = _build_coordinator()

    async def _run() -> bool:
        await coordinator.refresh_list()
        return await coordinator.toggle_recipe_in_list(recipe_id)

    try:
        in_list = asyncio.run(_run())
    except ShoppingListError as exc:
        _fail(exc)

    if in_list:
        added = items_for_recipe(coordinator.flat_items, recipe_id)
        typer.echo(f"Added recipe {recipe_id}: {len(added)} new item(s).")
    else:
        typer.echo(f"Recipe {recipe_id} is not on the list.")


@app.command("remove-recipe")
def remove_recipe(recipe_id: str = typer.Argument(..., help="Recipe whose items to drop.")) -> None:
    """Drop every item contributed by a recipe, e.g. once it has been cooked."""

    coordinator = _build_coordinator()

    async def _run() -> None:
        await coordinator.refresh_list()
        await coordinator.handle_recipe_marked_as_cooked(recipe_id)

    try:
        asyncio.run(_run())
    except ShoppingListError as exc:
        _fail(exc)
    typer.echo(f"Removed items for recipe {recipe_id}.")


@app.command()
def clear(
    clear_all: bool = typer.Option(False, "--all", help="Also remove manual items."),
) -> None:
    """Remove recipe items (or everything with ``--all``)."""

    store = SqlShoppingListStore(get_settings().user_id)
    generator = ShoppingListGenerator(store)
    if clear_all:
        asyncio.run(generator.clear_all_items())
        typer.echo("Cleared all items.")
    else:
        asyncio.run(generator.clear_recipe_items())
        typer.echo("Cleared recipe items.")


@app.command()
def normalize(name: str = typer.Argument(..., help="Ingredient name.")) -> None:
    """Print the canonical form of an ingredient name."""

    typer.echo(normalize_ingredient_name(name))


@app.command()
def classify(name: str = typer.Argument(..., help="Ingredient name.")) -> None:
    """Print the aisle an ingredient is shelved under."""

    typer.echo(classify_ingredient(name).value)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for `python -m larder`."""
    app(prog_name="larder", args=argv)


if __name__ == "__main__":
    main()

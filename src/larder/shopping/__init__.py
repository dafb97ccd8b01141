"""Shopping list pipeline: normalize, classify, convert, aggregate and generate."""

from larder.shopping.aggregator import aggregate_ingredients, extract_ingredients
from larder.shopping.classifier import classify_ingredient
from larder.shopping.coordinator import ShoppingListCoordinator, ShoppingListState
from larder.shopping.errors import ShoppingListError, ShoppingListValidationError
from larder.shopping.generator import ShoppingListGenerator
from larder.shopping.normalizer import are_ingredients_similar, normalize_ingredient_name
from larder.shopping.units import aggregate_quantities, convert_unit, format_quantity

__all__ = [
    "aggregate_ingredients",
    "extract_ingredients",
    "classify_ingredient",
    "ShoppingListCoordinator",
    "ShoppingListState",
    "ShoppingListError",
    "ShoppingListValidationError",
    "ShoppingListGenerator",
    "are_ingredients_similar",
    "normalize_ingredient_name",
    "aggregate_quantities",
    "convert_unit",
    "format_quantity",
]

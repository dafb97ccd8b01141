"""Keyword-based store aisle classification."""

from __future__ import annotations

import re

from larder.models.shopping import CATEGORY_ORDER, ShoppingListCategory

CATEGORY_KEYWORDS: dict[ShoppingListCategory, tuple[str, ...]] = {
    ShoppingListCategory.PRODUCE: (
        "tomato",
        "onion",
        "garlic",
        "carrot",
        "lettuce",
        "spinach",
        "broccoli",
        "cauliflower",
        "cabbage",
        "kale",
        "arugula",
        "celery",
        "cucumber",
        "zucchini",
        "squash",
        "eggplant",
        "potato",
        "pepper",
        "jalapeno",
        "chili",
        "mushroom",
        "asparagus",
        "green bean",
        "corn",
        "avocado",
        "shallot",
        "scallion",
        "leek",
        "radish",
        "beet",
        "turnip",
        "parsnip",
        "artichoke",
        "ginger",
        "apple",
        "banana",
        "orange",
        "lemon",
        "lime",
        "strawberry",
        "berry",
        "grape",
        "pear",
        "peach",
        "plum",
        "cherry",
        "mango",
        "pineapple",
        "melon",
        "kiwi",
        "vegetable",
        "veggie",
        "fruit",
        "basil",
        "cilantro",
        "parsley",
        "thyme",
        "rosemary",
        "mint",
        "dill",
        "chive",
        "herb",
    ),
    ShoppingListCategory.DAIRY: (
        "milk",
        "cheese",
        "butter",
        "yogurt",
        "cream",
        "egg",
        "cheddar",
        "mozzarella",
        "parmesan",
        "feta",
        "ricotta",
        "brie",
        "gouda",
        "half-and-half",
        "ghee",
    ),
    ShoppingListCategory.MEAT_SEAFOOD: (
        "chicken",
        "beef",
        "pork",
        "turkey",
        "bacon",
        "sausage",
        "pepperoni",
        "salami",
        "prosciutto",
        "pancetta",
        "chorizo",
        "lamb",
        "veal",
        "duck",
        "steak",
        "meat",
        "salmon",
        "tuna",
        "cod",
        "tilapia",
        "halibut",
        "trout",
        "fish",
        "shrimp",
        "prawn",
        "crab",
        "lobster",
        "scallop",
        "mussel",
        "clam",
        "oyster",
        "anchovy",
        "sardine",
    ),
    ShoppingListCategory.PANTRY: (
        "flour",
        "sugar",
        "rice",
        "pasta",
        "noodle",
        "oat",
        "quinoa",
        "barley",
        "couscous",
        "cereal",
        "oil",
        "vinegar",
        "sauce",
        "paste",
        "ketchup",
        "mustard",
        "mayonnaise",
        "honey",
        "syrup",
        "jam",
        "salt",
        "black pepper",
        "white pepper",
        "peppercorn",
        "flake",
        "cinnamon",
        "cumin",
        "paprika",
        "oregano",
        "turmeric",
        "nutmeg",
        "spice",
        "seasoning",
        "powder",
        "broth",
        "stock",
        "bean",
        "lentil",
        "chickpea",
        "baking powder",
        "baking soda",
        "yeast",
        "extract",
        "cornstarch",
        "cornmeal",
        "cream of tartar",
        "cocoa",
        "chocolate",
        "coffee",
        "tea",
        "peanut butter",
        "almond butter",
        "nut",
        "almond",
        "walnut",
        "pecan",
        "cashew",
        "breadcrumb",
        "cracker",
        "chip",
        "popcorn",
    ),
    ShoppingListCategory.FROZEN: (
        "frozen",
        "ice cream",
        "sorbet",
        "gelato",
        "popsicle",
    ),
    ShoppingListCategory.BAKERY: (
        "bread",
        "baguette",
        "tortilla",
        "bagel",
        "croissant",
        "bun",
        "roll",
        "muffin",
        "pita",
        "naan",
        "brioche",
        "ciabatta",
        "sourdough",
        "focaccia",
        "pastry",
        "cake",
    ),
    ShoppingListCategory.OTHER: (),
}

# Checked before the category precedence pass: processed or frozen forms of an
# ingredient shelve differently from the fresh ingredient their name contains.
PRIORITY_KEYWORDS: tuple[tuple[str, ShoppingListCategory], ...] = (
    ("frozen", ShoppingListCategory.FROZEN),
    ("ice cream", ShoppingListCategory.FROZEN),
    ("peanut butter", ShoppingListCategory.PANTRY),
    ("almond butter", ShoppingListCategory.PANTRY),
    ("cream of tartar", ShoppingListCategory.PANTRY),
    ("broth", ShoppingListCategory.PANTRY),
    ("stock", ShoppingListCategory.PANTRY),
    ("oil", ShoppingListCategory.PANTRY),
    ("sauce", ShoppingListCategory.PANTRY),
    ("powder", ShoppingListCategory.PANTRY),
    ("paste", ShoppingListCategory.PANTRY),
    ("vinegar", ShoppingListCategory.PANTRY),
    ("extract", ShoppingListCategory.PANTRY),
    ("syrup", ShoppingListCategory.PANTRY),
    ("cornstarch", ShoppingListCategory.PANTRY),
    ("cornmeal", ShoppingListCategory.PANTRY),
    ("popcorn", ShoppingListCategory.PANTRY),
    ("black pepper", ShoppingListCategory.PANTRY),
    ("white pepper", ShoppingListCategory.PANTRY),
    ("peppercorn", ShoppingListCategory.PANTRY),
    ("flake", ShoppingListCategory.PANTRY),
    ("noodle", ShoppingListCategory.PANTRY),
    ("pepperoni", ShoppingListCategory.MEAT_SEAFOOD),
)

_WHITESPACE = re.compile(r"\s+")


def classify_ingredient(name: str) -> ShoppingListCategory:
    """Return the aisle category for an ingredient name (raw or normalized)."""

    candidate = _WHITESPACE.sub(" ", (name or "").lower()).strip()
    if not candidate:
        return ShoppingListCategory.OTHER

    for keyword, category in PRIORITY_KEYWORDS:
        if keyword in candidate:
            return category

    for category in CATEGORY_ORDER:
        if any(keyword in candidate for keyword in CATEGORY_KEYWORDS[category]):
            return category

    return ShoppingListCategory.OTHER


def all_categories() -> list[ShoppingListCategory]:
    return list(CATEGORY_ORDER)


def is_valid_category(value: object) -> bool:
    """Strict membership test; display names are case-sensitive."""

    if isinstance(value, ShoppingListCategory):
        return True
    return isinstance(value, str) and value in {category.value for category in CATEGORY_ORDER}


def keywords_for(category: ShoppingListCategory | str) -> list[str]:
    """Return a copy of the keyword list for ``category`` (empty for Other)."""

    try:
        resolved = ShoppingListCategory(category)
    except ValueError:
        return []
    return list(CATEGORY_KEYWORDS[resolved])


__all__ = [
    "CATEGORY_KEYWORDS",
    "PRIORITY_KEYWORDS",
    "classify_ingredient",
    "all_categories",
    "is_valid_category",
    "keywords_for",
]

"""Canonical comparison keys for free-text ingredient names."""

from __future__ import annotations

import re

PLURAL_MAPPINGS: dict[str, str] = {
    "eggs": "egg",
    "tomatoes": "tomato",
    "potatoes": "potato",
    "onions": "onion",
    "carrots": "carrot",
    "peppers": "pepper",
    "mushrooms": "mushroom",
    "apples": "apple",
    "oranges": "orange",
    "lemons": "lemon",
    "limes": "lime",
    "bananas": "banana",
    "avocados": "avocado",
    "berries": "berry",
    "cherries": "cherry",
    "strawberries": "strawberry",
    "blueberries": "blueberry",
    "raspberries": "raspberry",
    "blackberries": "blackberry",
    "cloves": "clove",
    "stalks": "stalk",
    "heads": "head",
    "bunches": "bunch",
    "slices": "slice",
    "leaves": "leaf",
    "sprigs": "sprig",
    "strips": "strip",
    "cubes": "cube",
    "chunks": "chunk",
    "pieces": "piece",
    "breasts": "breast",
    "thighs": "thigh",
    "drumsticks": "drumstick",
    "wings": "wing",
    "fillets": "fillet",
    "steaks": "steak",
    "chops": "chop",
    "ribs": "rib",
    "anchovies": "anchovy",
    "sardines": "sardine",
    "shrimp": "shrimp",
    "scallops": "scallop",
    "mussels": "mussel",
    "clams": "clam",
    "oysters": "oyster",
    "tortillas": "tortilla",
    "rolls": "roll",
    "buns": "bun",
    "loaves": "loaf",
    "bagels": "bagel",
    "crackers": "cracker",
    "cookies": "cookie",
    "almonds": "almond",
    "walnuts": "walnut",
    "pecans": "pecan",
    "cashews": "cashew",
    "peanuts": "peanut",
    "pistachios": "pistachio",
    "hazelnuts": "hazelnut",
    "beans": "bean",
    "lentils": "lentil",
    "chickpeas": "chickpea",
    "noodles": "noodle",
    "olives": "olive",
    "capers": "caper",
    "jalapeños": "jalapeno",
    "jalapenos": "jalapeno",
    "chilies": "chili",
    "chilis": "chili",
    "chillies": "chili",
    "cucumbers": "cucumber",
    "zucchinis": "zucchini",
    "squashes": "squash",
    "eggplants": "eggplant",
    "artichokes": "artichoke",
    "asparagus": "asparagus",
    "radishes": "radish",
    "turnips": "turnip",
    "beets": "beet",
    "parsnips": "parsnip",
}

DESCRIPTOR_REMOVALS: tuple[str, ...] = (
    "fresh",
    "freshly",
    "dried",
    "dry",
    "frozen",
    "canned",
    "organic",
    "raw",
    "cooked",
    "chopped",
    "diced",
    "minced",
    "sliced",
    "grated",
    "shredded",
    "ground",
    "crushed",
    "whole",
    "halved",
    "quartered",
    "cubed",
    "julienned",
    "peeled",
    "deveined",
    "boneless",
    "skinless",
    "bone-in",
    "skin-on",
    "large",
    "medium",
    "small",
    "extra-large",
    "extra large",
    "jumbo",
    "mini",
    "thin",
    "thick",
    "fine",
    "coarse",
    "hot",
    "cold",
    "warm",
    "room temperature",
    "softened",
    "melted",
    "chilled",
    "ripe",
    "unripe",
    "firm",
    "soft",
    "crisp",
    "tender",
    "packed",
    "loosely packed",
    "firmly packed",
    "low-fat",
    "fat-free",
    "reduced-fat",
    "full-fat",
    "low-sodium",
    "unsalted",
    "salted",
    "sweet",
    "unsweetened",
    "sweetened",
    "plain",
    "flavored",
    "seasoned",
    "unseasoned",
    "toasted",
    "roasted",
    "blanched",
    "sauteed",
    "sautéed",
    "fried",
    "boiled",
    "steamed",
    "grilled",
    "smoked",
    "cured",
    "pickled",
    "marinated",
)

# Compounds whose descriptor carries meaning ("baking powder" is not "powder").
KEEP_DESCRIPTORS: tuple[str, ...] = (
    "olive oil",
    "extra virgin olive oil",
    "virgin olive oil",
    "vegetable oil",
    "canola oil",
    "coconut oil",
    "sesame oil",
    "peanut oil",
    "soy sauce",
    "fish sauce",
    "worcestershire sauce",
    "hot sauce",
    "tomato sauce",
    "tomato paste",
    "baking powder",
    "baking soda",
    "brown sugar",
    "powdered sugar",
    "confectioners sugar",
    "granulated sugar",
    "cane sugar",
    "maple syrup",
    "corn syrup",
    "heavy cream",
    "sour cream",
    "cream cheese",
    "cottage cheese",
    "ricotta cheese",
    "parmesan cheese",
    "mozzarella cheese",
    "cheddar cheese",
    "feta cheese",
    "goat cheese",
    "blue cheese",
    "swiss cheese",
    "provolone cheese",
    "jack cheese",
    "american cheese",
    "pepper jack",
    "black pepper",
    "white pepper",
    "red pepper",
    "cayenne pepper",
    "bell pepper",
    "chili powder",
    "garlic powder",
    "onion powder",
    "all-purpose flour",
    "bread flour",
    "whole wheat flour",
    "almond flour",
    "coconut flour",
    "rice flour",
    "chicken broth",
    "beef broth",
    "vegetable broth",
    "chicken stock",
    "beef stock",
    "vegetable stock",
    "apple cider vinegar",
    "balsamic vinegar",
    "red wine vinegar",
    "white wine vinegar",
    "rice vinegar",
    "white wine",
    "red wine",
    "dry white wine",
    "dry red wine",
    "green onion",
    "spring onion",
    "red onion",
    "yellow onion",
    "white onion",
    "sweet onion",
)

_WHITESPACE = re.compile(r"\s+")
_COMMAS = re.compile(r",+")
_PARENTHETICAL = re.compile(r"\(.*?\)")


def _build_descriptor_pattern(descriptors: tuple[str, ...]) -> re.Pattern[str]:
    # Longest first so "loosely packed" is removed before "packed".
    ordered = sorted(descriptors, key=len, reverse=True)
    alternation = "|".join(re.escape(descriptor) for descriptor in ordered)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


_DESCRIPTOR_PATTERN = _build_descriptor_pattern(DESCRIPTOR_REMOVALS)


def _collapse(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def _is_keep_compound(value: str) -> bool:
    return any(value == term or term in value for term in KEEP_DESCRIPTORS)


def _singularize(value: str) -> str:
    if value in PLURAL_MAPPINGS:
        return PLURAL_MAPPINGS[value]
    words = value.split(" ")
    last = words[-1]
    if last in PLURAL_MAPPINGS:
        words[-1] = PLURAL_MAPPINGS[last]
        return " ".join(words)
    return value


def normalize_ingredient_name(name: str) -> str:
    """Return the canonical, descriptor-free, singular form of an ingredient name.

    Never raises; blank input yields an empty string.
    """

    normalized = _collapse((name or "").lower())

    if not _is_keep_compound(normalized):
        normalized = _collapse(_DESCRIPTOR_PATTERN.sub("", normalized))

    normalized = _singularize(normalized)

    normalized = _COMMAS.sub("", normalized)
    normalized = _PARENTHETICAL.sub("", normalized)
    return _collapse(normalized)


def normalization_key(name: str) -> str:
    """Key used to decide whether two ingredient lines describe the same thing."""

    return normalize_ingredient_name(name)


def are_ingredients_similar(first: str, second: str) -> bool:
    return normalize_ingredient_name(first) == normalize_ingredient_name(second)


__all__ = [
    "PLURAL_MAPPINGS",
    "DESCRIPTOR_REMOVALS",
    "KEEP_DESCRIPTORS",
    "normalize_ingredient_name",
    "normalization_key",
    "are_ingredients_similar",
]

"""Shopping list categories and ingredient item aggregation."""

from collections.abc import Iterable
from dataclasses import dataclass, replace

from coach_planner.domain.nutrition import RecipeIngredient

CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "produce",
        (
            "gemuese",
            "gemuse",
            "salat",
            "spinat",
            "gurke",
            "tomate",
            "paprika",
            "karotte",
            "zwiebel",
            "kartoffel",
            "pilz",
            "brokkoli",
            "zucchini",
            "kohlenhydratarm",
        ),
    ),
    (
        "fruit",
        (
            "apfel",
            "banane",
            "beere",
            "orange",
            "zitrone",
            "kiwi",
            "traube",
            "mango",
            "ananas",
            "birne",
        ),
    ),
    ("dairy", ("milch", "joghurt", "quark", "kaese", "skyr", "butter", "sahne")),
    (
        "meat",
        (
            "haehnchen",
            "hahnchen",
            "pute",
            "rind",
            "hack",
            "lachs",
            "thunfisch",
            "fisch",
            "schinken",
            "wurst",
            "aufschnitt",
            "eier",
        ),
    ),
    (
        "grains",
        (
            "reis",
            "nudel",
            "hafer",
            "muesli",
            "brot",
            "toast",
            "mehl",
            "quinoa",
            "couscous",
        ),
    ),
    (
        "drinks",
        (
            "wasser",
            "saft",
            "tee",
            "kaffee",
            "drink",
            "limonade",
            "monster",
            "energy",
        ),
    ),
    ("snacks", ("nuss", "riegel", "chips", "schokolade", "cracker")),
)

CATEGORY_LABELS = {
    "produce": "Gemüse",
    "fruit": "Obst",
    "dairy": "Milchprodukte",
    "meat": "Fleisch, Fisch & Eier",
    "grains": "Getreide & Basics",
    "snacks": "Snacks",
    "drinks": "Getränke",
}
OTHER_CATEGORY = "other"

_UMLAUTS = str.maketrans({"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"})
_WORD_KEYWORDS = {"meat": ("ei",)}


@dataclass(frozen=True)
class ShoppingItem:
    """Aggregated shopping list line for one ingredient and unit."""

    dedupe_key: str
    label: str
    category: str
    amount: float
    unit: str
    ingredient_id: str | None = None
    source_recipe_id: str | None = None


def normalize_label(label: str) -> str:
    return label.lower().translate(_UMLAUTS).strip()


def resolve_shopping_category(label: str) -> str:
    """Classify an item label by the first keyword group it contains."""
    normalized = normalize_label(label)
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return category
        if set(normalized.split()) & set(_WORD_KEYWORDS.get(category, ())):
            return category
    return OTHER_CATEGORY


def shopping_category_label(category: str) -> str:
    return CATEGORY_LABELS.get(category, "Sonstiges")


def shopping_dedupe_key(ingredient_id: str, unit: str) -> str:
    return f"ingredient:{ingredient_id}:{str(unit).lower()}"


def merge_recipe_ingredients(
    items: Iterable[ShoppingItem], recipe_ingredients: Iterable[RecipeIngredient]
) -> list[ShoppingItem]:
    """Add recipe ingredients to a list, summing amounts per ingredient and unit."""
    merged = {item.dedupe_key: item for item in items}
    for row in recipe_ingredients:
        key = shopping_dedupe_key(row.ingredient.id, str(row.unit))
        existing = merged.get(key)
        category = resolve_shopping_category(row.ingredient.name)
        if existing is None:
            merged[key] = ShoppingItem(
                dedupe_key=key,
                label=row.ingredient.name,
                category=category,
                amount=row.amount,
                unit=str(row.unit),
                ingredient_id=row.ingredient.id,
                source_recipe_id=row.recipe_id,
            )
            continue
        merged[key] = replace(
            existing,
            label=row.ingredient.name,
            category=category,
            amount=existing.amount + row.amount,
        )
    return list(merged.values())


def group_by_category(items: Iterable[ShoppingItem]) -> dict[str, list[ShoppingItem]]:
    """Group items by category in display order, with other last."""
    grouped: dict[str, list[ShoppingItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    order = [category for category, _ in CATEGORY_KEYWORDS] + [OTHER_CATEGORY]
    return {
        category: sorted(grouped[category], key=lambda item: item.label.lower())
        for category in order
        if category in grouped
    }

"""Row parsing shared by the Supabase adapters."""

from coach_planner.domain.nutrition import Ingredient, NutritionPer100g
from coach_planner.domain.units import IngredientConversion

NUTRITION_COLUMNS = ("calories", "protein", "carbs", "fat", "fiber", "sugar", "salt")
CONVERSION_COLUMNS = (
    "grams_per_piece",
    "grams_per_hand",
    "grams_per_teaspoon",
    "grams_per_tablespoon",
    "grams_per_pinch",
    "grams_per_cup",
    "grams_per_slice",
    "grams_per_bunch",
    "grams_per_can",
    "ml_density_g_per_ml",
)
INGREDIENT_SELECT = "ingredient:ingredients(*)"


def optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def parse_ingredient(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row with its nutrition and conversion columns."""
    return Ingredient(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        nutrition=NutritionPer100g(
            **{column: optional_float(row.get(column)) for column in NUTRITION_COLUMNS}
        ),
        conversion=IngredientConversion(
            **{column: optional_float(row.get(column)) for column in CONVERSION_COLUMNS}
        ),
    )

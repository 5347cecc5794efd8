"""Recomputation of cached recipe nutrition totals."""

import logging
from dataclasses import dataclass
from typing import Protocol

from coach_planner.domain.nutrition import (
    RecipeCandidate,
    RecipeIngredient,
    RecipeNutritionSnapshot,
)
from coach_planner.services.nutrition import (
    NutritionInput,
    compute_nutrition_totals,
    round_totals,
)

_logger = logging.getLogger(__name__)


class RecipeRepository(Protocol):
    """Persistence interface for recipes and their ingredient rows."""

    def list_recipe_ingredients(self, recipe_id: str) -> list[RecipeIngredient]:
        """Return ingredient rows of a recipe."""

    def list_recipe_ids_for_ingredient(self, ingredient_id: str) -> list[str]:
        """Return distinct ids of recipes using an ingredient."""

    def save_nutrition_snapshot(self, snapshot: RecipeNutritionSnapshot) -> None:
        """Store cached nutrition totals on the recipe row."""

    def list_matchable_recipes(
        self, selected_variant_option_ids: list[str]
    ) -> list[RecipeCandidate]:
        """Return recipes with complete cached macros for the chosen variants."""


def compute_recipe_snapshot(
    recipe_id: str, ingredients: list[RecipeIngredient]
) -> RecipeNutritionSnapshot:
    """Aggregate recipe ingredient rows into rounded cached totals."""
    computed = compute_nutrition_totals(
        NutritionInput(
            amount=row.amount,
            unit=row.unit,
            nutrition_per_100g=row.ingredient.nutrition,
            conversion=row.ingredient.conversion,
        )
        for row in ingredients
    )
    return RecipeNutritionSnapshot(
        recipe_id=recipe_id,
        totals=round_totals(computed.totals),
        warning_count=computed.warning_count,
        has_estimated_conversions=computed.has_estimated_conversions,
    )


@dataclass
class RecipeNutritionService:
    """Keeps recipe macro caches in sync with their ingredients."""

    repository: RecipeRepository

    def recompute(self, recipe_id: str) -> RecipeNutritionSnapshot:
        """Recompute and store the cached totals of one recipe."""
        snapshot = compute_recipe_snapshot(
            recipe_id, self.repository.list_recipe_ingredients(recipe_id)
        )
        self.repository.save_nutrition_snapshot(snapshot)
        return snapshot

    def recompute_for_ingredient(
        self, ingredient_id: str
    ) -> list[RecipeNutritionSnapshot]:
        """Recompute every recipe that uses an ingredient."""
        recipe_ids = self.repository.list_recipe_ids_for_ingredient(ingredient_id)
        snapshots = [self.recompute(recipe_id) for recipe_id in recipe_ids]
        _logger.info(
            "Recipe nutrition recomputed: ingredient=%s recipes=%s",
            ingredient_id,
            len(snapshots),
        )
        return snapshots

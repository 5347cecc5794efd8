"""Supabase repository for recipes and their cached nutrition."""

from dataclasses import dataclass

from supabase import Client

from coach_planner.adapters.supabase_rows import INGREDIENT_SELECT, parse_ingredient
from coach_planner.domain.nutrition import (
    RecipeCandidate,
    RecipeIngredient,
    RecipeNutritionSnapshot,
)
from coach_planner.services.recipes import RecipeRepository


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipes."""

    client: Client

    def list_recipe_ingredients(self, recipe_id: str) -> list[RecipeIngredient]:
        """Return ingredient rows of a recipe."""
        response = (
            self.client.table("recipe_ingredients")
            .select(f"*, {INGREDIENT_SELECT}")
            .eq("recipe_id", recipe_id)
            .execute()
        )
        return [
            RecipeIngredient(
                recipe_id=str(row["recipe_id"]),
                amount=float(row["amount"]),
                unit=str(row["unit"]),
                ingredient=parse_ingredient(row["ingredient"]),
            )
            for row in response.data or []
            if row.get("ingredient")
        ]

    def list_recipe_ids_for_ingredient(self, ingredient_id: str) -> list[str]:
        """Return distinct ids of recipes that use an ingredient."""
        response = (
            self.client.table("recipe_ingredients")
            .select("recipe_id")
            .eq("ingredient_id", ingredient_id)
            .execute()
        )
        return list(dict.fromkeys(str(row["recipe_id"]) for row in response.data or []))

    def save_nutrition_snapshot(self, snapshot: RecipeNutritionSnapshot) -> None:
        """Store cached totals on the recipe row."""
        totals = snapshot.totals
        self.client.table("recipes").update(
            {
                "nutrition_calories": totals.calories,
                "nutrition_protein": totals.protein,
                "nutrition_carbs": totals.carbs,
                "nutrition_fat": totals.fat,
                "nutrition_fiber": totals.fiber,
                "nutrition_sugar": totals.sugar,
                "nutrition_salt": totals.salt,
                "nutrition_warning_count": snapshot.warning_count,
                "nutrition_has_estimates": snapshot.has_estimated_conversions,
            }
        ).eq("id", snapshot.recipe_id).execute()

    def list_matchable_recipes(
        self, selected_variant_option_ids: list[str]
    ) -> list[RecipeCandidate]:
        """Return recipes open to every variant or to one of the selected ones."""
        response = (
            self.client.table("recipes")
            .select(
                "id, name, variant_option_id, nutrition_calories, "
                "nutrition_protein, nutrition_carbs, nutrition_fat"
            )
            .order("name")
            .execute()
        )
        selected = set(selected_variant_option_ids)
        candidates: list[RecipeCandidate] = []
        for row in response.data or []:
            variant_option_id = row.get("variant_option_id")
            if variant_option_id and variant_option_id not in selected:
                continue
            macros = [
                row.get("nutrition_calories"),
                row.get("nutrition_protein"),
                row.get("nutrition_carbs"),
                row.get("nutrition_fat"),
            ]
            if any(value is None for value in macros):
                continue
            calories, protein, carbs, fat = (float(value) for value in macros)
            candidates.append(
                RecipeCandidate(
                    id=str(row["id"]),
                    name=str(row.get("name", "")),
                    calories=calories,
                    protein=protein,
                    carbs=carbs,
                    fat=fat,
                )
            )
        return candidates

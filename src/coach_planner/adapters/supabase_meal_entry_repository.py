"""Supabase repository for nutrition plan meal entries."""

from dataclasses import dataclass

from supabase import Client

from coach_planner.adapters.supabase_rows import INGREDIENT_SELECT, parse_ingredient
from coach_planner.domain.nutrition import MealEntry, MealSlot
from coach_planner.services.planner import MealEntryRepository


@dataclass
class SupabaseMealEntryRepository(MealEntryRepository):
    """Supabase implementation for meal entries."""

    client: Client

    def list_meal_entries(self, nutrition_plan_ids: list[str]) -> list[MealEntry]:
        """Return meal entries with their ingredients for the given plans."""
        if not nutrition_plan_ids:
            return []
        response = (
            self.client.table("nutrition_plan_meal_entries")
            .select(f"*, {INGREDIENT_SELECT}")
            .in_("nutrition_plan_id", nutrition_plan_ids)
            .execute()
        )
        return [
            MealEntry(
                slot=MealSlot(str(row["slot"])),
                amount=float(row["amount"]),
                unit=str(row["unit"]),
                ingredient=parse_ingredient(row["ingredient"]),
                nutrition_plan_id=str(row["nutrition_plan_id"]),
            )
            for row in response.data or []
            if row.get("ingredient")
        ]

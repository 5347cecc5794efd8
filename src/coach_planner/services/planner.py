"""Week planning: active content, slot targets and recipe alternatives."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from coach_planner.domain.nutrition import MealEntry, SlotPlan
from coach_planner.domain.paths import AssignmentKind, Enrollment, WeekBundle
from coach_planner.services.assignments import AssignmentResolver
from coach_planner.services.matching import (
    DEFAULT_MATCH_LIMIT,
    DEFAULT_MATCH_TOLERANCE,
    MatchTolerance,
    get_slot_recipe_matches,
)
from coach_planner.services.nutrition import build_slot_targets
from coach_planner.services.recipes import RecipeRepository
from coach_planner.services.weeks import resolve_enrollment_week

_logger = logging.getLogger(__name__)


class MealEntryRepository(Protocol):
    """Read interface for nutrition plan meal entries."""

    def list_meal_entries(self, nutrition_plan_ids: list[str]) -> list[MealEntry]:
        """Return meal entries of the given nutrition plans."""


@dataclass
class PlannerService:
    """Ties week resolution, slot targets and recipe matching together."""

    assignment_resolver: AssignmentResolver
    meal_entry_repository: MealEntryRepository
    recipe_repository: RecipeRepository
    tolerance: MatchTolerance = field(default=DEFAULT_MATCH_TOLERANCE)
    match_limit: int = DEFAULT_MATCH_LIMIT

    def resolve_week(self, enrollment: Enrollment, reference_date: date) -> WeekBundle:
        """Resolve the enrollment week and the assignments active in it."""
        max_week = self.assignment_resolver.max_week(enrollment.path_id)
        week = resolve_enrollment_week(
            enrollment.start_date, reference_date, max_weeks=max_week
        )
        assignments = self.assignment_resolver.resolve_assignments_for_enrollment_week(
            enrollment.path_id, week, enrollment.selected_variant_option_ids
        )
        return WeekBundle(
            enrollment=enrollment,
            week=week,
            max_week=max_week,
            assignments=assignments,
        )

    def plan_slots(self, enrollment: Enrollment, week: int) -> list[SlotPlan]:
        """Build slot targets for the week's nutrition plans and rank recipes."""
        nutrition_plan_ids = self.assignment_resolver.content_ref_ids(
            enrollment.path_id,
            week,
            enrollment.selected_variant_option_ids,
            AssignmentKind.NUTRITION,
        )
        if not nutrition_plan_ids:
            return []
        entries = self.meal_entry_repository.list_meal_entries(nutrition_plan_ids)
        targets = build_slot_targets(entries)
        recipes = self.recipe_repository.list_matchable_recipes(
            enrollment.selected_variant_option_ids
        )
        plans = [
            SlotPlan(
                slot=slot,
                target=target,
                matches=get_slot_recipe_matches(
                    target, recipes, limit=self.match_limit, tolerance=self.tolerance
                ),
            )
            for slot, target in targets.items()
        ]
        _logger.debug(
            "Slots planned: enrollment=%s week=%s slots=%s recipes=%s",
            enrollment.id,
            week,
            len(plans),
            len(recipes),
        )
        return plans

    def plan_for_date(
        self, enrollment: Enrollment, reference_date: date
    ) -> list[SlotPlan]:
        """Plan the slots of the week containing the reference date."""
        bundle = self.resolve_week(enrollment, reference_date)
        if bundle.week <= 0:
            return []
        return self.plan_slots(enrollment, bundle.week)

"""Recipe matching against slot macro targets."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from coach_planner.domain.nutrition import (
    MacroDiff,
    MatchResult,
    NutritionMatch,
    NutritionTarget,
    RecipeCandidate,
)
from coach_planner.services.nutrition import round_nutrition_value

PROTEIN_SCORE_WEIGHT = 1.25
DEFAULT_MATCH_LIMIT = 5


@dataclass(frozen=True)
class MatchTolerance:
    """Maximum absolute percent deviation per macro for a match."""

    calories_percent: float = 15.0
    protein_percent: float = 10.0
    carbs_percent: float = 15.0
    fat_percent: float = 15.0


DEFAULT_MATCH_TOLERANCE = MatchTolerance()


def percent_diff(target: float, candidate: float) -> float:
    """Return the signed deviation of candidate from target in percent."""
    if target == 0:
        return 0.0 if candidate == 0 else math.inf
    return round_nutrition_value((candidate - target) / target * 100)


def get_nutrition_match_result(
    target: NutritionTarget | RecipeCandidate,
    candidate: NutritionTarget | RecipeCandidate,
    tolerance: MatchTolerance | None = None,
) -> NutritionMatch:
    """Compare one candidate with a target and score the deviation."""
    bands = tolerance or DEFAULT_MATCH_TOLERANCE
    calories = _diff(target.calories, candidate.calories)
    protein = _diff(target.protein, candidate.protein)
    carbs = _diff(target.carbs, candidate.carbs)
    fat = _diff(target.fat, candidate.fat)

    is_match = (
        abs(protein.percent) <= bands.protein_percent
        and abs(calories.percent) <= bands.calories_percent
        and abs(carbs.percent) <= bands.carbs_percent
        and abs(fat.percent) <= bands.fat_percent
    )
    score = round_nutrition_value(
        abs(calories.percent)
        + abs(carbs.percent)
        + abs(fat.percent)
        + abs(protein.percent) * PROTEIN_SCORE_WEIGHT
    )
    return NutritionMatch(
        is_match=is_match,
        score=score,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
    )


def get_slot_recipe_matches(
    target: NutritionTarget,
    recipes: Iterable[RecipeCandidate],
    limit: int = DEFAULT_MATCH_LIMIT,
    tolerance: MatchTolerance | None = None,
) -> list[MatchResult]:
    """Return recipes inside the tolerance bands, best score first."""
    matches: list[MatchResult] = []
    for recipe in recipes:
        result = get_nutrition_match_result(target, recipe, tolerance)
        if not result.is_match:
            continue
        matches.append(
            MatchResult(
                id=recipe.id,
                name=recipe.name,
                score=result.score,
                calories_diff_percent=result.calories.percent,
                protein_diff_percent=result.protein.percent,
                carbs_diff_percent=result.carbs.percent,
                fat_diff_percent=result.fat.percent,
            )
        )
    matches.sort(key=lambda match: (match.score, match.id))
    return matches[: max(limit, 0)]


def _diff(target: float, candidate: float) -> MacroDiff:
    return MacroDiff(
        absolute=round_nutrition_value(candidate - target),
        percent=percent_diff(target, candidate),
    )

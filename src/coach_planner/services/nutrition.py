"""Nutrition scaling and slot target aggregation."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from coach_planner.domain.nutrition import (
    MealEntry,
    MealSlot,
    NutritionComputation,
    NutritionPer100g,
    NutritionTarget,
    NutritionTotals,
    PortionNutrition,
)
from coach_planner.domain.units import ConversionWarning, IngredientConversion, Unit
from coach_planner.services.units import (
    convert_to_grams,
    convert_to_grams_with_metadata,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NutritionInput:
    """One ingredient amount with its per-100 g values and overrides."""

    amount: float
    unit: Unit | str
    nutrition_per_100g: NutritionPer100g
    conversion: IngredientConversion | None = None


def calculate_nutrition_by_100g(
    amount: float, unit: Unit | str, nutrition_per_100g: NutritionPer100g
) -> NutritionTotals:
    """Scale per-100 g values to the given amount. Unknown units raise."""
    grams = convert_to_grams(amount, unit)
    return _scale(nutrition_per_100g, grams)


def calculate_nutrition_with_conversion(
    amount: float,
    unit: Unit | str,
    nutrition_per_100g: NutritionPer100g,
    conversion: IngredientConversion | None = None,
) -> PortionNutrition:
    """Scale per-100 g values leniently, zero-filling unconvertible amounts."""
    result = convert_to_grams_with_metadata(amount, unit, conversion)
    if result.grams is None:
        return PortionNutrition(
            grams=None, totals=NutritionTotals(), warnings=result.warnings
        )
    return PortionNutrition(
        grams=result.grams,
        totals=_scale(nutrition_per_100g, result.grams),
        warnings=result.warnings,
    )


def compute_nutrition_totals(inputs: Iterable[NutritionInput]) -> NutritionComputation:
    """Sum portions, counting the entries whose conversion was estimated."""
    totals = NutritionTotals()
    warnings: list[ConversionWarning] = []
    estimated_entries = 0
    for entry in inputs:
        portion = calculate_nutrition_with_conversion(
            entry.amount, entry.unit, entry.nutrition_per_100g, entry.conversion
        )
        if portion.warnings:
            warnings.extend(portion.warnings)
        if portion.is_estimated:
            estimated_entries += 1
        totals = _add(totals, portion.totals)
    return NutritionComputation(
        totals=totals,
        warnings=warnings,
        warning_count=estimated_entries,
        has_estimated_conversions=estimated_entries > 0,
    )


def round_nutrition_value(value: float) -> float:
    """Round to one decimal for presentation and cached totals."""
    return round(value, 1)


def round_totals(totals: NutritionTotals) -> NutritionTotals:
    """Round every field of a totals record to one decimal."""
    return NutritionTotals(
        grams=round_nutrition_value(totals.grams),
        calories=round_nutrition_value(totals.calories),
        protein=round_nutrition_value(totals.protein),
        carbs=round_nutrition_value(totals.carbs),
        fat=round_nutrition_value(totals.fat),
        fiber=round_nutrition_value(totals.fiber),
        sugar=round_nutrition_value(totals.sugar),
        salt=round_nutrition_value(totals.salt),
    )


def build_slot_nutrition_target(entries: Iterable[MealEntry]) -> NutritionTarget:
    """Aggregate the entries of one meal slot into a macro target."""
    computed = compute_nutrition_totals(
        NutritionInput(
            amount=entry.amount,
            unit=entry.unit,
            nutrition_per_100g=entry.ingredient.nutrition,
            conversion=entry.ingredient.conversion,
        )
        for entry in entries
    )
    rounded = round_totals(computed.totals)
    if computed.has_estimated_conversions:
        _logger.debug(
            "Slot target uses estimated conversions: warnings=%s",
            computed.warning_count,
        )
    return NutritionTarget(
        calories=rounded.calories,
        protein=rounded.protein,
        carbs=rounded.carbs,
        fat=rounded.fat,
        warning_count=computed.warning_count,
        has_estimated_conversions=computed.has_estimated_conversions,
    )


def group_entries_by_slot(
    entries: Iterable[MealEntry],
) -> dict[MealSlot, list[MealEntry]]:
    """Group entries by slot, keyed in canonical day order."""
    grouped: dict[MealSlot, list[MealEntry]] = {}
    for entry in entries:
        grouped.setdefault(MealSlot(entry.slot), []).append(entry)
    return {slot: grouped[slot] for slot in MealSlot if slot in grouped}


def build_slot_targets(
    entries: Iterable[MealEntry],
) -> dict[MealSlot, NutritionTarget]:
    """Build a target for every slot that has entries."""
    return {
        slot: build_slot_nutrition_target(slot_entries)
        for slot, slot_entries in group_entries_by_slot(entries).items()
    }


def _scale(nutrition: NutritionPer100g, grams: float) -> NutritionTotals:
    factor = grams / 100
    return NutritionTotals(
        grams=grams,
        calories=(nutrition.calories or 0.0) * factor,
        protein=(nutrition.protein or 0.0) * factor,
        carbs=(nutrition.carbs or 0.0) * factor,
        fat=(nutrition.fat or 0.0) * factor,
        fiber=(nutrition.fiber or 0.0) * factor,
        sugar=(nutrition.sugar or 0.0) * factor,
        salt=(nutrition.salt or 0.0) * factor,
    )


def _add(left: NutritionTotals, right: NutritionTotals) -> NutritionTotals:
    return NutritionTotals(
        grams=left.grams + right.grams,
        calories=left.calories + right.calories,
        protein=left.protein + right.protein,
        carbs=left.carbs + right.carbs,
        fat=left.fat + right.fat,
        fiber=left.fiber + right.fiber,
        sugar=left.sugar + right.sugar,
        salt=left.salt + right.salt,
    )

"""Nutrition domain models."""

from dataclasses import dataclass, field, fields
from enum import StrEnum

from coach_planner.domain.units import ConversionWarning, IngredientConversion, Unit


class MealSlot(StrEnum):
    """Meal time-of-day buckets, in canonical day order."""

    MORNING = "MORNING"
    SNACK_1 = "SNACK_1"
    LUNCH = "LUNCH"
    SNACK_2 = "SNACK_2"
    DINNER = "DINNER"
    NIGHT = "NIGHT"


@dataclass(frozen=True)
class NutritionPer100g:
    """Macros per 100 g of an ingredient. None means unknown, not zero."""

    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    salt: float | None = None

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if value is not None and value < 0:
                raise ValueError(f"{item.name} must be non-negative, got {value}")


@dataclass(frozen=True)
class Ingredient:
    """Ingredient with nutrition values and unit conversion overrides."""

    id: str
    name: str
    nutrition: NutritionPer100g = field(default_factory=NutritionPer100g)
    conversion: IngredientConversion = field(default_factory=IngredientConversion)


@dataclass(frozen=True)
class MealEntry:
    """An ingredient amount assigned to a meal slot of a nutrition plan."""

    slot: MealSlot
    amount: float
    unit: Unit | str
    ingredient: Ingredient
    nutrition_plan_id: str | None = None


@dataclass(frozen=True)
class RecipeIngredient:
    """An ingredient amount bound to a recipe."""

    recipe_id: str
    amount: float
    unit: Unit | str
    ingredient: Ingredient


@dataclass(frozen=True)
class NutritionTotals:
    """Scaled nutrition values for a portion or a sum of portions."""

    grams: float = 0.0
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    salt: float = 0.0


@dataclass(frozen=True)
class PortionNutrition:
    """Nutrition for one portion computed with lenient conversion."""

    grams: float | None
    totals: NutritionTotals
    warnings: list[ConversionWarning]

    @property
    def is_estimated(self) -> bool:
        """Return True when conversion relied on a default or failed."""
        return self.grams is None or bool(self.warnings)


@dataclass(frozen=True)
class NutritionComputation:
    """Aggregated totals with conversion bookkeeping."""

    totals: NutritionTotals
    warnings: list[ConversionWarning]
    warning_count: int
    has_estimated_conversions: bool


@dataclass(frozen=True)
class NutritionTarget:
    """Macro target for a meal slot."""

    calories: float
    protein: float
    carbs: float
    fat: float
    warning_count: int = 0
    has_estimated_conversions: bool = False


@dataclass(frozen=True)
class RecipeCandidate:
    """Recipe macro profile considered for a slot."""

    id: str
    name: str
    calories: float
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class MacroDiff:
    """Absolute and signed percent difference for one macro."""

    absolute: float
    percent: float


@dataclass(frozen=True)
class NutritionMatch:
    """Match verdict of one candidate against a target."""

    is_match: bool
    score: float
    calories: MacroDiff
    protein: MacroDiff
    carbs: MacroDiff
    fat: MacroDiff


@dataclass(frozen=True)
class MatchResult:
    """Ranked recipe that falls inside the tolerance bands."""

    id: str
    name: str
    score: float
    calories_diff_percent: float
    protein_diff_percent: float
    carbs_diff_percent: float
    fat_diff_percent: float


@dataclass(frozen=True)
class RecipeNutritionSnapshot:
    """Cached macro totals stored on a recipe row."""

    recipe_id: str
    totals: NutritionTotals
    warning_count: int
    has_estimated_conversions: bool


@dataclass(frozen=True)
class SlotPlan:
    """Macro target of a meal slot with its ranked recipe alternatives."""

    slot: MealSlot
    target: NutritionTarget
    matches: list[MatchResult]

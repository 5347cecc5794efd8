"""Models for generated ingredient nutrition suggestions."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

from coach_planner.domain.nutrition import NutritionPer100g
from coach_planner.domain.units import IngredientConversion

NonNegative = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class SuggestedNutrition(BaseModel):
    """Per-100 g values proposed for an ingredient."""

    calories: NonNegative | None
    protein: NonNegative | None
    carbs: NonNegative | None
    fat: NonNegative | None
    fiber: NonNegative | None
    sugar: NonNegative | None
    salt: NonNegative | None

    def to_nutrition(self) -> NutritionPer100g:
        return NutritionPer100g(**self.model_dump())


class SuggestedConversions(BaseModel):
    """Household unit conversion factors proposed for an ingredient."""

    model_config = ConfigDict(populate_by_name=True)

    ml_density_g_per_ml: NonNegative | None = Field(alias="mlDensityGPerMl")
    grams_per_piece: NonNegative | None = Field(alias="gramsPerPiece")
    grams_per_hand: NonNegative | None = Field(alias="gramsPerHand")
    grams_per_teaspoon: NonNegative | None = Field(alias="gramsPerTeaspoon")
    grams_per_tablespoon: NonNegative | None = Field(alias="gramsPerTablespoon")
    grams_per_pinch: NonNegative | None = Field(alias="gramsPerPinch")
    grams_per_cup: NonNegative | None = Field(alias="gramsPerCup")
    grams_per_slice: NonNegative | None = Field(alias="gramsPerSlice")
    grams_per_bunch: NonNegative | None = Field(alias="gramsPerBunch")
    grams_per_can: NonNegative | None = Field(alias="gramsPerCan")

    def to_conversion(self) -> IngredientConversion:
        return IngredientConversion(**self.model_dump())


class IngredientNutritionSuggestion(BaseModel):
    """Structured nutrition suggestion for one ingredient."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    found: StrictBool
    confidence: Literal["HIGH", "MEDIUM", "LOW"]
    reason: StrictStr = Field(min_length=3)
    nutrition_per_100g: SuggestedNutrition = Field(alias="nutritionPer100g")
    conversion_estimates: SuggestedConversions = Field(alias="conversionEstimates")
    needs_alternative_description: StrictBool = Field(
        alias="needsAlternativeDescription"
    )
    suggested_alternative_description: StrictStr | None = Field(
        alias="suggestedAlternativeDescription"
    )

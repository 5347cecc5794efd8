"""Ingredient nutrition suggestions produced by a text generator."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Literal

from pydantic import ValidationError

from coach_planner.domain.errors import SuggestionParseError
from coach_planner.domain.suggestions import IngredientNutritionSuggestion
from coach_planner.services.generation import TextGenerator

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)

_SCHEMA_HINT = (
    '{"found":true|false,"confidence":"HIGH"|"MEDIUM"|"LOW","reason":"...",'
    '"nutritionPer100g":{"calories":number|null,"protein":number|null,'
    '"carbs":number|null,"fat":number|null,"fiber":number|null,'
    '"sugar":number|null,"salt":number|null},'
    '"conversionEstimates":{"mlDensityGPerMl":number|null,'
    '"gramsPerPiece":number|null,"gramsPerHand":number|null,'
    '"gramsPerTeaspoon":number|null,"gramsPerTablespoon":number|null,'
    '"gramsPerPinch":number|null,"gramsPerCup":number|null,'
    '"gramsPerSlice":number|null,"gramsPerBunch":number|null,'
    '"gramsPerCan":number|null},"needsAlternativeDescription":true|false,'
    '"suggestedAlternativeDescription":"string|null"}'
)

_logger = logging.getLogger(__name__)


def extract_json(raw: str) -> str:
    """Pull the JSON object out of a fenced or chatty model reply."""
    fenced = _FENCED_JSON.search(raw)
    if fenced and fenced.group(1).strip():
        return fenced.group(1).strip()
    first_brace = raw.find("{")
    last_brace = raw.rfind("}")
    if first_brace >= 0 and last_brace > first_brace:
        return raw[first_brace : last_brace + 1].strip()
    return raw.strip()


def parse_ingredient_nutrition_suggestion(raw: str) -> IngredientNutritionSuggestion:
    """Parse and validate a model reply into a suggestion."""
    try:
        payload = json.loads(extract_json(raw))
    except json.JSONDecodeError as exc:
        raise SuggestionParseError("Suggestion is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise SuggestionParseError("Suggestion is not a JSON object")
    try:
        return IngredientNutritionSuggestion.model_validate(payload)
    except ValidationError as exc:
        raise SuggestionParseError(f"Suggestion failed validation: {exc}") from exc


def build_suggestion_prompt(
    ingredient_name: str,
    description: str = "",
    alternative_description: str = "",
    language: Literal["de", "en"] = "de",
) -> str:
    """Build the prompt asking for per-100 g values and unit conversions."""
    response_language = "English" if language == "en" else "Deutsch"
    lines = [
        "You are a nutrition data assistant for an admin system.",
        f"Respond in {response_language}.",
        "Search strategy: First look for nutrition values in FDDB (fddb.info) "
        "using German search terms for the ingredient.",
        "If FDDB data is missing, incomplete, or inconsistent, broaden the search "
        "to other reliable nutrition sources and fill remaining gaps.",
        "You must estimate nutrition values per 100g for a single ingredient.",
        "Also estimate practical conversion factors for household units in grams "
        "for this specific ingredient.",
        "If data is uncertain, lower confidence and mark "
        "needsAlternativeDescription=true.",
        "If the ingredient cannot be identified reliably, set found=false and "
        "needsAlternativeDescription=true.",
        "Output strictly valid JSON without markdown fences.",
        "Schema:",
        _SCHEMA_HINT,
        f"Ingredient name: {ingredient_name}",
    ]
    if description:
        lines.append(f"Ingredient description: {description}")
    if alternative_description:
        lines.append(f"Alternative description from admin: {alternative_description}")
    return "\n\n".join(lines)


@dataclass
class IngredientSuggestionService:
    """Asks a text generator for ingredient nutrition data."""

    generator: TextGenerator

    async def suggest(
        self,
        ingredient_name: str,
        description: str = "",
        alternative_description: str = "",
        language: Literal["de", "en"] = "de",
    ) -> IngredientNutritionSuggestion:
        """Generate and validate a suggestion for one ingredient."""
        name = ingredient_name.strip()
        if not name:
            raise ValueError("Ingredient name is required")
        prompt = build_suggestion_prompt(
            name, description.strip(), alternative_description.strip(), language
        )
        raw = await self.generator.generate_text(prompt)
        suggestion = parse_ingredient_nutrition_suggestion(raw)
        _logger.info(
            "Ingredient suggestion parsed: ingredient=%s found=%s confidence=%s",
            name,
            suggestion.found,
            suggestion.confidence,
        )
        return suggestion

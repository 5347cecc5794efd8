"""Conversion of kitchen units into grams."""

import unicodedata

from coach_planner.domain.errors import UnsupportedUnitError
from coach_planner.domain.units import (
    ConversionResult,
    ConversionWarning,
    IngredientConversion,
    Unit,
    WarningCode,
)

_TRANSLITERATIONS = {"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"}

_UNIT_ALIASES: dict[str, Unit] = {
    "g": Unit.G,
    "gram": Unit.G,
    "grams": Unit.G,
    "gramm": Unit.G,
    "kg": Unit.KG,
    "ml": Unit.ML,
    "milliliter": Unit.ML,
    "millilitre": Unit.ML,
    "l": Unit.L,
    "liter": Unit.L,
    "litre": Unit.L,
    "hand": Unit.HAND,
    "hands": Unit.HAND,
    "hande": Unit.HAND,
    "haende": Unit.HAND,
    "el": Unit.EL,
    "tbsp": Unit.EL,
    "essloeffel": Unit.EL,
    "tl": Unit.TL,
    "tsp": Unit.TL,
    "teeloeffel": Unit.TL,
    "stk": Unit.STK,
    "stueck": Unit.STK,
    "stuck": Unit.STK,
    "piece": Unit.STK,
    "pieces": Unit.STK,
    "prise": Unit.PRISE,
    "pinch": Unit.PRISE,
    "tasse": Unit.TASSE,
    "cup": Unit.TASSE,
    "scheibe": Unit.SCHEIBE,
    "slice": Unit.SCHEIBE,
    "bund": Unit.BUND,
    "bunch": Unit.BUND,
    "dose": Unit.DOSE,
    "can": Unit.DOSE,
}

DEFAULT_GRAMS_PER_UNIT: dict[Unit, float] = {
    Unit.HAND: 50.0,
    Unit.EL: 15.0,
    Unit.TL: 5.0,
    Unit.STK: 100.0,
    Unit.PRISE: 0.5,
    Unit.TASSE: 240.0,
    Unit.SCHEIBE: 30.0,
    Unit.BUND: 60.0,
    Unit.DOSE: 400.0,
}

DEFAULT_DENSITY_G_PER_ML = 1.0


def normalize_unit(raw: str) -> str:
    """Fold case, whitespace and diacritics so aliases can be looked up."""
    folded = unicodedata.normalize("NFC", raw.strip()).casefold()
    for source, target in _TRANSLITERATIONS.items():
        folded = folded.replace(source, target)
    decomposed = unicodedata.normalize("NFKD", folded)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def parse_unit(raw: Unit | str) -> Unit | None:
    """Return the canonical unit for raw input, or None when unknown."""
    if isinstance(raw, Unit):
        return raw
    return _UNIT_ALIASES.get(normalize_unit(raw))


def convert_to_grams_with_metadata(
    amount: float,
    unit: Unit | str,
    ingredient: IngredientConversion | None = None,
) -> ConversionResult:
    """Convert to grams without raising; problems are reported as warnings."""
    parsed = parse_unit(unit)
    if parsed is None:
        return ConversionResult(
            grams=None,
            warnings=[
                ConversionWarning(
                    code=WarningCode.UNKNOWN_UNIT,
                    message=f"Unsupported unit: {unit}",
                )
            ],
        )
    conversion = ingredient or IngredientConversion()
    match parsed:
        case Unit.G:
            return ConversionResult(grams=amount)
        case Unit.KG:
            return ConversionResult(grams=amount * 1000)
        case Unit.ML:
            return _convert_volume(amount, 1.0, conversion)
        case Unit.L:
            return _convert_volume(amount, 1000.0, conversion)
        case Unit.HAND:
            return _convert_portion(amount, parsed, conversion.grams_per_hand)
        case Unit.EL:
            return _convert_portion(amount, parsed, conversion.grams_per_tablespoon)
        case Unit.TL:
            return _convert_portion(amount, parsed, conversion.grams_per_teaspoon)
        case Unit.STK:
            return _convert_portion(amount, parsed, conversion.grams_per_piece)
        case Unit.PRISE:
            return _convert_portion(amount, parsed, conversion.grams_per_pinch)
        case Unit.TASSE:
            return _convert_portion(amount, parsed, conversion.grams_per_cup)
        case Unit.SCHEIBE:
            return _convert_portion(amount, parsed, conversion.grams_per_slice)
        case Unit.BUND:
            return _convert_portion(amount, parsed, conversion.grams_per_bunch)
        case Unit.DOSE:
            return _convert_portion(amount, parsed, conversion.grams_per_can)


def convert_to_grams(amount: float, unit: Unit | str) -> float:
    """Convert to grams using default factors; unknown units raise."""
    result = convert_to_grams_with_metadata(amount, unit)
    if result.grams is None:
        raise UnsupportedUnitError(str(unit))
    return result.grams


convert_strict = convert_to_grams
convert_lenient = convert_to_grams_with_metadata


def _convert_volume(
    amount: float, ml_factor: float, conversion: IngredientConversion
) -> ConversionResult:
    density = conversion.ml_density_g_per_ml
    if density is not None:
        return ConversionResult(grams=amount * ml_factor * density)
    return ConversionResult(
        grams=amount * ml_factor * DEFAULT_DENSITY_G_PER_ML,
        warnings=[
            ConversionWarning(
                code=WarningCode.DEFAULT_CONVERSION_USED,
                message="Default density of 1 g/ml used.",
            )
        ],
    )


def _convert_portion(
    amount: float, unit: Unit, override: float | None
) -> ConversionResult:
    if override is not None:
        return ConversionResult(grams=amount * override)
    return ConversionResult(
        grams=amount * DEFAULT_GRAMS_PER_UNIT[unit],
        warnings=[
            ConversionWarning(
                code=WarningCode.DEFAULT_CONVERSION_USED,
                message=f"Default grams per {unit} used.",
            )
        ],
    )

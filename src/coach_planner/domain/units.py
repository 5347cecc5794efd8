"""Domain models for kitchen units and gram conversion."""

from dataclasses import dataclass, field, fields
from enum import StrEnum


class Unit(StrEnum):
    """Closed set of measurement units accepted by the planner."""

    G = "G"
    KG = "KG"
    ML = "ML"
    L = "L"
    EL = "EL"
    TL = "TL"
    HAND = "HAND"
    STK = "STK"
    PRISE = "PRISE"
    TASSE = "TASSE"
    SCHEIBE = "SCHEIBE"
    BUND = "BUND"
    DOSE = "DOSE"


class WarningCode(StrEnum):
    """Codes attached to lenient conversion results."""

    UNKNOWN_UNIT = "UNKNOWN_UNIT"
    DEFAULT_CONVERSION_USED = "DEFAULT_CONVERSION_USED"


@dataclass(frozen=True)
class IngredientConversion:
    """Per-ingredient conversion overrides. None means unknown."""

    grams_per_piece: float | None = None
    grams_per_hand: float | None = None
    grams_per_teaspoon: float | None = None
    grams_per_tablespoon: float | None = None
    grams_per_pinch: float | None = None
    grams_per_cup: float | None = None
    grams_per_slice: float | None = None
    grams_per_bunch: float | None = None
    grams_per_can: float | None = None
    ml_density_g_per_ml: float | None = None

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if value is not None and value < 0:
                raise ValueError(f"{item.name} must be non-negative, got {value}")


@dataclass(frozen=True)
class ConversionWarning:
    """Structured warning emitted by lenient conversion."""

    code: WarningCode
    message: str


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a lenient gram conversion."""

    grams: float | None
    warnings: list[ConversionWarning] = field(default_factory=list)

    @property
    def is_estimated(self) -> bool:
        """Return True when the grams value relies on a default or is missing."""
        return self.grams is None or bool(self.warnings)

"""Domain error hierarchy."""


class CoachPlannerError(Exception):
    """Base class for planning engine errors."""


class ConversionError(CoachPlannerError):
    """Raised when an amount cannot be converted to grams."""


class UnsupportedUnitError(ConversionError):
    """Raised by strict conversion for units outside the known set."""

    def __init__(self, unit: str) -> None:
        super().__init__(f"Unsupported unit: {unit!r}")
        self.unit = unit


class AssignmentNotFoundError(CoachPlannerError):
    """Raised when a path has no content configured for a week."""


class ExternalGenerationError(CoachPlannerError):
    """Raised when the external text generator fails."""


class EnrollmentLockedError(CoachPlannerError):
    """Raised when enrollment variants change after the start date."""


class SuggestionParseError(CoachPlannerError):
    """Raised when an ingredient suggestion payload is invalid."""


class OrderingError(CoachPlannerError):
    """Raised when a requested reorder does not match stored siblings."""

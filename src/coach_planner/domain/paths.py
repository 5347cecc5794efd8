"""Domain models for coaching paths and enrollments."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class AssignmentKind(StrEnum):
    """Kind of content bound to a path week range."""

    TRAINING = "TRAINING"
    NUTRITION = "NUTRITION"
    INFO = "INFO"


@dataclass(frozen=True)
class PathAssignment:
    """Binds one content item to a path, a week range and an optional variant."""

    id: str
    path_id: str
    kind: AssignmentKind
    content_ref_id: str
    week_start: int
    week_end: int
    variant_option_id: str | None = None


@dataclass(frozen=True)
class Enrollment:
    """A user's participation in a path with chosen variant options."""

    id: str
    user_id: str
    path_id: str
    start_date: date
    selected_variant_option_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExercisePosition:
    """Position of an exercise inside a training plan block."""

    id: str
    training_plan_id: str
    block: str
    position: int


@dataclass(frozen=True)
class WeekBundle:
    """Resolved week context for an active enrollment."""

    enrollment: Enrollment
    week: int
    max_week: int
    assignments: list[PathAssignment]

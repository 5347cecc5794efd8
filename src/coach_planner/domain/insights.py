"""Domain models for generated coaching insights."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class InsightKey(StrEnum):
    """Dashboard insight cards."""

    TODAY_FOCUS = "TODAY_FOCUS"
    GOAL_FEEDBACK = "GOAL_FEEDBACK"
    PLAN_SYNC = "PLAN_SYNC"
    MOMENTUM = "MOMENTUM"


class CoachTone(StrEnum):
    """Voice the coach uses in generated text."""

    SUPPORTIVE = "SUPPORTIVE"
    DIRECT = "DIRECT"
    PERFORMANCE = "PERFORMANCE"
    ANALYTICAL = "ANALYTICAL"


@dataclass(frozen=True)
class InsightCacheKey:
    """Identifies the single cache row for a user, week and card."""

    user_id: str
    week: int
    insight_key: str


@dataclass(frozen=True)
class InsightCacheRecord:
    """Persisted generated text with its invalidation metadata."""

    content: str
    context_hash: str
    generated_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class InsightResult:
    """Text returned to callers, with its cache provenance."""

    content: str
    from_cache: bool
    generated_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class InsightContext:
    """Inputs that determine the correctness of an insight card."""

    path_name: str
    week: int
    max_week: int
    tone: CoachTone = CoachTone.SUPPORTIVE
    goal: str | None = None
    today_label: str = "Heute"
    today_training_name: str | None = None
    today_meal_plan_summary: str = "keine Meal-Slots im heutigen Plan"
    today_recipe_suggestion_summary: str = (
        "keine passende Rezept-Alternative im Bestand gefunden"
    )
    info_notes: dict[str, list[str]] = field(default_factory=dict)
    path_progress: float = 0.0
    workout_completed: int = 0
    workout_planned: int = 0
    shopping_done: int = 0
    shopping_total: int = 0
    active_session_day_label: str | None = None
    days_since_start: int = 0
    monday_check_in_note: str | None = None
    sunday_recap_note: str | None = None


@dataclass(frozen=True)
class InsightCard:
    """Titled insight card for the dashboard."""

    key: InsightKey
    title: str
    content: str
    from_cache: bool
    generated_at: datetime
    expires_at: datetime

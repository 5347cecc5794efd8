"""Domain models for path info blocks."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class InfoCategory(StrEnum):
    """Topic an info block belongs to."""

    FOOD = "FOOD"
    WORKOUT = "WORKOUT"
    MOTIVATION = "MOTIVATION"
    GENERAL = "GENERAL"


@dataclass(frozen=True)
class InfoBlock:
    """Editorial content shown for a whole path or a week window."""

    id: str
    name: str
    content_html: str
    category: InfoCategory
    created_at: datetime
    is_full_path: bool = False
    week_start: int | None = None
    week_end: int | None = None
    video_url: str | None = None


@dataclass(frozen=True)
class InfoBlockFeedItem:
    """Info block as listed in a user's weekly feed."""

    id: str
    name: str
    content_html: str
    video_url: str | None
    category: InfoCategory
    is_unread: bool

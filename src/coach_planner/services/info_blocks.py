"""Weekly info-block feed built from a path's INFO assignments."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from coach_planner.domain.info_blocks import InfoBlock, InfoBlockFeedItem, InfoCategory
from coach_planner.domain.paths import AssignmentKind, Enrollment
from coach_planner.services.assignments import AssignmentResolver
from coach_planner.services.insights import INFO_NOTE_LENGTH, strip_html

_logger = logging.getLogger(__name__)


class InfoBlockRepository(Protocol):
    """Persistence interface for info blocks and their read markers."""

    def list_info_blocks(
        self, info_block_ids: list[str], categories: list[InfoCategory]
    ) -> list[InfoBlock]:
        """Return the blocks with the given ids in the given categories."""

    def list_read_info_block_ids(
        self, user_id: str, info_block_ids: list[str]
    ) -> set[str]:
        """Return which of the given blocks the user has read."""

    def mark_read(self, user_id: str, info_block_id: str, read_at: datetime) -> None:
        """Record that a user has read a block."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def is_visible_in_week(block: InfoBlock, week: int) -> bool:
    """Full-path blocks always show, others only inside their week window."""
    if block.is_full_path:
        return True
    if block.week_start is None or block.week_end is None:
        return False
    return block.week_start <= week <= block.week_end


def order_info_blocks(blocks: Iterable[InfoBlock]) -> list[InfoBlock]:
    """Order by category, newest first inside a category."""
    newest_first = sorted(
        blocks, key=lambda block: (block.created_at, block.id), reverse=True
    )
    return sorted(newest_first, key=lambda block: str(block.category))


def build_info_notes(feed: Iterable[InfoBlockFeedItem]) -> dict[str, list[str]]:
    """Group short plain-text notes by category for insight prompts."""
    notes: dict[str, list[str]] = {}
    for item in feed:
        text = f"{item.name}: {strip_html(item.content_html)[:INFO_NOTE_LENGTH]}"
        if len(text) > 3:
            notes.setdefault(str(item.category), []).append(text)
    return notes


@dataclass
class InfoBlockService:
    """Resolves the info blocks a user sees in a path week."""

    assignment_resolver: AssignmentResolver
    repository: InfoBlockRepository
    clock: Callable[[], datetime] = field(default=_utc_now)

    def resolve_user_info_blocks_for_week(
        self,
        user_id: str,
        path_id: str,
        week: int,
        selected_variant_option_ids: Iterable[str],
        categories: Iterable[InfoCategory],
    ) -> list[InfoBlockFeedItem]:
        """Return the week's assigned blocks with their unread state."""
        info_block_ids = self.assignment_resolver.content_ref_ids(
            path_id, week, selected_variant_option_ids, AssignmentKind.INFO
        )
        wanted = list(dict.fromkeys(categories))
        if not info_block_ids or not wanted:
            return []
        blocks = order_info_blocks(
            block
            for block in self.repository.list_info_blocks(info_block_ids, wanted)
            if block.category in wanted and is_visible_in_week(block, week)
        )
        if not blocks:
            return []
        read_ids = self.repository.list_read_info_block_ids(
            user_id, [block.id for block in blocks]
        )
        return [
            InfoBlockFeedItem(
                id=block.id,
                name=block.name,
                content_html=block.content_html,
                video_url=block.video_url,
                category=block.category,
                is_unread=block.id not in read_ids,
            )
            for block in blocks
        ]

    def insight_notes(self, enrollment: Enrollment, week: int) -> dict[str, list[str]]:
        """Return the notes that feed InsightContext.info_notes."""
        feed = self.resolve_user_info_blocks_for_week(
            enrollment.user_id,
            enrollment.path_id,
            week,
            enrollment.selected_variant_option_ids,
            list(InfoCategory),
        )
        return build_info_notes(feed)

    def mark_as_read(self, user_id: str, info_block_id: str) -> None:
        """Mark a block read, refreshing the timestamp when already read."""
        normalized = info_block_id.strip()
        if not normalized:
            raise ValueError("Info block id must not be empty")
        self.repository.mark_read(user_id, normalized, self.clock())
        _logger.info("Info block read: user=%s block=%s", user_id, normalized)

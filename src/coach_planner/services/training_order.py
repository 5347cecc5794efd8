"""Ordering of training plan blocks and exercise positions."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from coach_planner.domain.errors import OrderingError
from coach_planner.domain.paths import ExercisePosition

WARMUP_BLOCK = "WARMUP"
COOLDOWN_BLOCK = "COOLDOWN"
_SET_BLOCK = re.compile(r"^SET-(\d+)$")

_logger = logging.getLogger(__name__)


class ExercisePositionRepository(Protocol):
    """Persistence interface for exercise positions inside plan blocks."""

    def list_block_positions(
        self, training_plan_id: str, block: str
    ) -> list[ExercisePosition]:
        """Return the exercises of one block."""

    def list_plan_blocks(self, training_plan_id: str) -> list[str]:
        """Return the distinct block names used by a training plan."""

    def apply_positions(self, positions: list[ExercisePosition]) -> None:
        """Persist all given positions as one batch."""

    def copy_block(
        self, training_plan_id: str, source_block: str, target_block: str
    ) -> list[ExercisePosition]:
        """Copy every exercise of a block into a new block in one insert."""


def parse_set_index(block: str) -> int | None:
    """Return n for a SET-n block name, otherwise None."""
    match = _SET_BLOCK.match(block.strip().upper())
    if match is None:
        return None
    return int(match.group(1))


def training_block_rank(block: str) -> int:
    """Rank blocks as warm-up, numbered sets, others, then cool-down."""
    normalized = block.strip().upper()
    if normalized == WARMUP_BLOCK:
        return 1
    if normalized == COOLDOWN_BLOCK:
        return 1000
    set_index = parse_set_index(normalized)
    if set_index is not None:
        return 100 + set_index
    return 500


def exercise_sort_key(position: ExercisePosition) -> tuple[int, str, int, str]:
    return (
        training_block_rank(position.block),
        position.block,
        position.position,
        position.id,
    )


def sort_exercises(positions: Iterable[ExercisePosition]) -> list[ExercisePosition]:
    """Sort exercises by block rank, then by position inside the block."""
    return sorted(positions, key=exercise_sort_key)


def next_set_block(blocks: Iterable[str]) -> str:
    """Return the name of the set block following the highest existing one."""
    indices = [
        index for index in (parse_set_index(block) for block in blocks) if index
    ]
    return f"SET-{max(indices, default=0) + 1}"


@dataclass
class TrainingOrderService:
    """Renumbers exercise positions inside training plan blocks."""

    repository: ExercisePositionRepository

    def reorder_block(
        self, training_plan_id: str, block: str, ordered_ids: list[str]
    ) -> list[ExercisePosition]:
        """Apply a full new order for a block and renumber from 1."""
        current = self.repository.list_block_positions(training_plan_id, block)
        current_ids = {position.id for position in current}
        if len(ordered_ids) != len(current) or len(set(ordered_ids)) != len(
            ordered_ids
        ):
            raise OrderingError(
                f"Expected {len(current)} unique exercise ids for block {block}"
            )
        unknown = [item_id for item_id in ordered_ids if item_id not in current_ids]
        if unknown:
            raise OrderingError(f"Unknown exercise ids for block {block}: {unknown}")
        updated = [
            ExercisePosition(
                id=item_id,
                training_plan_id=training_plan_id,
                block=block,
                position=index,
            )
            for index, item_id in enumerate(ordered_ids, start=1)
        ]
        self.repository.apply_positions(updated)
        _logger.info(
            "Exercise block reordered: plan=%s block=%s count=%s",
            training_plan_id,
            block,
            len(updated),
        )
        return updated

    def compact_block(
        self, training_plan_id: str, block: str
    ) -> list[ExercisePosition]:
        """Close gaps in a block's positions, keeping the current order."""
        current = sorted(
            self.repository.list_block_positions(training_plan_id, block),
            key=lambda position: (position.position, position.id),
        )
        return self.reorder_block(
            training_plan_id, block, [position.id for position in current]
        )

    def duplicate_set_block(
        self, training_plan_id: str, source_block: str
    ) -> list[ExercisePosition]:
        """Copy a SET-n block into the next free SET block of the plan."""
        if parse_set_index(source_block) is None:
            raise OrderingError(f"Only set blocks can be duplicated: {source_block}")
        if not self.repository.list_block_positions(training_plan_id, source_block):
            raise OrderingError(f"Block {source_block} has no exercises")
        target_block = next_set_block(
            self.repository.list_plan_blocks(training_plan_id)
        )
        copied = self.repository.copy_block(
            training_plan_id, source_block, target_block
        )
        _logger.info(
            "Set block duplicated: plan=%s source=%s target=%s count=%s",
            training_plan_id,
            source_block,
            target_block,
            len(copied),
        )
        return copied

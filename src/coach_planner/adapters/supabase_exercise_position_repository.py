"""Supabase repository for exercise positions in training plans."""

from dataclasses import dataclass

from supabase import Client

from coach_planner.domain.errors import OrderingError
from coach_planner.domain.paths import ExercisePosition
from coach_planner.services.training_order import ExercisePositionRepository

_TABLE = "training_plan_exercises"


@dataclass
class SupabaseExercisePositionRepository(ExercisePositionRepository):
    """Supabase implementation for exercise positions."""

    client: Client

    def list_block_positions(
        self, training_plan_id: str, block: str
    ) -> list[ExercisePosition]:
        """Return the exercises of one block ordered by position."""
        return [
            _parse_position(row) for row in self._block_rows(training_plan_id, block)
        ]

    def list_plan_blocks(self, training_plan_id: str) -> list[str]:
        """Return the distinct block names used by a training plan."""
        response = (
            self.client.table(_TABLE)
            .select("block")
            .eq("training_plan_id", training_plan_id)
            .execute()
        )
        return list(dict.fromkeys(str(row["block"]) for row in response.data or []))

    def apply_positions(self, positions: list[ExercisePosition]) -> None:
        """Write all positions in a single upsert of complete rows."""
        if not positions:
            return
        ids = [position.id for position in positions]
        response = self.client.table(_TABLE).select("*").in_("id", ids).execute()
        rows = {str(row["id"]): row for row in response.data or []}
        missing = [item_id for item_id in ids if item_id not in rows]
        if missing:
            raise OrderingError(f"Unknown exercise ids: {missing}")
        self.client.table(_TABLE).upsert(
            [
                {**rows[position.id], "position": position.position}
                for position in positions
            ],
            on_conflict="id",
        ).execute()

    def copy_block(
        self, training_plan_id: str, source_block: str, target_block: str
    ) -> list[ExercisePosition]:
        """Insert copies of a block's exercises under a new block name."""
        source_rows = self._block_rows(training_plan_id, source_block)
        if not source_rows:
            return []
        payload = [
            {**_copyable_columns(row), "block": target_block} for row in source_rows
        ]
        response = self.client.table(_TABLE).insert(payload).execute()
        return [_parse_position(row) for row in response.data or []]

    def _block_rows(
        self, training_plan_id: str, block: str
    ) -> list[dict[str, object]]:
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("training_plan_id", training_plan_id)
            .eq("block", block)
            .order("position")
            .execute()
        )
        return list(response.data or [])


def _parse_position(row: dict[str, object]) -> ExercisePosition:
    return ExercisePosition(
        id=str(row["id"]),
        training_plan_id=str(row["training_plan_id"]),
        block=str(row["block"]),
        position=int(row["position"]),
    )


def _copyable_columns(row: dict[str, object]) -> dict[str, object]:
    return {
        key: value
        for key, value in row.items()
        if key not in {"id", "created_at", "updated_at"}
    }

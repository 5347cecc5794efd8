"""Supabase repository for path assignments."""

from dataclasses import dataclass

from supabase import Client

from coach_planner.domain.paths import AssignmentKind, PathAssignment
from coach_planner.services.assignments import AssignmentRepository


@dataclass
class SupabaseAssignmentRepository(AssignmentRepository):
    """Supabase implementation for path assignments."""

    client: Client

    def list_path_assignments(self, path_id: str) -> list[PathAssignment]:
        """Return every assignment configured for a path."""
        response = (
            self.client.table("path_assignments")
            .select("*")
            .eq("path_id", path_id)
            .execute()
        )
        return [_parse_assignment(row) for row in response.data or []]


def _parse_assignment(row: dict[str, object]) -> PathAssignment:
    variant_option_id = row.get("variant_option_id")
    return PathAssignment(
        id=str(row["id"]),
        path_id=str(row["path_id"]),
        kind=AssignmentKind(str(row["kind"])),
        content_ref_id=str(row.get("content_ref_id") or ""),
        week_start=int(row["week_start"]),
        week_end=int(row["week_end"]),
        variant_option_id=str(variant_option_id) if variant_option_id else None,
    )

"""Resolution of path content for an enrollment week."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from coach_planner.domain.errors import AssignmentNotFoundError
from coach_planner.domain.paths import AssignmentKind, PathAssignment

_logger = logging.getLogger(__name__)


class AssignmentRepository(Protocol):
    """Read interface for path assignments."""

    def list_path_assignments(self, path_id: str) -> list[PathAssignment]:
        """Return every assignment configured for a path."""


def assignment_sort_key(
    assignment: PathAssignment,
) -> tuple[int, str, str, int, str, str]:
    """Total ordering used wherever assignment order must be stable."""
    return (
        assignment.week_start,
        str(assignment.kind),
        assignment.content_ref_id,
        assignment.week_end,
        assignment.variant_option_id or "",
        assignment.id,
    )


def select_assignments(
    assignments: Iterable[PathAssignment],
    path_id: str,
    week: int,
    selected_variant_option_ids: Iterable[str],
    kind: AssignmentKind | None = None,
) -> list[PathAssignment]:
    """Filter assignments active for the week and the chosen variants."""
    selected = set(selected_variant_option_ids)
    matching = [
        assignment
        for assignment in assignments
        if assignment.path_id == path_id
        and assignment.week_start <= week <= assignment.week_end
        and (
            assignment.variant_option_id is None
            or assignment.variant_option_id in selected
        )
        and (kind is None or assignment.kind == kind)
    ]
    return sorted(matching, key=assignment_sort_key)


@dataclass
class AssignmentResolver:
    """Resolves which content applies to an enrollment week."""

    repository: AssignmentRepository

    def resolve_assignments_for_enrollment_week(
        self,
        path_id: str,
        week: int,
        selected_variant_option_ids: Iterable[str],
        kind: AssignmentKind | None = None,
    ) -> list[PathAssignment]:
        """Return the assignments active in a week, in a stable order."""
        if week <= 0:
            return []
        resolved = select_assignments(
            self.repository.list_path_assignments(path_id),
            path_id=path_id,
            week=week,
            selected_variant_option_ids=selected_variant_option_ids,
            kind=kind,
        )
        if not resolved:
            _logger.info(
                "No assignments configured: path=%s week=%s kind=%s",
                path_id,
                week,
                kind,
            )
        return resolved

    def content_ref_ids(
        self,
        path_id: str,
        week: int,
        selected_variant_option_ids: Iterable[str],
        kind: AssignmentKind,
    ) -> list[str]:
        """Return de-duplicated content ids for one kind, in resolved order."""
        assignments = self.resolve_assignments_for_enrollment_week(
            path_id, week, selected_variant_option_ids, kind
        )
        return list(
            dict.fromkeys(
                assignment.content_ref_id
                for assignment in assignments
                if assignment.content_ref_id
            )
        )

    def require_content_ref_ids(
        self,
        path_id: str,
        week: int,
        selected_variant_option_ids: Iterable[str],
        kind: AssignmentKind,
    ) -> list[str]:
        """Like content_ref_ids, but raise when the week is not configured."""
        ids = self.content_ref_ids(path_id, week, selected_variant_option_ids, kind)
        if not ids:
            raise AssignmentNotFoundError(
                f"No {kind} content for path {path_id} in week {week}"
            )
        return ids

    def max_week(self, path_id: str) -> int:
        """Return the last configured week of a path, or 0 when empty."""
        assignments = self.repository.list_path_assignments(path_id)
        return max((assignment.week_end for assignment in assignments), default=0)

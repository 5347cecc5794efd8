"""Enrollment variant changes."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol

from coach_planner.domain.errors import EnrollmentLockedError
from coach_planner.domain.paths import Enrollment

_logger = logging.getLogger(__name__)


class EnrollmentRepository(Protocol):
    """Persistence interface for enrollments."""

    def get_enrollment(self, enrollment_id: str) -> Enrollment | None:
        """Return an enrollment by id, if present."""

    def get_active_enrollment(self, user_id: str) -> Enrollment | None:
        """Return the user's active enrollment, if any."""

    def update_selected_variants(
        self, enrollment_id: str, variant_option_ids: list[str]
    ) -> None:
        """Replace the selected variant options of an enrollment."""


def can_update_enrollment_variants(start_date: date, reference_date: date) -> bool:
    """Variants stay editable until the enrollment starts."""
    return reference_date < start_date


@dataclass
class EnrollmentService:
    """Reads enrollments and guards variant changes."""

    repository: EnrollmentRepository

    def get_active_enrollment(self, user_id: str) -> Enrollment | None:
        return self.repository.get_active_enrollment(user_id)

    def update_variants(
        self,
        enrollment_id: str,
        variant_option_ids: Iterable[str],
        reference_date: date,
    ) -> Enrollment | None:
        """Replace chosen variants, refusing once the enrollment has started."""
        enrollment = self.repository.get_enrollment(enrollment_id)
        if enrollment is None:
            return None
        if not can_update_enrollment_variants(enrollment.start_date, reference_date):
            raise EnrollmentLockedError(
                f"Enrollment {enrollment_id} started on {enrollment.start_date}"
            )
        selected = list(dict.fromkeys(variant_option_ids))
        self.repository.update_selected_variants(enrollment_id, selected)
        _logger.info(
            "Enrollment variants updated: enrollment=%s options=%s",
            enrollment_id,
            len(selected),
        )
        return replace(enrollment, selected_variant_option_ids=selected)

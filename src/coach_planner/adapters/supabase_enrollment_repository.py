"""Supabase repository for path enrollments."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from coach_planner.domain.paths import Enrollment
from coach_planner.services.enrollments import EnrollmentRepository


@dataclass
class SupabaseEnrollmentRepository(EnrollmentRepository):
    """Supabase implementation for enrollments and their variant choices."""

    client: Client

    def get_enrollment(self, enrollment_id: str) -> Enrollment | None:
        """Return an enrollment by id, if present."""
        response = (
            self.client.table("path_enrollments")
            .select("*")
            .eq("id", enrollment_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_variants(response.data[0])

    def get_active_enrollment(self, user_id: str) -> Enrollment | None:
        """Return the most recently started active enrollment of a user."""
        response = (
            self.client.table("path_enrollments")
            .select("*")
            .eq("user_id", user_id)
            .eq("is_active", True)
            .order("start_date", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return self._with_variants(response.data[0])

    def update_selected_variants(
        self, enrollment_id: str, variant_option_ids: list[str]
    ) -> None:
        """Replace the variant selection rows of an enrollment.

        New rows are written before stale ones are removed, so a failed write
        keeps the previous selection.
        """
        table = self.client.table("path_enrollment_variants")
        if not variant_option_ids:
            table.delete().eq("enrollment_id", enrollment_id).execute()
            return
        table.upsert(
            [
                {"enrollment_id": enrollment_id, "variant_option_id": option_id}
                for option_id in variant_option_ids
            ],
            on_conflict="enrollment_id,variant_option_id",
        ).execute()
        (
            table.delete()
            .eq("enrollment_id", enrollment_id)
            .not_.in_("variant_option_id", variant_option_ids)
            .execute()
        )

    def _with_variants(self, row: dict[str, object]) -> Enrollment:
        response = (
            self.client.table("path_enrollment_variants")
            .select("variant_option_id")
            .eq("enrollment_id", str(row["id"]))
            .execute()
        )
        return Enrollment(
            id=str(row["id"]),
            user_id=str(row["user_id"]),
            path_id=str(row["path_id"]),
            start_date=_parse_date(row["start_date"]),
            selected_variant_option_ids=[
                str(item["variant_option_id"]) for item in response.data or []
            ],
        )


def _parse_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value)
    if "T" in raw:
        return datetime.fromisoformat(raw).date()
    return date.fromisoformat(raw)

"""Supabase repository for info blocks and read markers."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from coach_planner.domain.info_blocks import InfoBlock, InfoCategory
from coach_planner.services.info_blocks import InfoBlockRepository


@dataclass
class SupabaseInfoBlockRepository(InfoBlockRepository):
    """Supabase implementation for info blocks."""

    client: Client

    def list_info_blocks(
        self, info_block_ids: list[str], categories: list[InfoCategory]
    ) -> list[InfoBlock]:
        """Return blocks by id and category, ordered by category then newest."""
        if not info_block_ids or not categories:
            return []
        response = (
            self.client.table("info_blocks")
            .select("*")
            .in_("id", info_block_ids)
            .in_("category", [str(category) for category in categories])
            .order("category")
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_info_block(row) for row in response.data or []]

    def list_read_info_block_ids(
        self, user_id: str, info_block_ids: list[str]
    ) -> set[str]:
        """Return the ids of blocks the user has read."""
        if not info_block_ids:
            return set()
        response = (
            self.client.table("user_info_block_reads")
            .select("info_block_id")
            .eq("user_id", user_id)
            .in_("info_block_id", info_block_ids)
            .execute()
        )
        return {str(row["info_block_id"]) for row in response.data or []}

    def mark_read(self, user_id: str, info_block_id: str, read_at: datetime) -> None:
        """Insert or refresh the read marker of a block."""
        self.client.table("user_info_block_reads").upsert(
            {
                "user_id": user_id,
                "info_block_id": info_block_id,
                "read_at": read_at.isoformat(),
            },
            on_conflict="user_id,info_block_id",
        ).execute()


def _optional_int(value: object) -> int | None:
    if value is None:
        return None
    return int(value)


def _parse_info_block(row: dict[str, object]) -> InfoBlock:
    video_url = row.get("video_url")
    return InfoBlock(
        id=str(row["id"]),
        name=str(row["name"]),
        content_html=str(row.get("content_html") or ""),
        category=InfoCategory(str(row["category"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        is_full_path=bool(row.get("is_full_path")),
        week_start=_optional_int(row.get("week_start")),
        week_end=_optional_int(row.get("week_end")),
        video_url=str(video_url) if video_url else None,
    )

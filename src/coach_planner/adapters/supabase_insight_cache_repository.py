"""Supabase store for generated insight text."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from coach_planner.domain.insights import InsightCacheKey, InsightCacheRecord
from coach_planner.services.cache import InsightCacheStore


@dataclass
class SupabaseInsightCacheRepository(InsightCacheStore):
    """Supabase implementation for the insight cache."""

    client: Client

    def get(self, key: InsightCacheKey) -> InsightCacheRecord | None:
        """Return the stored record for a key, if present."""
        response = (
            self.client.table("dashboard_insight_cache")
            .select("content, context_hash, generated_at, expires_at")
            .eq("user_id", key.user_id)
            .eq("week", key.week)
            .eq("insight_key", key.insight_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return InsightCacheRecord(
            content=str(row["content"]),
            context_hash=str(row["context_hash"]),
            generated_at=datetime.fromisoformat(str(row["generated_at"])),
            expires_at=datetime.fromisoformat(str(row["expires_at"])),
        )

    def upsert(self, key: InsightCacheKey, record: InsightCacheRecord) -> None:
        """Insert or replace the single row stored for a key."""
        self.client.table("dashboard_insight_cache").upsert(
            {
                "user_id": key.user_id,
                "week": key.week,
                "insight_key": str(key.insight_key),
                "content": record.content,
                "context_hash": record.context_hash,
                "generated_at": record.generated_at.isoformat(),
                "expires_at": record.expires_at.isoformat(),
            },
            on_conflict="user_id,week,insight_key",
        ).execute()

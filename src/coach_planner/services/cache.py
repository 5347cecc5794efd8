"""Storage abstractions for generated insight text."""

from dataclasses import dataclass
from typing import Protocol

from coach_planner.domain.insights import InsightCacheKey, InsightCacheRecord


class InsightCacheStore(Protocol):
    """Key-value store holding one insight record per cache key."""

    def get(self, key: InsightCacheKey) -> InsightCacheRecord | None:
        """Return the stored record for a key, expired or not."""

    def upsert(self, key: InsightCacheKey, record: InsightCacheRecord) -> None:
        """Insert or replace the record for a key."""


@dataclass
class InMemoryInsightCacheStore(InsightCacheStore):
    """In-memory insight store for tests and local runs."""

    _records: dict[InsightCacheKey, InsightCacheRecord]

    def __init__(self) -> None:
        self._records = {}

    def get(self, key: InsightCacheKey) -> InsightCacheRecord | None:
        """Return the stored record, leaving expiry decisions to the caller."""
        return self._records.get(key)

    def upsert(self, key: InsightCacheKey, record: InsightCacheRecord) -> None:
        """Replace the record for a key."""
        self._records[key] = record

    def __len__(self) -> int:
        return len(self._records)

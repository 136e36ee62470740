"""Time-expiring cache of completed summaries keyed by paper id."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from loguru import logger

from quickxiv.summary.models import DocumentSnapshot, PaperDocument, SummaryResult

from .store import KeyValueStore


CACHE_PREFIX = "summary_"
DEFAULT_TTL = timedelta(days=7)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class CacheEntry:
    """A cached summary together with the document metadata it belongs to."""

    document_snapshot: DocumentSnapshot
    summary: SummaryResult
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "document_snapshot": self.document_snapshot.to_dict(),
            "summary": self.summary.to_dict(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CacheEntry":
        created_at = datetime.fromisoformat(payload["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            document_snapshot=DocumentSnapshot.from_dict(payload["document_snapshot"]),
            summary=SummaryResult.from_dict(payload["summary"]),
            created_at=created_at,
        )


def cache_key(paper_id: str) -> str:
    return CACHE_PREFIX + paper_id


class SummaryCache:
    """Whole-entry cache with lazy expiry on read."""

    def __init__(self, store: KeyValueStore, *, ttl: timedelta = DEFAULT_TTL, clock: Clock = utc_now) -> None:
        self._store = store
        self._ttl = ttl
        self._clock = clock

    def get(self, paper_id: str) -> CacheEntry | None:
        key = cache_key(paper_id)
        payload = self._store.get(key)
        if payload is None:
            return None

        try:
            entry = CacheEntry.from_dict(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Dropping unreadable cache entry for {}: {}", paper_id, exc)
            self._store.remove(key)
            return None

        if self._clock() - entry.created_at > self._ttl:
            logger.info("Cached summary for {} expired (created {})", paper_id, entry.created_at.isoformat())
            self._store.remove(key)
            return None
        return entry

    def set(self, paper_id: str, document: PaperDocument | DocumentSnapshot, summary: SummaryResult) -> CacheEntry:
        if isinstance(document, PaperDocument):
            snapshot = DocumentSnapshot.from_dict(document.snapshot())
        else:
            snapshot = document
        entry = CacheEntry(document_snapshot=snapshot, summary=summary, created_at=self._clock())
        self._store.set(cache_key(paper_id), entry.to_dict())
        logger.info("Summary cached for {}", paper_id)
        return entry

    def clear(self) -> int:
        """Remove every cached summary and return how many were dropped."""
        keys = [key for key in self._store.keys() if key.startswith(CACHE_PREFIX)]
        for key in keys:
            self._store.remove(key)
        return len(keys)


__all__ = ["CACHE_PREFIX", "DEFAULT_TTL", "CacheEntry", "SummaryCache", "cache_key", "utc_now"]

"""Aggregate request and token counts across summarizations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .cache import Clock, utc_now
from .store import KeyValueStore


USAGE_KEY = "usage"
HISTORY_LIMIT = 20
TITLE_LIMIT = 80
CHARS_PER_TOKEN = 4


def estimate_tokens(chars: int) -> int:
    """Rough token estimate (~4 characters per token), rounding halves up."""
    return math.floor(chars / CHARS_PER_TOKEN + 0.5)


def format_count(value: int) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}k"
    return str(value)


@dataclass(slots=True)
class UsageRecord:
    title: str
    tokens: int
    date: str


@dataclass(slots=True)
class UsageAggregate:
    """Counters plus the most recent requests, newest first."""

    request_count: int = 0
    token_count: int = 0
    unique_document_ids: set[str] = field(default_factory=set)
    history: list[UsageRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_count": self.request_count,
            "token_count": self.token_count,
            "unique_document_ids": sorted(self.unique_document_ids),
            "history": [
                {"title": record.title, "tokens": record.tokens, "date": record.date}
                for record in self.history
            ],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "UsageAggregate":
        if not payload:
            return cls()
        return cls(
            request_count=int(payload.get("request_count", 0)),
            token_count=int(payload.get("token_count", 0)),
            unique_document_ids={str(item) for item in payload.get("unique_document_ids", [])},
            history=[
                UsageRecord(
                    title=str(item.get("title", "")),
                    tokens=int(item.get("tokens", 0)),
                    date=str(item.get("date", "")),
                )
                for item in payload.get("history", [])
            ],
        )


def _read_usage(payload: Any) -> UsageAggregate:
    try:
        return UsageAggregate.from_dict(payload)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable usage statistics: {}", exc)
        return UsageAggregate()


class UsageTracker:
    """Owns the persisted :class:`UsageAggregate`."""

    def __init__(self, store: KeyValueStore, *, clock: Clock = utc_now) -> None:
        self._store = store
        self._clock = clock

    def load(self) -> UsageAggregate:
        return _read_usage(self._store.get(USAGE_KEY))

    def record(self, paper_id: str, title: str, input_chars: int, output_chars: int) -> UsageAggregate:
        tokens = estimate_tokens(input_chars) + estimate_tokens(output_chars)
        entry = UsageRecord(title=title[:TITLE_LIMIT], tokens=tokens, date=self._clock().isoformat())

        def _apply(current: Any) -> dict[str, Any]:
            usage = _read_usage(current)
            usage.request_count += 1
            usage.token_count += tokens
            usage.unique_document_ids.add(paper_id)
            usage.history.insert(0, entry)
            del usage.history[HISTORY_LIMIT:]
            return usage.to_dict()

        updated = UsageAggregate.from_dict(self._store.update(USAGE_KEY, _apply))
        logger.debug(
            "Recorded usage for {}: {} tokens (total requests={}, tokens={})",
            paper_id,
            tokens,
            updated.request_count,
            updated.token_count,
        )
        return updated

    def reset(self) -> UsageAggregate:
        usage = UsageAggregate()
        self._store.set(USAGE_KEY, usage.to_dict())
        logger.info("Usage statistics reset")
        return usage


__all__ = [
    "USAGE_KEY",
    "HISTORY_LIMIT",
    "UsageRecord",
    "UsageAggregate",
    "UsageTracker",
    "estimate_tokens",
    "format_count",
]

"""Persistence for cached summaries and usage statistics."""

from __future__ import annotations

from .cache import CacheEntry, SummaryCache
from .store import JsonFileStore, KeyValueStore, MemoryStore
from .usage import UsageAggregate, UsageRecord, UsageTracker, format_count

__all__ = [
    "CacheEntry",
    "SummaryCache",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "UsageAggregate",
    "UsageRecord",
    "UsageTracker",
    "format_count",
]

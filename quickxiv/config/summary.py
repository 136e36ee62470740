"""Summary, fetch and cache configuration models."""

from __future__ import annotations

from pydantic import Field

from quickxiv.config.base import BaseConfig


class SummaryConfig(BaseConfig):
    """Controls for prompt input size and live rendering."""

    model: str = Field(..., description="LLM alias to use for summarisation")
    max_chars: int = Field(12000, ge=100, description="Character budget for the serialized paper text")
    head_ratio: float = Field(0.7, gt=0.0, lt=1.0, description="Share of the budget kept from the start of the text")
    render_interval_ms: int = Field(150, ge=0, description="Minimum delay between partial renders")


class FetchConfig(BaseConfig):
    """Network settings for downloading paper HTML."""

    html_base_url: str = Field(
        "https://ar5iv.labs.arxiv.org/html/",
        description="Prefix joined with the paper id to obtain the rendered HTML",
    )
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    user_agent: str = Field("quickxiv/0.1", description="User-Agent header for HTML downloads")


class CacheConfig(BaseConfig):
    """Local persistence for summaries and usage statistics."""

    store_path: str = Field("./state/quickxiv.json", description="JSON file backing the key/value store")
    ttl_days: int = Field(7, ge=1, description="Days before a cached summary expires")


__all__ = ["SummaryConfig", "FetchConfig", "CacheConfig"]

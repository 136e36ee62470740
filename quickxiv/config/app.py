"""Application-level configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field

from quickxiv.config.base import BaseConfig
from quickxiv.config.llm import LLMConfig
from quickxiv.config.summary import CacheConfig, FetchConfig, SummaryConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the entire application."""

    data_root: Path | None = Field(None, description="Base directory for relative paths (defaults to the config file's directory)")
    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")

    summary: SummaryConfig | None = Field(None, description="Summarisation settings")
    fetch: FetchConfig = Field(default_factory=FetchConfig, description="Paper HTML download settings")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="Summary cache and usage store settings")
    llms: list[LLMConfig] = Field(default_factory=list, description="Available LLM configurations")

    def resolve_llm(self, alias: str) -> LLMConfig:
        for llm in self.llms:
            if llm.alias == alias:
                return llm
        raise ValueError(f"LLM alias '{alias}' not found in configuration")


__all__ = ["AppConfig"]

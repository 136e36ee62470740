"""Configuration namespace for quickxiv."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .llm import LLMConfig
from .summary import CacheConfig, FetchConfig, SummaryConfig
from .utils import env_variable_name, resolve_api_key

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "CacheConfig",
    "FetchConfig",
    "LLMConfig",
    "SummaryConfig",
    "env_variable_name",
    "resolve_api_key",
]

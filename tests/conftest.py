"""Pytest helpers for path configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from quickxiv.config import LLMConfig  # noqa: E402


@pytest.fixture()
def llm_config() -> LLMConfig:
    return LLMConfig(
        alias="test-llm",
        name="test/model",
        base_url="http://localhost/v1/chat/completions",
        api_key="dummy-key",
        temperature=0.5,
        top_p=0.7,
        max_tokens=1500,
        timeout=5.0,
    )

"""LLM endpoint configuration models."""

from __future__ import annotations

from pydantic import Field

from quickxiv.config.base import BaseConfig
from quickxiv.config.utils import resolve_api_key


class LLMConfig(BaseConfig):
    """Configuration for a single streaming chat-completion endpoint."""

    alias: str = Field(..., description="Model alias for reference")
    name: str = Field(..., description="Model name/identifier sent in the request body")
    base_url: str = Field(
        "https://router.huggingface.co/v1/chat/completions",
        description="Chat-completions URL accepting streaming requests",
    )
    api_key: str = Field(..., description="API key, can use 'env:VAR_NAME' format")
    temperature: float = Field(0.5, ge=0.0, le=2.0, description="Sampling temperature")
    top_p: float = Field(0.7, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    max_tokens: int = Field(1500, ge=1, description="Maximum number of generated tokens")
    timeout: float = Field(120.0, gt=0, description="Connect/read timeout in seconds")

    @property
    def api_key_secret(self) -> str:
        """Return the resolved API key, expanding any ``env:VAR`` references."""

        return resolve_api_key(self.api_key, alias=self.alias)


__all__ = ["LLMConfig"]

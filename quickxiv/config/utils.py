"""API key references for configured LLM endpoints."""

from __future__ import annotations

import os

ENV_PREFIX = "env:"


def env_variable_name(api_key: str) -> str | None:
    """Return ``VAR`` for an ``env:VAR`` key, or ``None`` for a literal key."""

    if api_key.startswith(ENV_PREFIX):
        return api_key[len(ENV_PREFIX):].strip()
    return None


def resolve_api_key(api_key: str, *, alias: str = "") -> str:
    """Expand ``api_key`` into the bearer token sent to the endpoint.

    Literal keys are returned unchanged. ``env:VAR`` keys are read from the
    environment; a missing or empty variable raises :class:`EnvironmentError`
    naming the LLM alias and the variable.
    """

    var_name = env_variable_name(api_key)
    if var_name is None:
        return api_key

    value = os.getenv(var_name)
    if not value:
        owner = f" for LLM '{alias}'" if alias else ""
        raise EnvironmentError(f"API key{owner} reads environment variable '{var_name}', which is not set")
    return value


__all__ = ["ENV_PREFIX", "env_variable_name", "resolve_api_key"]

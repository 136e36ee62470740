"""Base configuration model and TOML loader."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


class BaseConfig(BaseModel):
    """Strict pydantic model shared by every configuration block."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


def load_config(config_cls: type[ConfigT], path: Path | str) -> ConfigT:
    """Load ``path`` as TOML and validate it against ``config_cls``.

    Raises :class:`FileNotFoundError` when the file does not exist and
    :class:`ValueError` when the document is not valid TOML.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open("rb") as fp:
            payload = tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {config_path}: {exc}") from exc

    return config_cls.model_validate(payload)


__all__ = ["BaseConfig", "load_config"]

"""Validation and self-documentation for configuration files."""

from __future__ import annotations

import os
from pathlib import Path
from types import UnionType
from typing import Any, Iterable, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError
from pydantic.fields import FieldInfo

from .app import AppConfig
from .base import load_config
from .utils import env_variable_name


class ConfigInspectionError(RuntimeError):
    """Raised when configuration inspection fails unexpectedly."""


CheckResult = tuple[dict[str, Any], int, AppConfig | None]


def check_config(path: Path, *, config_cls: type[AppConfig] = AppConfig) -> CheckResult:
    """Validate the configuration file and collect warnings.

    Returns ``(result_dict, exit_code, config_or_None)``. Exit codes: 0 for a
    valid file, 1 for unreadable TOML, 2 for a missing or unreadable file and
    3 for schema violations.
    """

    try:
        config = load_config(config_cls, path)
    except FileNotFoundError as exc:
        return _error(path, "missing_file", str(exc), 2)
    except ValidationError as exc:
        details = [
            {"loc": _format_location(err["loc"]), "message": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        return _error(path, "validation_error", "Configuration validation failed", 3, details=details)
    except PermissionError as exc:
        return _error(path, "permission_error", str(exc), 2)
    except ValueError as exc:
        return _error(path, "invalid_format", str(exc), 1)
    except Exception as exc:  # pragma: no cover - unexpected failures
        raise ConfigInspectionError("Unexpected configuration inspection error") from exc

    return {"status": "ok", "config_path": str(path), "warnings": _collect_warnings(config)}, 0, config


def explain_config(*, config_cls: type[BaseModel] = AppConfig) -> list[dict[str, Any]]:
    """Flatten the configuration schema into documented field entries."""

    entries: list[dict[str, Any]] = []

    def _walk(model_cls: type[BaseModel], prefix: str) -> None:
        for field_name, field in model_cls.model_fields.items():
            name = f"{prefix}{field_name}"
            entries.append(
                {
                    "name": name,
                    "type": _format_annotation(field.annotation),
                    "required": field.is_required(),
                    "default": _format_default(field),
                    "description": field.description or "",
                }
            )
            nested = _nested_model(field.annotation)
            if nested is not None:
                model, is_list = nested
                _walk(model, f"{name}[]." if is_list else f"{name}.")

    _walk(config_cls, "")
    return entries


def _error(
    path: Path,
    kind: str,
    message: str,
    exit_code: int,
    *,
    details: list[dict[str, Any]] | None = None,
) -> CheckResult:
    error: dict[str, Any] = {"type": kind, "message": message}
    if details is not None:
        error["details"] = details
    return {"status": "error", "config_path": str(path), "error": error}, exit_code, None


def _format_location(location: Iterable[Union[int, str]]) -> str:
    return ".".join(str(part) for part in location)


def _collect_warnings(config: AppConfig) -> list[str]:
    warnings: list[str] = []

    if not config.llms:
        warnings.append("No LLM configurations defined; summarize will not function")
    if config.summary is None:
        warnings.append("No [summary] block configured; summarize will not function")
    elif config.llms and all(llm.alias != config.summary.model for llm in config.llms):
        warnings.append(f"Summary model alias '{config.summary.model}' does not match any [[llms]] entry")
    for llm in config.llms:
        var_name = env_variable_name(llm.api_key)
        if var_name is not None and not os.getenv(var_name):
            warnings.append(f"API key for '{llm.alias}' references unset variable '{var_name}'")

    return warnings


def _format_annotation(annotation: Any) -> str:
    origin = get_origin(annotation)
    if origin is None:
        if isinstance(annotation, type):
            return annotation.__name__
        return repr(annotation).replace("typing.", "")

    args = get_args(annotation)
    if origin in {Union, UnionType}:
        non_none = [arg for arg in args if arg is not type(None)]  # noqa: E721
        if len(non_none) == 1 and len(args) == 2:
            return f"Optional[{_format_annotation(non_none[0])}]"
        return "Union[" + ", ".join(_format_annotation(arg) for arg in args) + "]"

    origin_name = getattr(origin, "__name__", repr(origin).replace("typing.", ""))
    if args:
        return f"{origin_name}[" + ", ".join(_format_annotation(arg) for arg in args) + "]"
    return origin_name


def _format_default(field: FieldInfo) -> Any:
    if field.default_factory is not None:
        value = field.default_factory()  # type: ignore[call-arg]
    elif field.is_required():
        return None
    else:
        value = field.default
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    return value


def _nested_model(annotation: Any) -> tuple[type[BaseModel], bool] | None:
    """Return the pydantic model wrapped by ``annotation`` and whether it is a list."""

    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation, False
    origin = get_origin(annotation)
    for arg in get_args(annotation):
        if isinstance(arg, type) and issubclass(arg, BaseModel):
            return arg, origin in {list, tuple, set}
    return None


__all__ = ["check_config", "explain_config", "ConfigInspectionError"]

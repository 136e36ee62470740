"""Command line interface for the quickxiv toolkit."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

import typer
from loguru import logger

from .config import AppConfig, load_config
from .config.inspector import check_config, explain_config
from .service import SummarizationInProgressError, SummaryService, SummarySession
from .storage import JsonFileStore, SummaryCache, UsageTracker, format_count
from .summary.fetcher import PaperFetchError, resolve_paper_reference
from .summary.renderer import SummaryRenderer
from .summary.streaming import SummarizationError


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            logger.info("Loading configuration from {}", self.config_path)
            self._config = load_config(AppConfig, self.config_path)
        return self._config

    def base_path(self) -> Path:
        config = self.ensure_config()
        base_path = config.data_root
        if base_path is None:
            return self.config_path.parent
        if not base_path.is_absolute():
            return (self.config_path.parent / base_path).resolve()
        return base_path


app = typer.Typer(help="Stream structured summaries of arXiv papers")
config_app = typer.Typer(help="Validate and document configuration files")
app.add_typer(config_app, name="config")
cache_app = typer.Typer(help="Manage cached summaries")
app.add_typer(cache_app, name="cache")


def _default_config_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / "config" / "example.toml"


def _normalize_format(value: str) -> str:
    return value.lower()


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _build_service(state: CLIState) -> SummaryService:
    config = state.ensure_config()
    return SummaryService.from_config(config, base_path=state.base_path())


def _open_store(state: CLIState) -> JsonFileStore:
    config = state.ensure_config()
    path = Path(config.cache.store_path)
    if not path.is_absolute():
        path = (state.base_path() / path).resolve()
    return JsonFileStore(path)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        _default_config_path(),
        help="Path to the TOML configuration file",
    ),
) -> None:
    """Initialise CLI state."""

    ctx.obj = CLIState(config_path=config.resolve())

    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'summarize <arXiv id>' or 'config check'.")
        _exit(0)


@app.command(help="Summarize an arXiv paper by id or abs/pdf URL")
def summarize(
    ctx: typer.Context,
    paper: str = typer.Argument(..., help="arXiv identifier (e.g. 2401.12345) or arXiv URL"),
    no_cache: bool = typer.Option(
        False,
        "--no-cache",
        help="Ignore any cached summary and regenerate it",
    ),
    output: Path | None = typer.Option(
        None,
        help="Write the rendered Markdown to this file instead of stdout",
    ),
    stream: bool = typer.Option(
        True,
        "--stream/--no-stream",
        help="Echo the raw model output to stderr while it is generated",
    ),
) -> None:
    state = _get_state(ctx)

    paper_id = resolve_paper_reference(paper)
    if paper_id is None:
        logger.error("Not an arXiv paper id or URL: {}", paper)
        _exit(1)
        return

    try:
        service = _build_service(state)
    except (ValueError, EnvironmentError) as exc:
        logger.error("Cannot set up summarization: {}", exc)
        _exit(1)
        return

    session = SummarySession(paper_id=None)
    printed = 0

    def _echo_progress(text: str) -> None:
        nonlocal printed
        if len(text) > printed:
            sys.stderr.write(text[printed:])
            sys.stderr.flush()
            printed = len(text)

    try:
        summary = service.detect_paper(session, paper_id, use_cache=not no_cache)
        if summary is None:
            logger.info("Generating summary for {}", paper_id)
            summary = service.summarize(session, on_text=_echo_progress if stream else None)
            if stream and printed:
                sys.stderr.write("\n")
    except (SummarizationError, PaperFetchError, SummarizationInProgressError) as exc:
        logger.error("Summarization failed for {}: {}", paper_id, exc)
        _exit(1)
        return
    except (ValueError, EnvironmentError) as exc:
        logger.error("Summarization could not start for {}: {}", paper_id, exc)
        _exit(1)
        return

    markdown = SummaryRenderer().render(summary, session.document or session.snapshot, paper_id=paper_id)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(markdown, encoding="utf-8")
        logger.info("Summary written to {}", output)
    else:
        print(markdown, end="")


@app.command(help="Show or reset usage statistics")
def usage(
    ctx: typer.Context,
    reset: bool = typer.Option(
        False,
        "--reset",
        help="Reset the counters and history to zero",
    ),
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for usage statistics",
        callback=_normalize_format,
    ),
) -> None:
    tracker = UsageTracker(_open_store(_get_state(ctx)))
    aggregate = tracker.reset() if reset else tracker.load()

    if format == "json":
        print(json.dumps(aggregate.to_dict(), indent=2, ensure_ascii=False))
        return

    logger.info(
        "Requests: {} | Tokens: {} | Papers: {}",
        aggregate.request_count,
        format_count(aggregate.token_count),
        len(aggregate.unique_document_ids),
    )
    if not aggregate.history:
        logger.info("No summaries generated yet")
    for record in aggregate.history:
        logger.info("  - {} | {} tokens | {}", record.title, format_count(record.tokens), record.date)


@cache_app.command("clear", help="Remove every cached summary")
def cache_clear(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    cache = SummaryCache(_open_store(state), ttl=timedelta(days=config.cache.ttl_days))
    removed = cache.clear()
    logger.info("Removed {} cached summaries", removed)


@config_app.command(help="Validate the configuration file")
def check(
    ctx: typer.Context,
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for validation results",
        callback=_normalize_format,
    ),
) -> None:
    state = _get_state(ctx)
    result, exit_code, config = check_config(state.config_path)

    if format == "json":
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
        _exit(exit_code)

    if result["status"] == "ok":
        logger.info("Configuration OK: {}", result["config_path"])
        if config is not None:
            logger.info("Logging level: {}", config.logging_level)
        for warning in result["warnings"]:
            logger.warning(warning)
    else:
        error: dict[str, Any] = result["error"]
        logger.error(
            "Configuration error ({}) for {}: {}",
            error["type"],
            result["config_path"],
            error["message"],
        )
        for detail in error.get("details", []):
            logger.error("  - {}: {}", detail["loc"], detail["message"])

    _exit(exit_code)


@config_app.command(help="Describe available configuration fields")
def explain(
    format: str = typer.Option(  # noqa: A002 - match CLI option name
        "text",
        "--format",
        case_sensitive=False,
        help="Output format for configuration schema",
        callback=_normalize_format,
    ),
) -> None:
    fields = explain_config()

    if format == "json":
        print(json.dumps({"fields": fields}, indent=2, ensure_ascii=False, default=str))
        return

    logger.info("Configuration schema ({} fields):", len(fields))
    for field in fields:
        default_value = field["default"]
        if isinstance(default_value, (dict, list)):
            default_repr = json.dumps(default_value, ensure_ascii=False, default=str)
        else:
            default_repr = str(default_value)
        logger.info(
            "  - {name}: type={type}, required={required}, default={default}, description={description}",
            name=field["name"],
            type=field["type"],
            required="yes" if field["required"] else "no",
            default=default_repr,
            description=field["description"] or "(no description)",
        )


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with setuptools console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

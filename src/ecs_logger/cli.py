# Copyright (c) 2025 Arye Kogan
# SPDX-License-Identifier: MIT

"""Command line interface for the ECS logger."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ecs_logger.config import (
    LEVEL_ENV_VAR,
    LoggerSettings,
    load_settings,
    parse_level,
    resolve_level,
)
from ecs_logger.extra_fields import (
    ExtraFields,
    NotObjectError,
    SetExtraFieldsError,
    deep_merge,
    to_json_object,
)
from ecs_logger.logger import ecs_logging
from ecs_logger.validation import validate_log_file

app = typer.Typer(help="Emit and check Elastic Common Schema log lines.")
config_app = typer.Typer(help="Logger settings commands.")
app.add_typer(config_app, name="config")
console = Console()

_DEFAULT_SETTINGS_TEMPLATE = """
# Minimum severity (TRACE, DEBUG, INFO, WARN, ERROR, OFF).
# The ECS_LOG_LEVEL environment variable takes precedence.
level: INFO
# stderr or stdout
stream: stderr
# Optional additional JSON-lines file, relative to this file.
# log_path: logs/app.log
# Fields deep-merged into every event.
extra_fields:
  service:
    name: my-service
"""


def _settings_option() -> Any:
    return typer.Option(  # noqa: B008 - CLI option definition
        None,
        "--config",
        envvar="ECS_LOGGER_CONFIG",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Settings file to load (overridable via ECS_LOGGER_CONFIG).",
    )


def _load_settings_or_exit(path: Path | None) -> LoggerSettings:
    if path is None:
        return LoggerSettings()
    try:
        return load_settings(path)
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        console.print(f"[red]Configuration invalid:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def version() -> None:
    """Show the current package version."""

    from ecs_logger import __version__

    console.print(f"ecs-logger version: [bold green]{__version__}[/bold green]")


@app.command()
def emit(
    message: str = typer.Argument(..., help="Message to log."),
    level: str = typer.Option("INFO", help="Level of the emitted event."),
    target: str = typer.Option("ecs_logger.cli", help="Logging target (logger name)."),
    config: Path | None = _settings_option(),
    extra: str | None = typer.Option(
        None, help="JSON object merged into the event on top of configured fields."
    ),
) -> None:
    """Log a single message as an ECS JSON line on stdout."""

    settings = _load_settings_or_exit(config)

    try:
        levelno = parse_level(level)
        if levelno > logging.CRITICAL:
            raise ValueError(f"Level {level!r} disables logging and cannot be emitted")
    except ValueError as exc:
        console.print(f"[red]Invalid level:[/] {exc}")
        raise typer.Exit(code=1) from exc

    try:
        store = ExtraFields(settings.extra_fields)
        if extra is not None:
            overlay = json.loads(extra)
            if not isinstance(overlay, dict):
                raise NotObjectError("--extra must be a JSON object")
            store.set(deep_merge(to_json_object(settings.extra_fields or {}), overlay))
    except (json.JSONDecodeError, SetExtraFieldsError) as exc:
        console.print(f"[red]Invalid extra fields:[/] {exc}")
        raise typer.Exit(code=1) from exc

    scoped = settings.model_copy(update={"extra_fields": None})
    with ecs_logging(scoped, stream=sys.stdout, extra_fields=store):
        logging.getLogger(target).log(levelno, message)


@app.command()
def validate(
    path: Path = typer.Argument(  # noqa: B008 - CLI argument definition
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="JSON-lines log file to check.",
    )
) -> None:
    """Check every line of a log file against the ECS wire format."""

    problems = validate_log_file(path)
    if not problems:
        console.print(f"[green]All lines valid:[/green] {path}")
        return

    table = Table("line", "problem")
    for number, errors in sorted(problems.items()):
        for error in errors:
            table.add_row(str(number), error)
    console.print(table)
    console.print(f"[red]{len(problems)} invalid line(s)[/red] in {path}")
    raise typer.Exit(code=1)


@config_app.command("inspect")
def config_inspect(
    path: Path = typer.Option(  # noqa: B008 - CLI option definition
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to settings file.",
    )
) -> None:
    """Validate a settings file and print key details."""

    settings = _load_settings_or_exit(path)
    _print_settings_summary(settings, path)


@config_app.command("new")
def config_new(
    path: Path = typer.Option(  # noqa: B008 - CLI option definition
        ...,
        file_okay=True,
        dir_okay=False,
        writable=True,
        help="Destination path for generated settings.",
    ),
    force: bool = typer.Option(
        False, help="Overwrite existing file if it already exists."
    ),
) -> None:
    """Generate a settings file from the default template."""

    if path.exists() and not force:
        console.print(
            f"[red]Refusing to overwrite existing file:[/] {path}. Use --force to replace."
        )
        raise typer.Exit(code=1)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_DEFAULT_SETTINGS_TEMPLATE.strip() + "\n", encoding="utf-8")
    console.print(f"[green]Wrote settings template to[/green] {path}")


def _print_settings_summary(settings: LoggerSettings, path: Path) -> None:
    effective = logging.getLevelName(resolve_level(settings))
    table = Table("setting", "value")
    table.add_row("file", str(path))
    table.add_row("level", settings.level)
    table.add_row(f"effective level ({LEVEL_ENV_VAR})", str(effective))
    table.add_row("stream", settings.stream)
    table.add_row("log_path", str(settings.log_path) if settings.log_path else "—")
    if settings.extra_fields:
        keys = ", ".join(sorted(settings.extra_fields))
    else:
        keys = "—"
    table.add_row("extra fields", keys)
    console.print(table)


def main() -> None:
    """Entry-point for the Typer CLI."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI passthrough
    main()

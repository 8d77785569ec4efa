"""Tests for the ecs-logger CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ecs_logger import __version__
from ecs_logger.cli import app
from ecs_logger.config import LEVEL_ENV_VAR

runner = CliRunner()

SETTINGS = """
level: info
extra_fields:
  service:
    name: orders
  labels:
    env: prod
"""


@pytest.fixture(autouse=True)
def _no_level_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LEVEL_ENV_VAR, raising=False)
    monkeypatch.delenv("ECS_LOGGER_CONFIG", raising=False)


def _last_event(output: str) -> dict[str, object]:
    return json.loads(output.strip().splitlines()[-1])


def test_version_command_outputs_package_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_emit_writes_ecs_line() -> None:
    result = runner.invoke(app, ["emit", "hello", "--level", "warn", "--target", "ops"])

    assert result.exit_code == 0
    event = _last_event(result.stdout)
    assert event["message"] == "hello"
    assert event["log.level"] == "WARN"
    assert event["log.origin"]["origin"]["target"] == "ops"  # type: ignore[index]


def test_emit_merges_configured_and_cli_extra_fields(tmp_path: Path) -> None:
    config_path = tmp_path / "logging.yml"
    config_path.write_text(SETTINGS, encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "emit",
            "hello",
            "--config",
            str(config_path),
            "--extra",
            '{"labels": {"team": "core"}, "trace": {"id": "abc"}}',
        ],
    )

    assert result.exit_code == 0
    event = _last_event(result.stdout)
    assert event["service"] == {"name": "orders"}
    assert event["labels"] == {"env": "prod", "team": "core"}
    assert event["trace"] == {"id": "abc"}


def test_emit_below_level_writes_nothing() -> None:
    result = runner.invoke(app, ["emit", "quiet", "--level", "debug"])

    assert result.exit_code == 0
    assert result.stdout.strip() == ""


@pytest.mark.parametrize("extra", ["42", "[1]", "{not json"])
def test_emit_rejects_invalid_extra(extra: str) -> None:
    result = runner.invoke(app, ["emit", "hello", "--extra", extra])

    assert result.exit_code == 1
    assert "Invalid extra fields" in result.stdout


def test_emit_rejects_unknown_level() -> None:
    result = runner.invoke(app, ["emit", "hello", "--level", "loud"])

    assert result.exit_code == 1
    assert "Invalid level" in result.stdout


def test_validate_accepts_emitted_lines(tmp_path: Path) -> None:
    emitted = runner.invoke(app, ["emit", "hello"])
    log_path = tmp_path / "app.log"
    log_path.write_text(emitted.stdout, encoding="utf-8")

    result = runner.invoke(app, ["validate", str(log_path)])

    assert result.exit_code == 0
    assert "All lines valid" in result.stdout


def test_validate_reports_invalid_lines(tmp_path: Path) -> None:
    log_path = tmp_path / "app.log"
    log_path.write_text('{"message": "hi"}\n', encoding="utf-8")

    result = runner.invoke(app, ["validate", str(log_path)])

    assert result.exit_code == 1
    assert "invalid line" in result.stdout


def test_config_new_generates_template(tmp_path: Path) -> None:
    config_path = tmp_path / "logging.yml"

    result = runner.invoke(app, ["config", "new", "--path", str(config_path)])

    assert result.exit_code == 0
    assert config_path.is_file()
    assert "extra_fields" in config_path.read_text(encoding="utf-8")

    again = runner.invoke(app, ["config", "new", "--path", str(config_path)])
    assert again.exit_code == 1


def test_config_inspect_prints_summary(tmp_path: Path) -> None:
    config_path = tmp_path / "logging.yml"
    config_path.write_text(SETTINGS, encoding="utf-8")

    result = runner.invoke(app, ["config", "inspect", "--path", str(config_path)])

    assert result.exit_code == 0
    assert "INFO" in result.stdout
    assert "labels, service" in result.stdout


def test_config_inspect_rejects_invalid_settings(tmp_path: Path) -> None:
    config_path = tmp_path / "logging.yml"
    config_path.write_text("level: loud\n", encoding="utf-8")

    result = runner.invoke(app, ["config", "inspect", "--path", str(config_path)])

    assert result.exit_code == 1
    assert "Configuration invalid" in result.stdout


def test_emit_rejects_off_level() -> None:
    result = runner.invoke(app, ["emit", "hello", "--level", "off"])

    assert result.exit_code == 1
    assert "Invalid level" in result.stdout
    assert "log.level" not in result.stdout

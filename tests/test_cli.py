"""Tests for the CLI commands using Typer's CliRunner."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from speakpractice.cli import app
from speakpractice.logger import set_log_level

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_log_level():
    """Reset package log levels changed by the serve command."""
    yield
    set_log_level("INFO", "standard")


def _write_config(tmp_path: Path, api_key: str, extra: str = "") -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(
        f"openai:\n  api_key: {api_key}\nserver:\n  port: 4100\n{extra}",
        encoding="utf-8",
    )
    return path


@pytest.mark.unit
class TestCheckConfig:
    """Tests for the check-config command."""

    def test_valid_config_should_print_masked_key(self, tmp_path: Path) -> None:
        """Verifies the settings summary.

        Given: A YAML file with a real-looking API key.
        When: check-config runs.
        Then: Exit code 0, the key is masked and never printed in full.
        """
        config = _write_config(tmp_path, "sk-live-abcdef123456")

        result = runner.invoke(app, ["check-config", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "sk-l***3456" in result.output
        assert "sk-live-abcdef123456" not in result.output
        assert "Configuration is valid." in result.output

    def test_unset_topic_prompt_should_warn(self, tmp_path: Path) -> None:
        """Given no topic prompt id, check-config passes but warns about /generate/topic."""
        config = _write_config(tmp_path, "sk-live-abcdef123456")

        result = runner.invoke(app, ["check-config", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "openai.topic_prompt.id is not set" in result.output

    def test_configured_topic_prompt_should_not_warn(self, tmp_path: Path) -> None:
        """Given a topic prompt id, no warning is printed."""
        config = tmp_path / "settings.yaml"
        config.write_text(
            "openai:\n  api_key: sk-live-abcdef123456\n  topic_prompt:\n    id: pmpt_42\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["check-config", "--config", str(config)])

        assert result.exit_code == 0, result.output
        assert "is not set" not in result.output

    def test_placeholder_key_should_fail(self, tmp_path: Path) -> None:
        """Given the placeholder API key, check-config exits with code 1."""
        config = _write_config(tmp_path, "your_openai_api_key_here")

        result = runner.invoke(app, ["check-config", "--config", str(config)])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_invalid_yaml_should_fail(self, tmp_path: Path) -> None:
        """Given a YAML file with an unknown section, check-config exits with code 1."""
        config = _write_config(tmp_path, "sk-live-abcdef123456", extra="unknown:\n  a: 1\n")

        result = runner.invoke(app, ["check-config", "--config", str(config)])

        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_missing_file_should_be_rejected(self, tmp_path: Path) -> None:
        """Given a config path that does not exist, Typer rejects the option."""
        result = runner.invoke(
            app, ["check-config", "--config", str(tmp_path / "missing.yaml")]
        )

        assert result.exit_code != 0


@pytest.mark.unit
class TestServe:
    """Tests for the serve command."""

    def test_serve_should_apply_overrides_and_run(self, tmp_path: Path) -> None:
        """Verifies server startup wiring.

        Given: A valid config and --port/--host overrides.
        When: serve runs with uvicorn.run patched.
        Then: uvicorn receives the application and the overridden address.
        """
        config = _write_config(tmp_path, "sk-live-abcdef123456")

        with patch("speakpractice.cli.uvicorn.run") as run:
            result = runner.invoke(
                app,
                [
                    "serve",
                    "--config",
                    str(config),
                    "--host",
                    "127.0.0.1",
                    "--port",
                    "5005",
                    "--log-level",
                    "warning",
                ],
            )

        assert result.exit_code == 0, result.output
        run.assert_called_once()
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 5005
        assert run.call_args.kwargs["log_level"] == "warning"

    def test_invalid_log_level_should_fail(self, tmp_path: Path) -> None:
        """Given an unknown log level, serve exits with code 1 before starting."""
        config = _write_config(tmp_path, "sk-live-abcdef123456")

        with patch("speakpractice.cli.uvicorn.run") as run:
            result = runner.invoke(
                app, ["serve", "--config", str(config), "--log-level", "LOUD"]
            )

        assert result.exit_code == 1
        assert "Invalid log level: LOUD" in result.output
        run.assert_not_called()

    def test_missing_api_key_should_fail_startup(self, tmp_path: Path) -> None:
        """Given an empty API key, serve reports the startup failure."""
        config = _write_config(tmp_path, '""')

        with patch("speakpractice.cli.uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--config", str(config)])

        assert result.exit_code == 1
        assert "Startup failed" in result.output
        run.assert_not_called()

    def test_help_should_list_commands(self) -> None:
        """Given --help, both commands are listed."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "serve" in result.output
        assert "check-config" in result.output

"""CLI entry point for running and checking the service.

Usage::

    speakpractice serve --config settings.yaml --port 3001
    speakpractice check-config --config settings.yaml
"""

import logging
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from speakpractice.api.app import create_app
from speakpractice.config.settings import AppSettings
from speakpractice.logger import mask_sensitive, set_log_level

app = typer.Typer(help="speakpractice service CLI.")
console = Console()


def _load_settings(config: Path | None) -> AppSettings:
    """Load settings from YAML when a path is given, else from the environment.

    Raises:
        SystemExit: If the configuration is invalid.
    """
    try:
        if config is not None:
            return AppSettings.from_yaml(config)
        return AppSettings.from_env()
    except Exception as exc:
        console.print(f"[red]Invalid config: {exc}[/red]")
        raise SystemExit(1) from exc


def _validate_log_level(log_level: str) -> str:
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        console.print(f"[red]Invalid log level: {log_level}[/red]")
        raise SystemExit(1)
    return log_level.upper()


@app.command()
def serve(
    config: Path | None = typer.Option(
        None, "--config", exists=True, help="YAML settings file (defaults to environment)."
    ),
    host: str | None = typer.Option(None, "--host", help="Bind address override."),
    port: int | None = typer.Option(
        None, "--port", min=1, max=65535, help="Bind port override."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)."
    ),
) -> None:
    """Run the HTTP API."""
    settings = _load_settings(config)

    overrides: dict[str, object] = {}
    if host is not None:
        overrides["server.host"] = host
    if port is not None:
        overrides["server.port"] = port
    if log_level is not None:
        overrides["logging.level"] = _validate_log_level(log_level)

    try:
        if overrides:
            settings = settings.with_overrides(overrides)
        set_log_level(settings.logging.level, settings.logging.format)

        application = create_app(settings)
    except Exception as exc:
        console.print(f"[red]Startup failed: {exc}[/red]")
        raise SystemExit(1) from exc

    console.print(
        f"[bold]speakpractice[/bold] listening on "
        f"{settings.server.host}:{settings.server.port} "
        f"({settings.server.environment})"
    )
    uvicorn.run(
        application,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )


@app.command("check-config")
def check_config(
    config: Path | None = typer.Option(
        None, "--config", exists=True, help="YAML settings file (defaults to environment)."
    ),
) -> None:
    """Validate settings and print a summary with the API key masked."""
    settings = _load_settings(config)

    try:
        settings.require_provider_credentials()
    except Exception as exc:
        console.print(f"[red]Invalid config: {exc}[/red]")
        raise SystemExit(1) from exc

    table = Table(title="speakpractice settings")
    table.add_column("Setting", justify="left")
    table.add_column("Value", justify="left")

    rows = [
        ("openai.api_key", mask_sensitive(settings.openai.api_key)),
        ("openai.gpt.model", settings.openai.gpt.model),
        ("openai.whisper.model", settings.openai.whisper.model),
        ("openai.timeout_s", f"{settings.openai.timeout_s:g}"),
        ("openai.topic_prompt.id", settings.openai.topic_prompt.id or "(not set)"),
        ("server.environment", settings.server.environment),
        ("server.address", f"{settings.server.host}:{settings.server.port}"),
        ("server.api_prefix", settings.server.api_prefix),
        ("server.cors_origins", ", ".join(settings.server.cors_origins)),
        (
            "rate_limit",
            f"{settings.rate_limit.max_requests} per {settings.rate_limit.window_s:g}s"
            if settings.rate_limit.enabled
            else "disabled",
        ),
        ("logging", f"{settings.logging.level} ({settings.logging.format})"),
    ]
    for key, value in rows:
        table.add_row(key, value)

    console.print(table)
    if not settings.openai.topic_prompt.id:
        console.print(
            "[yellow]Warning: openai.topic_prompt.id is not set; "
            "/generate/topic requests will fail.[/yellow]"
        )
    console.print("[green]Configuration is valid.[/green]")


if __name__ == "__main__":
    app()

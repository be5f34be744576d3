#!/usr/bin/env python3
"""
Eisenhower Notes command line.

    python run.py --action server --reload -v
    python run.py --action config
    python run.py --action info
"""

import os
import subprocess
import sys
from pathlib import Path
from typing import Any

import click

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from eisenhower.backend.core.logging import get_logger, setup_logging

APP_MODULE = "eisenhower.backend.main:app"

CONFIG_SECTIONS = (
    ("Application Settings", "application"),
    ("Database Settings", "database"),
    ("Logging Settings", "logging"),
    ("Security Settings", "security"),
    ("Feature Flags", "features"),
)


def validate_project_root() -> Path:
    """Exit with status 1 unless run.py sits next to .project_root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.secho("Error: .project_root not found. Run from project root.", fg="red", err=True)
        sys.exit(1)
    return PROJECT_ROOT


def _log_level(verbose: bool, debug: bool) -> str:
    if debug:
        return "DEBUG"
    return "INFO" if verbose else "WARNING"


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "config", "info"]),
    default="info",
    show_default=True,
    help="What to do.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at INFO level.")
@click.option("--debug", "-d", is_flag=True, help="Log at DEBUG level.")
@click.option("--host", default=None, help="Bind address for the server action.")
@click.option("--port", default=None, type=int, help="Port for the server action.")
@click.option("--reload", is_flag=True, help="Restart the server on code changes.")
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
) -> None:
    """
    Eisenhower Notes Entry Point.

    Start the API server, print the loaded configuration, or show
    application information.
    """
    validate_project_root()
    os.chdir(PROJECT_ROOT)

    level = _log_level(verbose, debug)
    setup_logging(level=level, format_type="console")
    logger = get_logger(__name__)
    logger.debug("Running action", extra={"action": action, "log_level": level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "config":
        show_config(logger)
    else:
        show_info(logger)


def run_server(logger: Any, host: str | None, port: int | None, reload: bool) -> None:
    """Run uvicorn in a child process; its exit code becomes ours on failure."""
    from eisenhower.backend.core.config import get_app_config

    server = get_app_config().application.server
    host = host or server.host
    port = port or server.port

    cmd = [sys.executable, "-m", "uvicorn", APP_MODULE, "--host", host, "--port", str(port)]
    if reload:
        cmd.append("--reload")

    logger.info("Starting server", extra={"host": host, "port": port, "reload": reload})
    click.echo(f"Serving Eisenhower Notes on http://{host}:{port} (Ctrl+C to stop)")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server exited with an error", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def _echo_tree(values: dict[str, Any], depth: int = 1) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{'  ' * depth}{key}:")
            _echo_tree(value, depth + 1)
        else:
            click.echo(f"{'  ' * depth}{key}: {value}")


def show_config(logger: Any) -> None:
    """Print every YAML section. Secrets live in the environment and are not shown."""
    from eisenhower.backend.core.config import get_app_config

    try:
        app_config = get_app_config()
    except (OSError, RuntimeError, ValueError) as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.secho(f"Error loading configuration: {e}", fg="red")
        sys.exit(1)

    click.echo("Application Configuration:\n")
    for title, attribute in CONFIG_SECTIONS:
        click.echo(f"{title} (from YAML):")
        click.echo("-" * 40)
        _echo_tree(getattr(app_config, attribute).model_dump())
        click.echo()


def show_info(logger: Any) -> None:
    """Print name, version, note rules and usage."""
    from eisenhower.backend.core.config import get_app_config

    click.echo("Eisenhower Notes")
    click.echo("=" * 40)
    try:
        app = get_app_config().application
    except (OSError, RuntimeError, ValueError) as e:
        logger.warning("Could not load configuration", extra={"error": str(e)})
        click.echo("Configuration unavailable")
    else:
        click.echo(f"Name: {app.name}")
        click.echo(f"Version: {app.version}")
        click.echo(f"Description: {app.description}")
        click.echo(f"Quadrant capacity: {app.notes.quadrant_capacity}")

    click.echo(
        "\nAvailable Actions:\n"
        "  --action server   Start the API server\n"
        "  --action config   Display configuration\n"
        "  --action info     Show this information\n"
        "\nLogging Options:\n"
        "  --verbose, -v     INFO level logging\n"
        "  --debug, -d       DEBUG level logging\n"
        "\nExamples:\n"
        "  python run.py --action server --reload --verbose\n"
        "  python run.py --action config"
    )


if __name__ == "__main__":
    main()

"""Command line interface for webdriver-client."""

from __future__ import annotations

import json
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from .capabilities import Capabilities
from .commands import get_capabilities, server_status
from .config import WebDriverConfig, load_config
from .driver.base import WebDriver
from .errors import WebDriverError
from .factory import build_driver
from .lifecycle import dump_session_history, finally_close, run_session

app = typer.Typer(help="WebDriver wire protocol client")


ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to YAML configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]
HostOption = Annotated[Optional[str], typer.Option("--host", help="WebDriver server host.")]
PortOption = Annotated[Optional[int], typer.Option("--port", help="WebDriver server port.")]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("webdriver-client"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def status(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    host: HostOption = None,
    port: PortOption = None,
) -> None:
    """Query the server status. No session is created."""

    config = _load(config_path, env_file, host=host, port=port)
    try:
        with build_driver(config) as wd:
            payload = server_status(wd)
    except WebDriverError as exc:
        typer.echo(f"Status request failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


@app.command()
def probe(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    host: HostOption = None,
    port: PortOption = None,
    browser: Annotated[
        Optional[str],
        typer.Option("--browser", help="Browser name, e.g. firefox, chrome, 'internet explorer'."),
    ] = None,
    history: Annotated[
        bool,
        typer.Option("--history", help="Print the command history when finished."),
    ] = False,
) -> None:
    """Create a session, print the granted capabilities and close it again."""

    overrides: dict[str, Any] = {}
    if browser:
        overrides["capabilities"] = {"browserName": browser}
    config = _load(config_path, env_file, host=host, port=port, **overrides)
    console = Console()

    def _show_capabilities(wd: WebDriver) -> Capabilities:
        granted = get_capabilities(wd)
        console.print(f"Session [bold]{wd.session.session_id}[/bold]")
        console.print_json(data=granted.to_wire())
        return granted

    def _action(wd: WebDriver) -> Capabilities:
        if history:
            return dump_session_history(
                wd, lambda inner: finally_close(inner, _show_capabilities), console=console
            )
        return finally_close(wd, _show_capabilities)

    try:
        run_session(config, _action)
    except WebDriverError as exc:
        typer.echo(f"Probe failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _load(
    config_path: Optional[Path],
    env_file: Optional[Path],
    *,
    host: Optional[str],
    port: Optional[int],
    **overrides: Any,
) -> WebDriverConfig:
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    try:
        return load_config(config_path, env_file=env_file, **overrides)
    except ValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()

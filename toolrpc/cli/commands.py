"""CLI commands for toolrpc.

`serve` runs the HTTP transport, `methods` lists what `initialize` would
advertise, and `call` dispatches one request in-process.
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from toolrpc import __version__, __logo__
from toolrpc.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from toolrpc.cli.shared.network_utils import display_host, is_port_in_use
from toolrpc.config.loader import load_config
from toolrpc.config.schema import Config

app = typer.Typer(
    name="toolrpc",
    help=f"{__logo__} toolrpc - JSON-RPC tool server",
    no_args_is_help=True,
)

console = Console()


def _load(config_path: Path | None) -> Config:
    try:
        return load_config(config_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _parse_request_id(raw: str) -> str | int:
    text = raw.strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text


def _parse_params(raw: str | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]--params is not valid JSON: {e}[/red]")
        raise typer.Exit(2)


@app.command()
def version():
    """Show the toolrpc version."""
    console.print(f"{__logo__} toolrpc v{__version__}")


@app.command()
def serve(
    host: str = typer.Option(None, "--host", "-h", help="Bind host (default from config)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (default from config)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Start the JSON-RPC HTTP server."""
    from toolrpc.api.server import create_app, run_server
    from toolrpc.tools.catalog import build_dispatcher

    config = _load(config_path)
    host = host or config.server.host
    port = port or config.server.port
    if is_port_in_use(host, port):
        console.print(
            f"[red]Port {port} is already in use.[/red] "
            f"Use [cyan]--port[/cyan] to choose another port (current: {host}:{port})."
        )
        raise typer.Exit(1)

    level = "DEBUG" if verbose else config.logging.level
    configure_console_logging(level)
    if config.logging.file_enabled:
        log_path = ensure_rotating_log_file("serve", config.log_dir, level=level)
        console.print(f"[dim]Logging to {log_path}[/dim]")

    dispatcher = build_dispatcher(config)
    server_app = create_app(dispatcher, path=config.server.path)
    console.print(
        f"{__logo__} Serving {len(dispatcher.registry)} methods at "
        f"[cyan]http://{display_host(host)}:{port}{config.server.path}[/cyan]"
    )
    run_server(server_app, host=host, port=port, log_level="debug" if verbose else "warning")


@app.command()
def methods(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """List registered RPC methods."""
    from toolrpc.tools.catalog import build_registry

    configure_console_logging("WARNING")
    registry = build_registry(_load(config_path))
    table = Table(title="RPC methods")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Required")
    table.add_column("Description")
    for name, entry in registry.describe().items():
        table.add_row(name, ", ".join(entry["required"]) or "-", entry["description"])
    console.print(table)


@app.command()
def call(
    method: str = typer.Argument(..., help="Method name"),
    params: str = typer.Option(None, "--params", "-p", help="Params as a JSON object"),
    request_id: str = typer.Option("1", "--id", help="Request id"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Dispatch one request in-process and print the response envelope."""
    from toolrpc.tools.catalog import build_dispatcher

    configure_console_logging("WARNING")
    dispatcher = build_dispatcher(_load(config_path))
    request: dict[str, Any] = {"jsonrpc": "2.0", "method": method, "id": _parse_request_id(request_id)}
    parsed = _parse_params(params)
    if parsed is not None:
        request["params"] = parsed
    response = asyncio.run(dispatcher.handle(request))
    typer.echo(json.dumps(response, indent=2, ensure_ascii=False))
    if "error" in response:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

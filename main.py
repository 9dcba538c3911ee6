#!/usr/bin/env python3
"""
Script Runner - remote Playwright script execution service

Run Python automation scripts against a browser without a local Playwright install.
"""
import json
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from script_runner import __version__

console = Console()

DEFAULT_SERVER_URL = "http://localhost:8080"


@click.group()
@click.version_option(version=__version__)
def cli():
    """Script Runner - remote Playwright script execution service"""
    pass


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: HOST or 127.0.0.1)")
@click.option("--port", default=None, type=click.IntRange(1, 65535), help="Port to bind to (default: PORT or 8080)")
@click.option("--local/--cdp", "use_local", default=None, help="Launch a local Chromium instead of attaching over CDP")
@click.option("--cdp-endpoint", default=None, help="CDP endpoint to attach to (default: CDP_ENDPOINT_URL)")
@click.option("--timeout", default=None, type=click.FloatRange(min=0), help="Script execution deadline in seconds (0 = none)")
def start(host, port, use_local, cdp_endpoint, timeout):
    """Start the Script Runner server"""
    from script_runner.config import ServiceConfig
    from script_runner.errors import ConfigError
    from script_runner.logging_config import setup_logging
    from script_runner.server import run_server

    setup_logging()

    try:
        config = ServiceConfig.from_env()
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(2)

    if host is not None:
        config.host = host
    if port is not None:
        config.port = port
    if use_local is not None:
        config.use_local_playwright = use_local
    if cdp_endpoint:
        config.cdp_endpoint_url = cdp_endpoint
    if timeout is not None:
        config.script_timeout = timeout or None

    if config.use_local_playwright:
        mode_line = "Playwright mode: Local Launch\n  Launching local Playwright-managed Chromium."
    else:
        mode_line = f"Playwright mode: CDP Connection\n  CDP_ENDPOINT_URL for connection: {config.cdp_endpoint_url}"

    console.print(Panel.fit(
        "[bold cyan]Script Runner[/bold cyan]\n"
        f"[dim]Server running on http://{config.host}:{config.port}[/dim]\n"
        "[dim]Awaiting POST requests to /execute-script with a JSON body containing a 'script' field.[/dim]\n"
        f"{mode_line}",
        border_style="cyan"
    ))

    run_server(config)


@cli.command()
@click.argument("script_file", type=click.File("r"))
@click.option("--server", default=DEFAULT_SERVER_URL, help="Script Runner server URL")
@click.option("--timeout", default=None, type=click.FloatRange(min=0, min_open=True), help="HTTP timeout in seconds")
def run(script_file, server: str, timeout):
    """Submit a script file (or - for stdin) and print its result"""
    import requests

    script = script_file.read()
    try:
        resp = requests.post(
            f"{server.rstrip('/')}/execute-script",
            json={"script": script},
            timeout=timeout,
        )
    except requests.ConnectionError:
        console.print(f"[red]Error:[/red] Server not reachable at {server}. Start with: script-runner start")
        sys.exit(1)
    except requests.Timeout:
        console.print(f"[red]Error:[/red] No response from {server} within {timeout:g} seconds")
        sys.exit(1)

    try:
        data = resp.json()
    except ValueError:
        console.print(f"[red]✗[/red] Unexpected response ({resp.status_code}): {resp.text}")
        sys.exit(1)

    if resp.ok:
        console.print_json(json.dumps(data.get("result")))
    else:
        console.print(f"[red]✗[/red] {resp.status_code}: {data.get('error', resp.text)}")
        sys.exit(1)


@cli.command()
@click.option("--server", default=DEFAULT_SERVER_URL, help="Script Runner server URL")
def health(server: str):
    """Show server health and browser mode"""
    import requests

    try:
        resp = requests.get(f"{server.rstrip('/')}/health", timeout=10)
    except requests.ConnectionError:
        console.print("[red]Error:[/red] Server not running")
        sys.exit(1)
    except requests.Timeout:
        console.print(f"[red]Error:[/red] No response from {server} within 10 seconds")
        sys.exit(1)

    try:
        data = resp.json()
    except ValueError:
        console.print(f"[red]✗[/red] Unexpected response ({resp.status_code}): {resp.text}")
        sys.exit(1)

    table = Table(title="Script Runner")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for key, value in data.items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)


if __name__ == "__main__":
    cli()

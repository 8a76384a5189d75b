"""
Console output for expose.

Two channels: every command writes exactly one JSON result document to stdout
(emit_result), while progress and diagnostics go to stderr through a rich console.
"""

import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.text import Text

# Diagnostics only; stdout is reserved for results
console = Console(stderr=True, force_terminal=None, legacy_windows=True)

_USE_ASCII = not sys.stderr.isatty()

MODE_STYLES = {
    "managed": "cyan",
    "dedicated": "magenta",
}


def print_success(message: str):
    """Print a success message"""
    icon = "+" if _USE_ASCII else "✓"
    console.print(f"[green]{icon}[/green] {message}")


def print_error(message: str):
    """Print an error message"""
    icon = "x" if _USE_ASCII else "✗"
    console.print(f"[red]{icon}[/red] {message}", style="red")


def print_warning(message: str):
    """Print a warning message"""
    console.print(f"[yellow]![/yellow] {message}")


def print_info(message: str):
    """Print an info message"""
    icon = "i" if _USE_ASCII else "ℹ"
    console.print(f"[blue]{icon}[/blue] {message}")


def emit_result(payload: Any, stream=None) -> None:
    """Write the command result as a single JSON document"""
    stream = stream or sys.stdout
    stream.write(json.dumps(payload, indent=2) + "\n")
    stream.flush()


def servers_table(servers: list[dict]) -> Table:
    """
    Create a Rich table showing exposed servers.

    Args:
        servers: Server records as dicts (state.json shape)
    """
    table = Table(title="Exposed servers", show_header=True, header_style="bold cyan")

    table.add_column("Subdomain", style="bold")
    table.add_column("URL", style="cyan")
    table.add_column("Port", style="yellow", justify="right")
    table.add_column("Type")
    table.add_column("Mode")
    table.add_column("PID", style="dim")

    for server in servers:
        mode = server.get("tunnelMode", "?")
        pid = server.get("pid") or 0
        table.add_row(
            server.get("subdomain", "?"),
            server.get("url", "?"),
            str(server.get("port", "?")),
            server.get("serverType", "?"),
            Text(mode, style=MODE_STYLES.get(mode, "dim")),
            str(pid) if pid else "-",
        )

    return table


def print_servers(servers: list[dict]):
    """Print the servers table"""
    console.print(servers_table(servers))

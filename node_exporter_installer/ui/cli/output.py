"""
CLI output helpers — how progress and results look on the terminal.
"""

from __future__ import annotations

import sys
from typing import NoReturn

import click

from node_exporter_installer.core.engine.executor import Event

_STYLES = {
    "success": ("✅", "green"),
    "notice": ("⚠️ ", "yellow"),
    "error": ("❌", "red"),
}


def echo_event(event: Event) -> None:
    """Print one progress event as it happens."""
    if event.level == "info":
        click.echo(f"--- {event.message} ---")
        return
    icon, color = _STYLES[event.level]
    click.secho(f"{icon} {event.message}", fg=color, bold=event.level != "notice")


def fatal(message: str) -> NoReturn:
    """Report a fatal condition and exit 1."""
    click.secho(f"❌ {message}", fg="red", bold=True)
    sys.exit(1)


def echo_status(data: dict) -> None:
    """Human-readable rendering of ``StatusResult.to_dict()``."""
    installed = data["installed"]
    click.echo()
    click.secho("📋 Node Exporter", fg="cyan", bold=True)
    click.echo(f"   Platform: {data['platform']}")
    click.echo(f"   systemd:  {'yes' if data['systemd'] else 'not detected'}")
    click.echo()

    for label, key in (("Binary", "binary"), ("Unit file", "unit_file")):
        entry = data[key]
        marker = "✓" if entry["present"] else "✗"
        color = "green" if entry["present"] else "red"
        click.secho(f"   {marker} {label}", fg=color, nl=False)
        click.echo(f"  → {entry['path']}")

    discovered = data.get("discovered")
    if discovered:
        click.echo()
        click.secho("   Configuration (from unit file):", bold=True)
        for key in ("user", "group", "port"):
            value = discovered.get(key)
            click.echo(f"     {key}: {value if value is not None else '?'}")

    click.echo()
    if installed:
        state = data["service_state"]
        color = {"active": "green", "failed": "red"}.get(state, "yellow")
        click.echo("   Service: ", nl=False)
        click.secho(state, fg=color)
    else:
        click.secho("   Not installed", fg="yellow")
    click.echo(f"   Firewall: {data['firewall'] or 'none detected'}")
    click.echo()

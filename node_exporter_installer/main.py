"""
Node Exporter installer — CLI entrypoint.

Usage:
    sudo node-exporter-installer install
    sudo node-exporter-installer install --port 9900 --user web_metrics
    sudo node-exporter-installer remove --user web_metrics
    node-exporter-installer status
"""

from __future__ import annotations

import json
import os
import sys
import tempfile
from collections.abc import Callable
from pathlib import Path

import click

from node_exporter_installer import __version__
from node_exporter_installer.core.config.loader import ConfigError, load_config
from node_exporter_installer.core.context import build_host
from node_exporter_installer.core.models.config import InstallConfig
from node_exporter_installer.core.observability.logging_config import resolve_level, setup_logging
from node_exporter_installer.ui.cli.output import echo_event, echo_status, fatal


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="node-exporter-installer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a YAML config file (default: $NEI_CONFIG or /etc/node-exporter-installer.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Node Exporter installer — install or remove the Prometheus Node Exporter."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("NEI_LOG_FILE"),
        log_file_level=os.environ.get("NEI_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


def _account_options(func: Callable) -> Callable:
    """Options shared by install and remove."""
    options = [
        click.option("--user", "service_user", default=None, help="Service user (default: node_exporter)."),
        click.option("--group", "service_group", default=None, help="Service group (default: node_exporter)."),
        click.option("--port", type=click.IntRange(1, 65535), default=None, help="Listen port (default: 9100)."),
        click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every prompt."),
        click.option("--dry-run", is_flag=True, help="Probe the host but change nothing."),
        click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _load_config(ctx: click.Context, **overrides: object) -> InstallConfig:
    try:
        return load_config(ctx.obj.get("config_path"), overrides)
    except ConfigError as e:
        fatal(str(e))


def _progress(ctx: click.Context, as_json: bool) -> Callable | None:
    if as_json:
        return None
    if ctx.obj.get("quiet"):
        return lambda event: echo_event(event) if event.level != "info" else None
    return echo_event


@cli.command()
@_account_options
@click.pass_context
def install(
    ctx: click.Context,
    service_user: str | None,
    service_group: str | None,
    port: int | None,
    assume_yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Install and start the Node Exporter service.

    A previous installation is removed first.

    Examples:

        sudo node-exporter-installer install

        sudo node-exporter-installer install --port 9900 --user web_metrics
    """
    from node_exporter_installer.core.use_cases.install import install_node_exporter

    config = _load_config(ctx, service_user=service_user, service_group=service_group, port=port)

    with tempfile.TemporaryDirectory(prefix="node-exporter-") as tmp:
        host = build_host(
            dry_run=dry_run,
            assume_yes=assume_yes,
            workdir=Path(tmp),
            on_event=_progress(ctx, as_json),
        )
        result = install_node_exporter(config, host)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        fatal(result.error)


@cli.command()
@_account_options
@click.pass_context
def remove(
    ctx: click.Context,
    service_user: str | None,
    service_group: str | None,
    port: int | None,
    assume_yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Stop and completely remove the Node Exporter.

    User, group and port are read back from the installed unit file
    when it exists, so only --user is needed for a custom install.

    Examples:

        sudo node-exporter-installer remove

        sudo node-exporter-installer remove --user web_metrics
    """
    from node_exporter_installer.core.use_cases.remove import remove_node_exporter

    config = _load_config(ctx, service_user=service_user, service_group=service_group, port=port)

    with tempfile.TemporaryDirectory(prefix="node-exporter-") as tmp:
        host = build_host(
            dry_run=dry_run,
            assume_yes=assume_yes,
            workdir=Path(tmp),
            on_event=_progress(ctx, as_json),
        )
        result = remove_node_exporter(config, host)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        fatal(result.error)


@cli.command()
@click.option("--user", "service_user", default=None, help="Service user the unit file is named after.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, service_user: str | None, as_json: bool) -> None:
    """Show what is installed on this host (does not need root)."""
    from node_exporter_installer.core.use_cases.status import get_status

    config = _load_config(ctx, service_user=service_user)
    result = get_status(config, build_host())

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.error is None else 1)

    if result.error:
        fatal(result.error)

    echo_status(result.to_dict())


def main() -> None:
    """Console-script entrypoint: every fatal condition exits 1."""
    try:
        rv = cli.main(standalone_mode=False)
    except click.exceptions.Abort:
        fatal("Aborted.")
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    sys.exit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    main()

"""
Install use case — put a running Node Exporter on the host.

Steps run in order and each one is a precondition for the next; the
first failure ends the run. A previous installation (binary or unit
file present) is removed first, so every install starts from a clean
baseline and running install twice ends in the same state.
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from node_exporter_installer.core.context import HostContext
from node_exporter_installer.core.engine.executor import ExecutionReport, StepExecutor
from node_exporter_installer.core.errors import InstallerError
from node_exporter_installer.core.models.config import InstallConfig, ReleaseAsset
from node_exporter_installer.core.services import accounts, firewall, release, systemd
from node_exporter_installer.core.services.dependencies import ensure_dependencies
from node_exporter_installer.core.services.platform import detect_platform
from node_exporter_installer.core.services.unit_file import render_unit
from node_exporter_installer.core.use_cases.remove import RemoveResult, require_root, run_removal

logger = logging.getLogger(__name__)

UNIT_FILE_MODE = 0o644
BINARY_MODE = "0755"


@dataclass
class InstallResult:
    """Outcome of an installation."""

    config: InstallConfig
    report: ExecutionReport = field(default_factory=lambda: ExecutionReport(operation="install"))
    platform: str = ""
    asset: ReleaseAsset | None = None
    removal: RemoveResult | None = None
    group_created: bool = False
    user_created: bool = False
    firewall: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def previous_install_removed(self) -> bool:
        return self.removal is not None

    def to_dict(self) -> dict:
        result: dict = {
            "ok": self.ok,
            "platform": self.platform,
            "service_user": self.config.service_user,
            "service_group": self.config.service_group,
            "port": self.config.port,
            "service_file": str(self.config.service_file),
            "binary_path": str(self.config.binary_path),
            "release": self.asset.model_dump() if self.asset else None,
            "previous_install_removed": self.previous_install_removed,
            "group_created": self.group_created,
            "user_created": self.user_created,
            "firewall": self.firewall,
            "report": self.report.to_dict(),
        }
        if self.error:
            result["error"] = self.error
        return result


def previous_install_present(config: InstallConfig, host: HostContext, executor: StepExecutor) -> bool:
    """Whether the binary or the unit file of an earlier install is on disk."""
    on_path = host.which(config.binary_path.name)
    if on_path is not None and Path(on_path) == config.binary_path:
        return True
    return executor.file_exists(config.binary_path) or executor.file_exists(config.service_file)


@contextmanager
def _scratch_dir(host: HostContext) -> Iterator[Path]:
    if host.workdir is not None:
        yield host.workdir
        return
    with tempfile.TemporaryDirectory(prefix="node-exporter-") as tmp:
        yield Path(tmp)


def _install_binary(
    config: InstallConfig,
    host: HostContext,
    executor: StepExecutor,
    asset: ReleaseAsset,
) -> None:
    if executor.dry_run:
        executor.notice(f"[dry-run] Would download {asset.url} and install it to {config.binary_path}")
        return

    with _scratch_dir(host) as workdir:
        executor.info(f"Downloading {asset.name}")
        archive = release.download_asset(
            asset,
            workdir,
            timeout=config.http_timeout,
            retries=config.http_retries,
            fetch=host.fetch,
        )
        executor.run("extract", ["tar", "-xzf", str(archive), "-C", str(workdir)])
        executor.run(
            "install-binary",
            [
                "install",
                "-o", config.service_user,
                "-g", config.service_group,
                "-m", BINARY_MODE,
                str(release.extracted_binary(archive)),
                str(config.binary_path),
            ],
        )


def run_install(
    config: InstallConfig,
    host: HostContext,
    executor: StepExecutor,
    result: InstallResult,
) -> InstallResult:
    """Install through an existing executor, filling in ``result``.

    Raises:
        InstallerError: On the first step that fails.
    """
    require_root(host)
    executor.info("Starting Node Exporter installation")
    ensure_dependencies(host, executor)

    # ── Reconcile ───────────────────────────────────────────────
    if previous_install_present(config, host, executor):
        executor.notice("Previous installation detected. Removing it first.")
        result.removal = run_removal(config, host, executor)
        executor.info("Continuing with new installation")

    # ── Accounts ────────────────────────────────────────────────
    executor.info(f"Creating user '{config.service_user}' and group '{config.service_group}'")
    result.group_created = accounts.ensure_group(executor, config.service_group)
    result.user_created = accounts.ensure_user(
        executor, config.service_user, config.service_group, config.home_dir,
    )

    # ── Binary ──────────────────────────────────────────────────
    executor.info(f"Resolving the latest release for {result.platform}")
    asset = release.resolve_latest_asset(
        result.platform,
        repo=config.release_repo,
        timeout=config.http_timeout,
        retries=config.http_retries,
        fetch=host.fetch,
    )
    result.asset = asset
    executor.info(f"Latest version found: {asset.version} ({asset.url})")
    _install_binary(config, host, executor, asset)

    # ── Service ─────────────────────────────────────────────────
    executor.info(f"Creating systemd service file: {config.service_file}")
    executor.write_file("write-unit-file", config.service_file, render_unit(config), mode=UNIT_FILE_MODE)
    systemd.daemon_reload(executor)

    executor.info("Configuring firewall")
    result.firewall = firewall.open_port(host, executor, config.port)

    executor.info("Enabling and starting Node Exporter service")
    systemd.enable_now(executor, config.service_name)

    executor.success("Node Exporter has been installed and started!")
    executor.info(f"To check status: sudo systemctl status {config.service_name}")
    executor.info(f"Metrics endpoint: {config.metrics_url}")
    return result


def install_node_exporter(config: InstallConfig, host: HostContext) -> InstallResult:
    """Install Node Exporter on the host.

    Never raises; fatal conditions are returned in ``result.error``.
    """
    report = ExecutionReport(operation="install")
    executor = StepExecutor(host.registry, report, host.on_event)
    result = InstallResult(config=config, report=report)

    try:
        result.platform = detect_platform(*host.platform_info) if host.platform_info else detect_platform()
        run_install(config, host, executor, result)
    except InstallerError as e:
        logger.debug("Install aborted: %s", e)
        result.error = str(e)
    return result

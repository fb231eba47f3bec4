"""
Remove use case — tear down a Node Exporter installation.

The existing unit file is the source of truth: the user, group and
port it names override the configured ones, so a host installed with
``--port 9900`` is cleaned up correctly by a plain ``remove``.

Everything after discovery is best-effort except removing the files
and reloading systemd. Running this on a host with nothing installed
only produces notices.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from node_exporter_installer.core.context import HostContext
from node_exporter_installer.core.engine.executor import ExecutionReport, StepExecutor
from node_exporter_installer.core.errors import InstallerError, PrivilegeError
from node_exporter_installer.core.models.config import DiscoveredUnitConfig, InstallConfig
from node_exporter_installer.core.services import accounts, firewall, systemd
from node_exporter_installer.core.services.platform import detect_platform
from node_exporter_installer.core.services.unit_file import parse_unit


@dataclass
class RemoveResult:
    """Outcome of a removal."""

    config: InstallConfig
    report: ExecutionReport = field(default_factory=lambda: ExecutionReport(operation="remove"))
    platform: str = ""
    discovered: DiscoveredUnitConfig | None = None
    firewall: str | None = None
    user_outcome: accounts.DeleteOutcome = "absent"
    group_outcome: accounts.DeleteOutcome = "absent"
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def discovery_skipped(self) -> bool:
        return self.discovered is None

    def to_dict(self) -> dict:
        result: dict = {
            "ok": self.ok,
            "platform": self.platform,
            "service_user": self.config.service_user,
            "service_group": self.config.service_group,
            "port": self.config.port,
            "discovered": self.discovered.model_dump() if self.discovered else None,
            "firewall": self.firewall,
            "user": self.user_outcome,
            "group": self.group_outcome,
            "report": self.report.to_dict(),
        }
        if self.error:
            result["error"] = self.error
        return result


def require_root(host: HostContext) -> None:
    if host.geteuid() != 0:
        raise PrivilegeError("This command must be run as root or with sudo.")


def run_removal(
    config: InstallConfig,
    host: HostContext,
    executor: StepExecutor,
    result: RemoveResult | None = None,
) -> RemoveResult:
    """Remove an installation through an existing executor.

    Shared with the installer, which removes stale state with the same
    executor so both phases land in one report. ``result`` is filled
    in as the removal progresses.

    Raises:
        InstallerError: Not root, or the files could not be removed.
    """
    require_root(host)
    if result is None:
        result = RemoveResult(config=config, report=executor.report)
    executor.info("Starting Node Exporter removal")

    # ── Discovery ───────────────────────────────────────────────
    unit_path = config.service_file
    service = config.service_name
    fallback = f"using user={config.service_user} group={config.service_group} port={config.port}."
    if not executor.file_exists(unit_path):
        executor.notice(f"Service file {unit_path} not found. Skipping configuration discovery; {fallback}")
    else:
        text = executor.read_file(unit_path)
        if text is None:
            executor.notice(
                f"Service file {unit_path} could not be read. Skipping configuration discovery; {fallback}"
            )
        else:
            result.discovered = parse_unit(text)
            result.config = result.discovered.apply_to(config)
            executor.info(
                f"Discovered from {unit_path}: user={result.config.service_user} "
                f"group={result.config.service_group} port={result.config.port}"
            )
    resolved = result.config

    # ── Service ─────────────────────────────────────────────────
    executor.info(f"Stopping and disabling service ({service})")
    if not systemd.stop_and_disable(executor, service):
        executor.notice(f"Service {service} could not be stopped or disabled (it may not exist).")

    # ── Firewall ────────────────────────────────────────────────
    result.firewall = firewall.close_port(host, executor, resolved.port)

    # ── Files ───────────────────────────────────────────────────
    executor.info("Removing service file and binary")
    executor.delete_file("remove-unit-file", unit_path)
    executor.delete_file("remove-binary", config.binary_path)
    systemd.daemon_reload(executor)

    # ── Accounts ────────────────────────────────────────────────
    user, group = resolved.service_user, resolved.service_group
    if accounts.user_exists(executor, user):
        result.user_outcome = _delete_account(
            host, executor, "user", user, accounts.delete_user,
        )

    if accounts.group_exists(executor, group):
        result.group_outcome = _delete_account(
            host, executor, "group", group, accounts.delete_group,
        )
    elif group == user and result.user_outcome == "removed":
        # userdel drops a same-named primary group on most distributions
        result.group_outcome = "already-removed"

    executor.success("Node Exporter has been removed.")
    return result


def _delete_account(
    host: HostContext,
    executor: StepExecutor,
    kind: str,
    name: str,
    delete: Callable[[StepExecutor, str], tuple[accounts.DeleteOutcome, str]],
) -> accounts.DeleteOutcome:
    if executor.dry_run:
        executor.notice(f"[dry-run] Would ask whether to remove system {kind} '{name}'.")
        return "skipped"
    if not host.confirm(f"Remove system {kind} '{name}'?"):
        executor.info(f"Keeping {kind} '{name}'.")
        return "declined"

    outcome, error = delete(executor, name)
    if outcome == "removed":
        executor.success(f"Removed {kind} '{name}'.")
    elif outcome == "failed":
        executor.notice(f"Could not remove {kind} '{name}': {error}")
    return outcome


def remove_node_exporter(config: InstallConfig, host: HostContext) -> RemoveResult:
    """Remove Node Exporter from the host.

    Never raises; fatal conditions are returned in ``result.error``.
    """
    report = ExecutionReport(operation="remove")
    executor = StepExecutor(host.registry, report, host.on_event)
    result = RemoveResult(config=config, report=report)

    try:
        result.platform = detect_platform(*host.platform_info) if host.platform_info else detect_platform()
        run_removal(config, host, executor, result)
    except InstallerError as e:
        result.error = str(e)
    return result

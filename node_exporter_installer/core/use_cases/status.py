"""
Status use case — what is installed on this host, read-only.
"""

from __future__ import annotations

from dataclasses import dataclass

from node_exporter_installer.core.context import HostContext
from node_exporter_installer.core.engine.executor import ExecutionReport, StepExecutor
from node_exporter_installer.core.errors import PlatformError
from node_exporter_installer.core.models.config import DiscoveredUnitConfig, InstallConfig
from node_exporter_installer.core.services import firewall, systemd
from node_exporter_installer.core.services.platform import detect_platform
from node_exporter_installer.core.services.unit_file import parse_unit


@dataclass
class StatusResult:
    """Installation status of one host."""

    config: InstallConfig
    platform: str = ""
    error: str | None = None
    systemd: bool = False
    binary_installed: bool = False
    unit_present: bool = False
    discovered: DiscoveredUnitConfig | None = None
    service_state: str = "unknown"
    firewall: str | None = None

    @property
    def installed(self) -> bool:
        return self.binary_installed or self.unit_present

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
            return result

        return {
            "platform": self.platform,
            "systemd": self.systemd,
            "installed": self.installed,
            "binary": {"path": str(self.config.binary_path), "present": self.binary_installed},
            "unit_file": {"path": str(self.config.service_file), "present": self.unit_present},
            "discovered": self.discovered.model_dump() if self.discovered else None,
            "service_state": self.service_state,
            "firewall": self.firewall,
        }


def get_status(config: InstallConfig, host: HostContext) -> StatusResult:
    """Probe the host. Does not need root and changes nothing."""
    result = StatusResult(config=config)
    try:
        result.platform = detect_platform(*host.platform_info) if host.platform_info else detect_platform()
    except PlatformError as e:
        result.error = str(e)
        return result

    executor = StepExecutor(host.registry, ExecutionReport(operation="status"))
    result.systemd = systemd.systemd_running()
    result.binary_installed = executor.file_exists(config.binary_path)
    result.unit_present = executor.file_exists(config.service_file)

    if result.unit_present:
        text = executor.read_file(config.service_file)
        if text is not None:
            result.discovered = parse_unit(text)
        result.service_state = systemd.active_state(executor, config.service_name)

    result.firewall = firewall.detect_firewall(host, executor)
    return result

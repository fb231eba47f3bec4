"""
Firewall configuration — open or close the exporter's TCP port.

Two firewall managers are supported and checked in this order:

    firewalld  active when ``systemctl is-active --quiet firewalld`` exits 0
    ufw        active when ``ufw status`` reports ``Status: active``

With neither active the step is skipped with a notice. Closing a port
tolerates every failure: the rule may never have existed.
"""

from __future__ import annotations

from typing import Literal

from node_exporter_installer.core.context import HostContext
from node_exporter_installer.core.engine.executor import StepExecutor
from node_exporter_installer.core.services.systemd import is_active

Firewall = Literal["firewalld", "ufw"]

_UFW_ACTIVE = "Status: active"


def detect_firewall(host: HostContext, executor: StepExecutor) -> Firewall | None:
    """Which supported firewall manager is active, if any."""
    if is_active(executor, "firewalld"):
        return "firewalld"
    if host.which("ufw") is not None:
        receipt = executor.probe("ufw-status", ["ufw", "status"])
        if receipt.ok and _UFW_ACTIVE in receipt.output:
            return "ufw"
    return None


def open_port(host: HostContext, executor: StepExecutor, port: int) -> Firewall | None:
    """Allow inbound ``port``/tcp. Returns the firewall that was configured."""
    rule = f"{port}/tcp"
    firewall = detect_firewall(host, executor)

    if firewall == "firewalld":
        executor.info(f"firewalld is active. Opening port {rule}")
        executor.run("firewalld-add-port", ["firewall-cmd", "--permanent", f"--add-port={rule}", "--quiet"])
        executor.run("firewalld-reload", ["firewall-cmd", "--reload"])
    elif firewall == "ufw":
        executor.info(f"ufw is active. Opening port {rule}")
        executor.run("ufw-allow", ["ufw", "allow", rule])
    else:
        executor.notice("No active firewall (firewalld/ufw) detected. Skipping port configuration.")
    return firewall


def close_port(host: HostContext, executor: StepExecutor, port: int) -> Firewall | None:
    """Remove the rule for ``port``/tcp. Never raises on a missing rule."""
    rule = f"{port}/tcp"
    firewall = detect_firewall(host, executor)

    if firewall == "firewalld":
        executor.info(f"Removing firewalld rule for port {rule}")
        executor.run(
            "firewalld-remove-port",
            ["firewall-cmd", "--permanent", f"--remove-port={rule}", "--quiet"],
            tolerate=True,
        )
        executor.run("firewalld-reload", ["firewall-cmd", "--reload"], tolerate=True)
    elif firewall == "ufw":
        executor.info(f"Removing ufw rule for port {rule}")
        executor.run("ufw-delete", ["ufw", "delete", "allow", rule], tolerate=True)
    else:
        executor.notice("No active firewall (firewalld/ufw) detected. Skipping port removal.")
    return firewall

"""Service manager — systemctl calls for the exporter unit."""

from __future__ import annotations

from pathlib import Path

from node_exporter_installer.core.engine.executor import StepExecutor


def daemon_reload(executor: StepExecutor) -> None:
    executor.run("daemon-reload", ["systemctl", "daemon-reload"])


def enable_now(executor: StepExecutor, service: str) -> None:
    executor.run("enable-service", ["systemctl", "enable", "--now", service])


def stop_and_disable(executor: StepExecutor, service: str) -> bool:
    """Stop and disable ``service``; both tolerated. True if both succeeded."""
    stopped = executor.run("stop-service", ["systemctl", "stop", service], tolerate=True)
    disabled = executor.run("disable-service", ["systemctl", "disable", service], tolerate=True)
    return not stopped.failed and not disabled.failed


def is_active(executor: StepExecutor, service: str) -> bool:
    return executor.probe(f"is-active:{service}", ["systemctl", "is-active", "--quiet", service]).ok


def active_state(executor: StepExecutor, service: str) -> str:
    """``ActiveState`` of the unit (``active``, ``inactive``, ``failed``...)."""
    receipt = executor.probe(
        "show-state",
        ["systemctl", "show", service, "--property=ActiveState"],
    )
    if not receipt.ok:
        return "unknown"
    _, _, value = receipt.output.strip().partition("=")
    return value or "unknown"


def systemd_running(run_dir: Path = Path("/run/systemd/system")) -> bool:
    """Whether systemd is the init system of this host."""
    return run_dir.exists()

"""
Dependency resolution — make sure the programs the installer drives exist.

Each required tool is probed on PATH. Missing tools are installed
through the first package manager found (apt, dnf, yum), but only
after the operator agrees. Declining, or having no package manager,
is fatal: nothing else can run without these tools.
"""

from __future__ import annotations

import logging

from node_exporter_installer.core.context import HostContext
from node_exporter_installer.core.engine.executor import StepExecutor
from node_exporter_installer.core.errors import DependencyError

logger = logging.getLogger(__name__)

# Package managers in priority order: (name, probe binary, install argv).
PACKAGE_MANAGERS: list[tuple[str, str, list[str]]] = [
    ("apt", "apt-get", ["apt-get", "install", "-y"]),
    ("dnf", "dnf", ["dnf", "install", "-y"]),
    ("yum", "yum", ["yum", "install", "-y"]),
]

# Tool → package that provides it, per package manager.
REQUIRED_TOOLS: dict[str, dict] = {
    "tar": {
        "label": "tar",
        "packages": {"apt": "tar", "dnf": "tar", "yum": "tar"},
    },
    "install": {
        "label": "install (coreutils)",
        "packages": {"apt": "coreutils", "dnf": "coreutils", "yum": "coreutils"},
    },
    "getent": {
        "label": "getent",
        "packages": {"apt": "libc-bin", "dnf": "glibc-common", "yum": "glibc-common"},
    },
    "groupadd": {
        "label": "groupadd",
        "packages": {"apt": "passwd", "dnf": "shadow-utils", "yum": "shadow-utils"},
    },
    "useradd": {
        "label": "useradd",
        "packages": {"apt": "passwd", "dnf": "shadow-utils", "yum": "shadow-utils"},
    },
    "systemctl": {
        "label": "systemctl",
        "packages": {"apt": "systemd", "dnf": "systemd", "yum": "systemd"},
    },
}


def find_missing_tools(host: HostContext, tools: dict[str, dict] = REQUIRED_TOOLS) -> list[str]:
    """Names of the required tools that are not on PATH."""
    return [tool for tool in tools if host.which(tool) is None]


def detect_package_manager(host: HostContext) -> tuple[str, list[str]] | None:
    """First available package manager as ``(name, install argv)``."""
    for name, probe, install_cmd in PACKAGE_MANAGERS:
        if host.which(probe) is not None:
            return name, list(install_cmd)
    return None


def packages_for(missing: list[str], pkg_manager: str, tools: dict[str, dict] = REQUIRED_TOOLS) -> list[str]:
    """Distinct package names that provide ``missing``, in order."""
    packages: list[str] = []
    for tool in missing:
        pkg = tools.get(tool, {}).get("packages", {}).get(pkg_manager, tool)
        if pkg not in packages:
            packages.append(pkg)
    return packages


def ensure_dependencies(
    host: HostContext,
    executor: StepExecutor,
    tools: dict[str, dict] = REQUIRED_TOOLS,
) -> None:
    """Install missing tools with the operator's consent.

    Raises:
        DependencyError: No package manager, consent declined, or the
            package manager failed.
    """
    executor.info("Checking for required tools")
    missing = find_missing_tools(host, tools)
    if not missing:
        logger.debug("All required tools present: %s", ", ".join(tools))
        return

    executor.notice(f"Missing required tools: {' '.join(missing)}")

    detected = detect_package_manager(host)
    if detected is None:
        raise DependencyError(
            "Could not find a supported package manager (apt, dnf, yum). "
            "Please install the missing tools manually: " + ", ".join(missing)
        )
    pm, install_cmd = detected
    packages = packages_for(missing, pm, tools)

    if not host.confirm(f"Install {' '.join(packages)} now using {pm}?"):
        raise DependencyError("User declined to install dependencies.")

    executor.info(f"Installing {' '.join(packages)} with {pm}")
    receipt = executor.run(f"{pm}-install", install_cmd + packages, tolerate=True, timeout=900)
    if receipt.failed:
        raise DependencyError(
            "Failed to install dependencies. Please install them manually and rerun. "
            f"({receipt.error})"
        )
    executor.success("Dependencies installed successfully.")

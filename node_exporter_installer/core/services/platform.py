"""
Platform detection — map the host to a release platform tag.

Release assets are named ``node_exporter-<version>.<tag>.tar.gz``.
Only ``linux-amd64`` is installable; macOS is recognised so the
operator gets a precise message, then rejected.
"""

from __future__ import annotations

import logging
import platform

from node_exporter_installer.core.errors import PlatformError

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = frozenset({"linux-amd64"})

_LINUX_ARCHES = {"x86_64": "amd64", "amd64": "amd64"}
_DARWIN_ARCHES = {"x86_64": "amd64", "arm64": "arm64"}


def detect_platform(system: str | None = None, machine: str | None = None) -> str:
    """Return the platform tag for this host.

    Args:
        system: OS name (default: ``platform.system()``).
        machine: CPU architecture (default: ``platform.machine()``).

    Raises:
        PlatformError: For every OS/architecture pair that cannot be installed.
    """
    os_name = (system if system is not None else platform.system()).lower()
    arch = machine if machine is not None else platform.machine()
    logger.debug("Detecting platform: system=%s machine=%s", os_name, arch)

    if os_name == "linux":
        if arch not in _LINUX_ARCHES:
            raise PlatformError(
                f"Unsupported Linux architecture: '{arch}'. "
                "Only amd64 (x86_64) is supported on Linux."
            )
        return f"linux-{_LINUX_ARCHES[arch]}"

    if os_name == "darwin":
        if arch not in _DARWIN_ARCHES:
            raise PlatformError(f"Unsupported Darwin (macOS) architecture: '{arch}'.")
        tag = f"darwin-{_DARWIN_ARCHES[arch]}"
        raise PlatformError(
            f"Platform '{tag}' detected, but installation is not supported on macOS "
            "(systemd is required)."
        )

    raise PlatformError(f"Unsupported operating system: '{os_name}'.")

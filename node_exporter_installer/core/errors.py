"""
Installer errors — the fatal conditions of an install or remove run.

Raised inside services and caught at the use-case boundary, where
they become the ``error`` of the result the CLI reports. Best-effort
removal failures are never raised; they are recorded on the result.
"""

from __future__ import annotations

from node_exporter_installer.core.models.action import Receipt


class InstallerError(Exception):
    """Base class for every fatal installer condition."""


class PlatformError(InstallerError):
    """The host OS / architecture is not supported."""


class PrivilegeError(InstallerError):
    """The operation needs root and we are not root."""


class DependencyError(InstallerError):
    """Required tools are missing and could not be installed."""


class ReleaseError(InstallerError):
    """No usable release asset could be resolved or downloaded."""


class StepFailed(InstallerError):
    """A required external invocation failed."""

    def __init__(self, step: str, receipt: Receipt):
        self.step = step
        self.receipt = receipt
        detail = receipt.error or f"exit code {receipt.return_code}"
        super().__init__(f"Step '{step}' failed: {detail}")

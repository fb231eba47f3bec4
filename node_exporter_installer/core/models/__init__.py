"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from node_exporter_installer.core.models import Action, Receipt, InstallConfig
"""

from node_exporter_installer.core.models.action import Action, Receipt
from node_exporter_installer.core.models.config import (
    DiscoveredUnitConfig,
    InstallConfig,
    ReleaseAsset,
)

__all__ = [
    "Action",
    "DiscoveredUnitConfig",
    "InstallConfig",
    "Receipt",
    "ReleaseAsset",
]

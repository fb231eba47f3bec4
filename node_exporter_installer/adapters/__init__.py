"""Adapters — bindings to the host's external programs and filesystem.

Public re-exports for convenient access.
"""

from node_exporter_installer.adapters.base import Adapter, ExecutionContext
from node_exporter_installer.adapters.mock import MockAdapter
from node_exporter_installer.adapters.registry import AdapterRegistry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
]

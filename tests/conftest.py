"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from node_exporter_installer.core.models.config import InstallConfig
from tests.simulated_host import SimulatedHost


@pytest.fixture
def sim() -> SimulatedHost:
    """A fresh simulated host with every required tool present."""
    return SimulatedHost()


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    """Filesystem root the installer's paths live under."""
    root = tmp_path / "root"
    (root / "work").mkdir(parents=True)
    return root


@pytest.fixture
def make_config(install_root: Path):
    """Build an InstallConfig whose paths point into ``install_root``."""

    def _make(**overrides) -> InstallConfig:
        values = {
            "binary_path": install_root / "usr/local/bin/node_exporter",
            "unit_dir": install_root / "etc/systemd/system",
            "home_dir": install_root / "var/lib/node_exporter",
            "http_retries": 1,
        }
        values.update(overrides)
        return InstallConfig(**values)

    return _make


@pytest.fixture
def config(make_config) -> InstallConfig:
    return make_config()

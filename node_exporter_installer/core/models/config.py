"""
Configuration models — what gets installed, and what was found on disk.

``InstallConfig`` is built once at startup (defaults ← config file ←
CLI overrides) and is read-only afterwards. Anything that needs a
different view of it (e.g. values discovered from an existing unit
file) produces a new instance.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SERVICE_USER = "node_exporter"
DEFAULT_SERVICE_GROUP = "node_exporter"
DEFAULT_PORT = 9100
DEFAULT_BINARY_PATH = Path("/usr/local/bin/node_exporter")
DEFAULT_UNIT_DIR = Path("/etc/systemd/system")
DEFAULT_HOME_DIR = Path("/var/lib/node_exporter")
DEFAULT_RELEASE_REPO = "prometheus/node_exporter"

# useradd's default NAME_REGEX, which also keeps names usable as unit file names.
ACCOUNT_NAME_PATTERN = r"^[a-z_][a-z0-9_-]*\$?$"


class InstallConfig(BaseModel):
    """Immutable installer configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    service_user: str = Field(
        default=DEFAULT_SERVICE_USER, min_length=1, max_length=32, pattern=ACCOUNT_NAME_PATTERN,
    )
    service_group: str = Field(
        default=DEFAULT_SERVICE_GROUP, min_length=1, max_length=32, pattern=ACCOUNT_NAME_PATTERN,
    )
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    binary_path: Path = DEFAULT_BINARY_PATH
    unit_dir: Path = DEFAULT_UNIT_DIR
    home_dir: Path = DEFAULT_HOME_DIR

    release_repo: str = DEFAULT_RELEASE_REPO
    http_timeout: int = Field(default=30, ge=1)
    http_retries: int = Field(default=3, ge=1)

    @property
    def service_name(self) -> str:
        """systemd unit name (the unit file is named after the user)."""
        return self.service_user

    @property
    def service_file(self) -> Path:
        return self.unit_dir / f"{self.service_user}.service"

    @property
    def metrics_url(self) -> str:
        return f"http://<your_server_ip>:{self.port}/metrics"


class DiscoveredUnitConfig(BaseModel):
    """Values recovered from an existing unit file.

    Each field is independently optional: ``None`` means the unit
    file did not yield a usable value for it.
    """

    user: str | None = None
    group: str | None = None
    port: int | None = None

    @property
    def empty(self) -> bool:
        return self.user is None and self.group is None and self.port is None

    def apply_to(self, config: InstallConfig) -> InstallConfig:
        """Return ``config`` with every discovered field overriding it.

        ``service_file`` and ``service_name`` derive from the user, so
        callers acting on the unit that was parsed keep the original
        config for those.
        """
        update: dict[str, object] = {}
        if self.user is not None:
            update["service_user"] = self.user
        if self.group is not None:
            update["service_group"] = self.group
        if self.port is not None:
            update["port"] = self.port
        return config.model_copy(update=update)


class ReleaseAsset(BaseModel):
    """A downloadable asset of a published release."""

    name: str
    url: str
    version: str = ""
    size_bytes: int = 0

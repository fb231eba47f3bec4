"""
Configuration loader — builds the one InstallConfig a run uses.

Sources, lowest to highest precedence:

    1. built-in defaults (``InstallConfig``)
    2. a YAML file: ``--config``, else ``$NEI_CONFIG``, else
       ``/etc/node-exporter-installer.yml`` when it exists
    3. command-line overrides (``--user``, ``--group``, ``--port``)

The YAML keys are the ``InstallConfig`` field names, either at the
top level or nested under ``node_exporter:``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from node_exporter_installer.core.models.config import InstallConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("/etc/node-exporter-installer.yml")
CONFIG_ENV_VAR = "NEI_CONFIG"


class ConfigError(Exception):
    """Raised when installer configuration is invalid or missing."""


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the config file to use, if any.

    An explicit path (flag or env var) must exist; the system-wide
    default is optional.
    """
    if explicit is not None:
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    if DEFAULT_CONFIG_FILE.is_file():
        return DEFAULT_CONFIG_FILE
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Read the YAML mapping of config values from ``path``.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    section = data.get("node_exporter", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Expected 'node_exporter' to be a mapping in {path}")
    return section


def load_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> InstallConfig:
    """Build the run's configuration.

    Args:
        path: Explicit config file (``--config``). None searches the defaults.
        overrides: Command-line values; ``None`` entries are ignored.

    Raises:
        ConfigError: If the file or the merged values are invalid.
    """
    values: dict[str, Any] = {}

    config_path = find_config_file(path)
    if config_path is not None:
        values.update(read_config_file(config_path))

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    try:
        config = InstallConfig.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"Invalid installer configuration: {e}") from e

    logger.info(
        "Config: user=%s group=%s port=%d",
        config.service_user, config.service_group, config.port,
    )
    return config

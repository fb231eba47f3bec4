"""
Unit file — render the exporter's systemd unit and read it back.

The rendered file is also the only record of how a host was set up:
removal recovers the user, group and port from it. The layout below
must therefore stay stable, so that anything an earlier release wrote
can still be removed.

Discovery grammar (one logical line at a time)::

    line        := ws* KEY ws* "=" ws* VALUE ws*
    KEY         := "User" | "Group" | "ExecStart"      (case-sensitive)
    comment     := ws* ("#" | ";") ...                 (ignored)

    User, Group -> VALUE verbatim if non-empty; a later line overrides
                   an earlier one, as systemd does.
    ExecStart   -> port = trailing digits of the --web.listen-address
                   argument, written "--web.listen-address=[HOST]:PORT"
                   or "--web.listen-address [HOST]:PORT". Ports outside
                   1..65535 are ignored.
"""

from __future__ import annotations

import re

from node_exporter_installer.core.models.config import DiscoveredUnitConfig, InstallConfig

_UNIT_TEMPLATE = """\
[Unit]
Description=Prometheus Node Exporter (user: {user})
Wants=network-online.target
After=network-online.target

[Service]
User={user}
Group={group}
Type=simple
ExecStart={binary} --web.listen-address=:{port}
Restart=on-failure
RestartSec=5s

[Install]
WantedBy=multi-user.target
"""

_ASSIGNMENT = re.compile(r"^\s*(?P<key>[A-Za-z]+)\s*=\s*(?P<value>.*?)\s*$")
_LISTEN_PORT = re.compile(r"--web\.listen-address(?:=|\s+)\S*?(?P<port>\d+)(?=\s|$)")


def render_unit(config: InstallConfig) -> str:
    """Unit file contents for ``config``."""
    return _UNIT_TEMPLATE.format(
        user=config.service_user,
        group=config.service_group,
        binary=config.binary_path,
        port=config.port,
    )


def parse_listen_port(exec_start: str) -> int | None:
    """Port of the ``--web.listen-address`` argument in an ExecStart value."""
    match = _LISTEN_PORT.search(exec_start)
    if match is None:
        return None
    port = int(match.group("port"))
    if not 1 <= port <= 65535:
        return None
    return port


def parse_unit(text: str) -> DiscoveredUnitConfig:
    """Recover user, group and port from unit file contents.

    Fields that are absent or unusable stay ``None``.
    """
    found: dict[str, object] = {}

    for line in text.splitlines():
        if line.lstrip().startswith(("#", ";")):
            continue
        match = _ASSIGNMENT.match(line)
        if match is None:
            continue
        key, value = match.group("key"), match.group("value")

        if key == "User" and value:
            found["user"] = value
        elif key == "Group" and value:
            found["group"] = value
        elif key == "ExecStart":
            port = parse_listen_port(value)
            if port is not None:
                found["port"] = port

    return DiscoveredUnitConfig(**found)

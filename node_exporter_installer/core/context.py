"""
Host context — the capabilities an install or remove run acts through.

Built once by the CLI (or by a test) and handed to the use cases:

    - CLI:    main.py  → build_host(dry_run=..., assume_yes=...)
    - Tests:  conftest → HostContext(registry=<mocks>, confirm=StaticConfirmer(...))

Nothing in the use cases reaches the real host except through the
members of this object.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from node_exporter_installer.adapters.registry import AdapterRegistry
from node_exporter_installer.adapters.shell.command import ShellCommandAdapter
from node_exporter_installer.adapters.shell.filesystem import FilesystemAdapter
from node_exporter_installer.core.engine.executor import Event
from node_exporter_installer.core.services.consent import Confirmer, build_confirmer


@dataclass
class HostContext:
    """Capabilities of the host the installer runs on.

    Attributes:
        registry: Adapter registry every command and file operation goes through.
        confirm: Consent capability for interactive questions.
        which: PATH lookup for a program name.
        geteuid: Effective user ID getter (root check).
        platform_info: ``(system, machine)`` override; None reads the real host.
        fetch: HTTP GET ``(url, timeout) -> bytes``; None uses urllib.
        workdir: Scratch directory for downloads; removed by the caller.
        on_event: Live progress callback.
    """

    registry: AdapterRegistry
    confirm: Confirmer
    which: Callable[[str], str | None] = shutil.which
    geteuid: Callable[[], int] = os.geteuid
    platform_info: tuple[str, str] | None = None
    fetch: Callable[[str, int], bytes] | None = None
    workdir: Path | None = None
    on_event: Callable[[Event], None] | None = field(default=None, repr=False)


def build_host(
    *,
    dry_run: bool = False,
    assume_yes: bool = False,
    workdir: Path | None = None,
    on_event: Callable[[Event], None] | None = None,
) -> HostContext:
    """Host context wired to the real system."""
    registry = AdapterRegistry(dry_run=dry_run, cwd=str(workdir) if workdir else None)
    registry.register(ShellCommandAdapter())
    registry.register(FilesystemAdapter())
    return HostContext(
        registry=registry,
        confirm=build_confirmer(assume_yes),
        workdir=workdir,
        on_event=on_event,
    )

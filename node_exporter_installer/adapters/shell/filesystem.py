"""
Filesystem adapter — the unit file and binary the installer owns.

Going through an adapter (rather than ``Path.write_text`` in the use
case) lets these writes be skipped in dry-run and recorded in the
report next to the commands.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from node_exporter_installer.adapters.base import Adapter, ExecutionContext
from node_exporter_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)


class FilesystemAdapter(Adapter):
    """``params``: ``operation`` (exists | read | write | delete), ``path``,
    and for writes ``content`` plus an optional ``mode``."""

    OPERATIONS = ("exists", "read", "write", "delete")

    @property
    def name(self) -> str:
        return "filesystem"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation")
        if operation not in self.OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(self.OPERATIONS)}"
        path = params.get("path")
        if not path or not Path(path).is_absolute():
            return False, f"Path must be absolute: {path!r}"
        if operation == "write" and "content" not in params:
            return False, "write needs 'content'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        target = Path(params["path"])
        handler = getattr(self, f"_{params['operation']}")
        try:
            return handler(context.action.id, target, params)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{params['operation']} {target}: {e}",
            )

    def _exists(self, step: str, target: Path, params: dict) -> Receipt:
        exists = target.exists()
        return Receipt.success(self.name, step, output=str(exists), metadata={"exists": exists})

    def _read(self, step: str, target: Path, params: dict) -> Receipt:
        if not target.is_file():
            return Receipt.failure(self.name, step, error=f"File not found: {target}")
        return Receipt.success(self.name, step, output=target.read_text(encoding="utf-8", errors="replace"))

    def _write(self, step: str, target: Path, params: dict) -> Receipt:
        content = params["content"]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        if params.get("mode") is not None:
            os.chmod(target, params["mode"])
        logger.debug("Wrote %s (%d bytes)", target, len(content))
        return Receipt.success(self.name, step, output=f"Wrote {target}")

    def _delete(self, step: str, target: Path, params: dict) -> Receipt:
        existed = target.exists()
        target.unlink(missing_ok=True)
        return Receipt.success(
            self.name, step,
            output=f"Removed {target}" if existed else f"Not present: {target}",
            metadata={"existed": existed},
        )

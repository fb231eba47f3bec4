"""
Adapter registry — every action of a run is dispatched here.

The registry owns the dry-run switch: when it is set, actions marked
``mutating`` come back as skipped receipts without reaching their
adapter, while read-only probes still run so the plan reflects the
real host.
"""

from __future__ import annotations

import logging
import time

from node_exporter_installer.adapters.base import Adapter, ExecutionContext
from node_exporter_installer.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus the dispatch loop around them.

    Args:
        dry_run: Skip mutating actions instead of executing them.
        cwd: Working directory for commands (the run's scratch dir).
    """

    def __init__(self, dry_run: bool = False, cwd: str | None = None):
        self._adapters: dict[str, Adapter] = {}
        self._dry_run = dry_run
        self._cwd = cwd

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def _refuse(self, action: Action, error: str) -> Receipt:
        return Receipt.failure(adapter=action.adapter, action_id=action.id, error=error)

    def execute_action(self, action: Action) -> Receipt:
        """Dispatch ``action`` to its adapter. Always returns a receipt."""
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return self._refuse(action, f"No adapter registered for '{action.adapter}'")

        context = ExecutionContext(action=action, dry_run=self._dry_run, cwd=self._cwd)
        valid, reason = adapter.validate(context)
        if not valid:
            return self._refuse(action, f"Validation failed: {reason}")

        if self._dry_run and action.mutating:
            target = action.command_line or action.params.get("path", action.id)
            logger.debug("dry-run: skipping %s", action.id)
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] Would run: {target}",
                metadata={"dry_run": True},
            )

        started = time.monotonic()
        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            receipt = self._refuse(action, f"Unexpected error: {e}")

        if not receipt.duration_ms:
            receipt.duration_ms = int((time.monotonic() - started) * 1000)
        return receipt

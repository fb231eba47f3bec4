"""
Step executor — fail-fast sequencing of external invocations.

Every step of an install or remove run is one Action dispatched
through the adapter registry. The executor records each receipt in
the run's report and decides what a failure means: a required step
raises ``StepFailed`` (aborting the run), a tolerated step is noted
and the run continues.

Flow:
    step → Action → registry → Receipt → report → (raise | continue)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from node_exporter_installer.adapters.registry import AdapterRegistry
from node_exporter_installer.core.errors import StepFailed
from node_exporter_installer.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)

EventLevel = Literal["info", "success", "notice", "error"]


@dataclass
class Event:
    """An operator-facing progress message."""

    level: EventLevel
    message: str

    def to_dict(self) -> dict:
        return {"level": self.level, "message": self.message}


@dataclass
class ExecutionReport:
    """Everything that happened during one run."""

    operation: str = ""
    receipts: list[Receipt] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    def notices(self) -> list[str]:
        return [e.message for e in self.events if e.level == "notice"]

    def to_dict(self) -> dict:
        return {
            "operation": self.operation,
            "total": self.total,
            "failed": self.failed,
            "skipped": self.skipped,
            "events": [e.to_dict() for e in self.events],
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


class StepExecutor:
    """Run steps through the registry and record them.

    Args:
        registry: Adapter registry for dispatch.
        report: Report that collects receipts and events.
        on_event: Optional callback for live progress output.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        report: ExecutionReport,
        on_event: Callable[[Event], None] | None = None,
    ):
        self.registry = registry
        self.report = report
        self._on_event = on_event

    @property
    def dry_run(self) -> bool:
        return self.registry.dry_run

    # ── Events ──────────────────────────────────────────────────

    def emit(self, level: EventLevel, message: str) -> None:
        event = Event(level=level, message=message)
        self.report.events.append(event)
        logger.info("[%s] %s", level, message)
        if self._on_event is not None:
            self._on_event(event)

    def info(self, message: str) -> None:
        self.emit("info", message)

    def success(self, message: str) -> None:
        self.emit("success", message)

    def notice(self, message: str) -> None:
        self.emit("notice", message)

    # ── Commands ────────────────────────────────────────────────

    def dispatch(self, action: Action) -> Receipt:
        receipt = self.registry.execute_action(action)
        self.report.receipts.append(receipt)
        if receipt.failed:
            logger.debug("Step %s failed: %s", action.id, receipt.error)
        return receipt

    def run(
        self,
        step: str,
        argv: list[str],
        *,
        tolerate: bool = False,
        mutating: bool = True,
        timeout: int = 300,
    ) -> Receipt:
        """Run a command. A failure raises ``StepFailed`` unless tolerated."""
        action = Action(
            id=step,
            argv=argv,
            mutating=mutating,
            timeout=timeout,
        )
        receipt = self.dispatch(action)
        if receipt.failed and not tolerate:
            raise StepFailed(step, receipt)
        return receipt

    def probe(self, step: str, argv: list[str], timeout: int = 30) -> Receipt:
        """Run a read-only command whose exit code is the answer."""
        return self.run(step, argv, tolerate=True, mutating=False, timeout=timeout)

    # ── Files ───────────────────────────────────────────────────

    def _file_op(self, step: str, operation: str, path: Path, **params: object) -> Receipt:
        action = Action(
            id=step,
            adapter="filesystem",
            mutating=operation in ("write", "delete"),
            params={"operation": operation, "path": str(path), **params},
        )
        return self.dispatch(action)

    def file_exists(self, path: Path) -> bool:
        receipt = self._file_op(f"exists:{path.name}", "exists", path)
        return bool(receipt.ok and receipt.metadata.get("exists"))

    def read_file(self, path: Path) -> str | None:
        receipt = self._file_op(f"read:{path.name}", "read", path)
        return receipt.output if receipt.ok else None

    def write_file(self, step: str, path: Path, content: str, mode: int = 0o644) -> Receipt:
        receipt = self._file_op(step, "write", path, content=content, mode=mode)
        if receipt.failed:
            raise StepFailed(step, receipt)
        return receipt

    def delete_file(self, step: str, path: Path) -> Receipt:
        receipt = self._file_op(step, "delete", path)
        if receipt.failed:
            raise StepFailed(step, receipt)
        return receipt

"""
Action and Receipt — what a step asks for and what came of it.

A step of an install or remove run becomes one ``Action``: a command
line for the shell adapter, or a file operation for the filesystem
adapter. The adapter answers with a ``Receipt``, which is also what
ends up in the run's report and in ``--json`` output.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "skipped", "failed"]


class Action(BaseModel):
    """One external invocation.

    ``mutating`` actions are skipped in dry-run mode; probes
    (``mutating=False``) always run.
    """

    id: str                          # step id, e.g. "useradd", "enable-service"
    adapter: str = "shell"
    argv: list[str] = Field(default_factory=list)
    params: dict[str, Any] = Field(default_factory=dict)
    mutating: bool = True
    timeout: int = 300               # seconds

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)


class Receipt(BaseModel):
    """Outcome of one action. Failures are data, not exceptions."""

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"
    finished_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    duration_ms: int = 0
    return_code: int | None = None
    output: str = ""
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **extra: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **extra)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **extra: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status="failed", error=error, **extra)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **extra: Any) -> Receipt:
        """A mutating action not carried out; ``reason`` goes in ``output``."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **extra)

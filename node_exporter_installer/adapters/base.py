"""
Adapter base — the seam between the installer and the host it changes.

Running a program and touching an installer-owned file are the only
two kinds of side effect, and each has an adapter. Use cases describe
what they want as an ``Action`` and get a ``Receipt`` back; a test
registers a mock under the same name and sees every call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel

from node_exporter_installer.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """One action as handed to an adapter."""

    action: Action
    dry_run: bool = False
    cwd: str | None = None  # scratch directory of the run


class Adapter(ABC):
    """A way of carrying out actions on the host.

    ``execute`` reports every failure in the receipt it returns.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key; matches ``Action.adapter``."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check the action is well-formed: ``(ok, reason)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Carry out the action."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

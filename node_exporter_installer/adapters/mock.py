"""
Mock adapter — stands in for the shell adapter in tests.

Every call is recorded. A call is answered by a scripted failure for
its action id if one was set, else by ``handler`` (a fake host that
keeps state between calls), else with a plain success.
"""

from __future__ import annotations

from collections.abc import Callable

from node_exporter_installer.adapters.base import Adapter, ExecutionContext
from node_exporter_installer.core.models.action import Action, Receipt

Handler = Callable[[Action], "Receipt | None"]


class MockAdapter(Adapter):
    def __init__(
        self,
        adapter_name: str = "shell",
        default_output: str = "",
        handler: Handler | None = None,
    ):
        self._name = adapter_name
        self._default_output = default_output
        self._handler = handler
        self._failures: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def commands(self) -> list[list[str]]:
        """argv of every call, oldest first."""
        return [ctx.action.argv for ctx in self.call_log]

    def set_failure(self, action_id: str, error: str = "Mock failure", return_code: int = 1) -> None:
        self._failures[action_id] = Receipt.failure(
            adapter=self._name, action_id=action_id, error=error, return_code=return_code,
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action = context.action

        scripted = self._failures.get(action.id)
        if scripted is not None:
            return scripted
        if self._handler is not None:
            receipt = self._handler(action)
            if receipt is not None:
                return receipt
        return Receipt.success(
            adapter=self._name, action_id=action.id, output=self._default_output, return_code=0,
        )

"""
Shell command adapter — the one place a process is spawned.

Commands run from their argv list with no shell in between, so a
user or group name given on the command line is only ever an
argument. stdout becomes the receipt's output; on failure stderr
becomes its error.
"""

from __future__ import annotations

import logging
import subprocess
import time

from node_exporter_installer.adapters.base import Adapter, ExecutionContext
from node_exporter_installer.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Package managers can print a lot; receipts keep the end.
_OUTPUT_TAIL = 2000


def _tail(text: str | None) -> str:
    return text[-_OUTPUT_TAIL:].strip() if text else ""


class ShellCommandAdapter(Adapter):
    @property
    def name(self) -> str:
        return "shell"

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        if not context.action.argv:
            return False, "empty argv"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action
        logger.debug("$ %s", action.command_line)
        started = time.monotonic()

        try:
            proc = subprocess.run(
                action.argv,
                capture_output=True,
                text=True,
                timeout=action.timeout,
                cwd=context.cwd,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                self.name, action.id, error=f"Command timed out after {action.timeout}s",
            )
        except FileNotFoundError:
            return Receipt.failure(
                self.name, action.id, error=f"Command not found: {action.argv[0]}", return_code=127,
            )
        except OSError as e:
            logger.exception("Could not run %s", action.command_line)
            return Receipt.failure(self.name, action.id, error=f"Could not run {action.argv[0]}: {e}")

        elapsed = int((time.monotonic() - started) * 1000)
        stdout, stderr = _tail(proc.stdout), _tail(proc.stderr)
        if proc.returncode == 0:
            return Receipt.success(
                self.name, action.id, output=stdout, return_code=0, duration_ms=elapsed,
            )
        return Receipt.failure(
            self.name,
            action.id,
            error=stderr or f"Command exited with code {proc.returncode}",
            output=stdout,
            return_code=proc.returncode,
            duration_ms=elapsed,
        )

"""
System accounts — the user and group the exporter runs as.

Creation is idempotent (``getent`` first). Deletion is best-effort and
reports what happened instead of raising: an account that owns a
running process can't be removed, and that must not stop a removal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from node_exporter_installer.core.engine.executor import StepExecutor

NO_LOGIN_SHELL = "/bin/false"

DeleteOutcome = Literal["removed", "failed", "declined", "absent", "skipped", "already-removed"]


def group_exists(executor: StepExecutor, group: str) -> bool:
    return executor.probe("getent-group", ["getent", "group", group]).ok


def user_exists(executor: StepExecutor, user: str) -> bool:
    return executor.probe("getent-passwd", ["getent", "passwd", user]).ok


def ensure_group(executor: StepExecutor, group: str) -> bool:
    """Create ``group`` as a system group. Returns True if it was created."""
    if group_exists(executor, group):
        return False
    receipt = executor.run("groupadd", ["groupadd", "--system", group])
    return not receipt.skipped


def ensure_user(executor: StepExecutor, user: str, group: str, home_dir: Path) -> bool:
    """Create ``user`` as a no-login system account. Returns True if created."""
    if user_exists(executor, user):
        return False
    receipt = executor.run(
        "useradd",
        [
            "useradd", "--system",
            "-d", str(home_dir),
            "-s", NO_LOGIN_SHELL,
            "-g", group,
            user,
        ],
    )
    return not receipt.skipped


def delete_user(executor: StepExecutor, user: str) -> tuple[DeleteOutcome, str]:
    receipt = executor.run("userdel", ["userdel", user], tolerate=True)
    if receipt.failed:
        return "failed", receipt.error or ""
    return ("skipped" if receipt.skipped else "removed"), ""


def delete_group(executor: StepExecutor, group: str) -> tuple[DeleteOutcome, str]:
    receipt = executor.run("groupdel", ["groupdel", group], tolerate=True)
    if receipt.failed:
        return "failed", receipt.error or ""
    return ("skipped" if receipt.skipped else "removed"), ""

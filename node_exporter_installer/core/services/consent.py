"""
Operator consent — the yes/no questions asked during a run.

A confirmer is any callable ``(question) -> bool``. The CLI builds
one from its flags; tests pass a ``StaticConfirmer`` so both branches
of every prompt can be exercised without a terminal.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

import click

logger = logging.getLogger(__name__)

Confirmer = Callable[[str], bool]


class StaticConfirmer:
    """Answer every question the same way, and remember what was asked."""

    def __init__(self, answer: bool):
        self.answer = answer
        self.questions: list[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        return self.answer


class InteractiveConfirmer:
    """Ask on the terminal; deny when there is no terminal to ask on."""

    def __call__(self, question: str) -> bool:
        if not sys.stdin.isatty():
            logger.info("No terminal for prompt, answering no: %s", question)
            return False
        return click.confirm(question, default=False)


def build_confirmer(assume_yes: bool) -> Confirmer:
    """Confirmer for the CLI: ``--yes`` consents to everything."""
    if assume_yes:
        return StaticConfirmer(True)
    return InteractiveConfirmer()

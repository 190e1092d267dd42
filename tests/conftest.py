"""Shared fixtures for literal-hell tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from literal_hell.core.config import LiteralHellConfig
from literal_hell.core.models import Decision
from literal_hell.fix.memory import RejectionMemory
from literal_hell.fix.review import DecisionSource


class ScriptedDecisions(DecisionSource):
    """Replays a fixed list of decisions instead of reading the keyboard."""

    def __init__(self, decisions: list[Decision] | None = None, default: Decision = Decision.APPLY):
        self.decisions = list(decisions or [])
        self.default = default
        self.prompts: list[str] = []
        self.acknowledged = 0

    def read(self, prompt: str) -> Decision:
        self.prompts.append(prompt)
        if self.decisions:
            return self.decisions.pop(0)
        return self.default

    def acknowledge(self, message: str = "") -> None:
        self.acknowledged += 1


class InterruptingDecisions(ScriptedDecisions):
    """Raises KeyboardInterrupt once the scripted decisions run out."""

    def read(self, prompt: str) -> Decision:
        if not self.decisions:
            raise KeyboardInterrupt
        return super().read(prompt)


@pytest.fixture
def config() -> LiteralHellConfig:
    return LiteralHellConfig()


@pytest.fixture
def memory(tmp_path: Path) -> RejectionMemory:
    return RejectionMemory(tmp_path / ".literal-hell-wards")


@pytest.fixture
def scripted():
    """Factory for scripted decision sources."""
    return ScriptedDecisions


@pytest.fixture
def interrupting():
    return InterruptingDecisions

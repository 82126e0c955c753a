"""
Shared fixtures for the ofsbuild test suite.

FakeRunner stands in for every external tool: tests script the outcome of a
command by its leading words and inspect the recorded calls afterwards.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from ofsbuild.config import FlashConfig
from ofsbuild.process import IProcessRunner, ProcessOutcome


@dataclass
class FakeCall:
    command: List[str]
    env: Dict[str, str] = field(default_factory=dict)
    capture: bool = True

    @property
    def line(self) -> str:
        return " ".join(self.command)


class FakeRunner(IProcessRunner):
    """Scripted process runner.

    script("dfu-programmer atmega16u2 erase", ProcessOutcome(5)) makes every
    command starting with those words return the given outcomes in order; the
    last outcome repeats. An exception given as an outcome is raised instead.
    Unscripted commands succeed with no output.
    """

    def __init__(self) -> None:
        self.scripts: Dict[str, List[ProcessOutcome]] = {}
        self.calls: List[FakeCall] = []

    def script(self, prefix: str, *outcomes) -> "FakeRunner":
        self.scripts[prefix] = list(outcomes)
        return self

    def run(self, command, env=None, capture=True, cwd: Optional[Path] = None) -> ProcessOutcome:
        call = FakeCall([str(part) for part in command], dict(env or {}), capture)
        self.calls.append(call)
        matches = [prefix for prefix in self.scripts if call.line.startswith(prefix)]
        if not matches:
            return ProcessOutcome(0)
        queue = self.scripts[max(matches, key=len)]
        if len(queue) > 1:
            outcome = queue.pop(0)
        else:
            outcome = queue[0] if queue else ProcessOutcome(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def tools(self) -> List[str]:
        """Executables invoked, in order."""
        return [call.command[0] for call in self.calls]

    def calls_for(self, prefix: str) -> List[FakeCall]:
        return [call for call in self.calls if call.line.startswith(prefix)]


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def flash_config():
    """Default flash settings with a zero poll interval."""
    config = FlashConfig()
    config.poll_interval = 0.0
    return config

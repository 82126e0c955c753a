"""
Subprocess execution for external tools.

Every external tool (cargo, avrdude, dfu-programmer, avr-objcopy, lsusb) is
invoked through an IProcessRunner so the orchestration code can be driven by
a scripted fake in tests.
"""

import logging
import os
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .errors import ToolNotFoundError

logger = logging.getLogger(__name__)

SIGNAL_EXIT_BASE = 128


@dataclass
class ProcessOutcome:
    """Exit status and captured output of a finished subprocess."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


class IProcessRunner(ABC):
    """Interface for running external tools."""

    @abstractmethod
    def run(
        self,
        command: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        capture: bool = True,
        cwd: Optional[Path] = None,
    ) -> ProcessOutcome:
        """Run a command to completion.

        Args:
            command: Executable followed by its arguments
            env: Environment overrides applied on top of the current environment
            capture: Capture stdout/stderr; when False they go to the terminal
            cwd: Working directory

        Returns:
            ProcessOutcome with exit status and captured output

        Raises:
            ToolNotFoundError: If the executable does not exist
        """
        pass


class SubprocessRunner(IProcessRunner):
    """Runs commands with subprocess.run, one at a time."""

    def run(
        self,
        command: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        capture: bool = True,
        cwd: Optional[Path] = None,
    ) -> ProcessOutcome:
        cmd = [str(part) for part in command]
        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)
            logger.debug("Environment overrides: %s", dict(env))
        logger.debug("Running: %s", shlex.join(cmd))

        try:
            # capture_output reads both pipes to EOF before returning
            result = subprocess.run(
                cmd,
                cwd=cwd,
                env=full_env,
                capture_output=capture,
                text=False,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(cmd[0]) from e

        returncode = result.returncode
        if returncode < 0:
            # Killed by signal N; report 128+N like a shell does
            logger.debug("%s killed by signal %d", cmd[0], -returncode)
            returncode = SIGNAL_EXIT_BASE - returncode
        logger.debug("%s exited with status %d", cmd[0], returncode)
        return ProcessOutcome(
            returncode=returncode,
            stdout=result.stdout or b"",
            stderr=result.stderr or b"",
        )

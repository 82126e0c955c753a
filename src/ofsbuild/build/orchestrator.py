"""
Build orchestration for the firmware crates.

This module runs the cargo cross-compilation for one project profile. The
toolchain itself is opaque: it receives the manifest path, the AVR target
specification and the build-std subset, and reports an exit status. Cargo's
output is not captured; it goes straight to the terminal.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.profiles import ProjectProfile
from ..errors import BuildFailure
from ..process import IProcessRunner, ProcessOutcome, SubprocessRunner

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a cargo build."""

    outcome: ProcessOutcome
    elf_path: Path
    build_time: float

    @property
    def success(self) -> bool:
        return self.outcome.success

    @property
    def exit_code(self) -> int:
        return self.outcome.returncode

    @property
    def message(self) -> str:
        if self.success:
            return "Build successful"
        return f"Build failed with exit status {self.exit_code}"

    def raise_for_status(self) -> None:
        """Raise BuildFailure carrying cargo's exit status if the build failed."""
        if not self.success:
            raise BuildFailure(self.exit_code, self.message)


class BuildOrchestrator:
    """
    Runs `cargo build --release` for a project profile.

    Example usage:
        orchestrator = BuildOrchestrator(root=Path("."))
        result = orchestrator.build(resolve("controller"))
        if result.success:
            print(f"Firmware: {result.elf_path}")
    """

    def __init__(
        self,
        root: Path,
        runner: Optional[IProcessRunner] = None,
        cargo: str = "cargo",
        verbose: bool = False,
    ):
        """
        Initialize build orchestrator.

        Args:
            root: Workspace root containing the project directories
            runner: Process runner (defaults to SubprocessRunner)
            cargo: cargo executable
            verbose: Enable verbose output
        """
        self.root = Path(root)
        self.runner = runner or SubprocessRunner()
        self.cargo = cargo
        self.verbose = verbose

    def build_command(self, profile: ProjectProfile) -> list:
        return [
            self.cargo,
            "build",
            "--release",
            f"--manifest-path={profile.manifest_path(self.root)}",
        ]

    def build_env(self, profile: ProjectProfile) -> dict:
        return {
            "CARGO_BUILD_TARGET": str(profile.target_spec_path(self.root)),
            "CARGO_UNSTABLE_BUILD_STD": profile.build_std,
        }

    def build(self, profile: ProjectProfile) -> BuildResult:
        """
        Build a project.

        Args:
            profile: Resolved project profile

        Returns:
            BuildResult wrapping cargo's exit status. No retry is attempted.
        """
        start_time = time.time()
        if self.verbose:
            print(f"Manifest: {profile.manifest_path(self.root)}")
            print(f"Target:   {profile.target_spec_path(self.root)}")
            print(f"Std:      {profile.build_std}")

        outcome = self.runner.run(
            self.build_command(profile),
            env=self.build_env(profile),
            capture=False,
        )
        build_time = time.time() - start_time

        if outcome.success:
            logger.info("Built %s in %.2fs", profile.project_id, build_time)
        else:
            logger.error("Build of %s failed with exit status %d", profile.project_id, outcome.returncode)

        return BuildResult(
            outcome=outcome,
            elf_path=profile.artifact_path(self.root),
            build_time=build_time,
        )

"""
Unit tests for BuildOrchestrator.

Tests the cargo invocation:
- Manifest path and release flag
- Target spec and build-std environment overrides per profile
- Exit status passthrough
"""

import pytest

from ofsbuild.build import BuildOrchestrator
from ofsbuild.config import DEFAULT_PROFILES
from ofsbuild.errors import BuildFailure
from ofsbuild.process import ProcessOutcome


@pytest.fixture
def orchestrator(tmp_path, runner):
    return BuildOrchestrator(tmp_path, runner)


class TestBuildOrchestrator:
    """Test suite for BuildOrchestrator."""

    def test_cargo_command(self, orchestrator, runner, tmp_path):
        orchestrator.build(DEFAULT_PROFILES["controller"])

        call = runner.calls[0]
        assert call.command == [
            "cargo",
            "build",
            "--release",
            f"--manifest-path={tmp_path / 'controller' / 'Cargo.toml'}",
        ]

    def test_output_is_not_captured(self, orchestrator, runner):
        orchestrator.build(DEFAULT_PROFILES["controller"])
        assert runner.calls[0].capture is False

    @pytest.mark.parametrize(
        "project,target,build_std",
        [
            ("controller", "avr-atmega328p.json", "core,alloc"),
            ("usb-firmware", "avr-atmega16u2.json", "core"),
        ],
    )
    def test_environment_per_profile(self, orchestrator, runner, tmp_path, project, target, build_std):
        orchestrator.build(DEFAULT_PROFILES[project])

        env = runner.calls[0].env
        assert env["CARGO_BUILD_TARGET"] == str(tmp_path / project / target)
        assert env["CARGO_UNSTABLE_BUILD_STD"] == build_std

    def test_success_result(self, orchestrator, tmp_path):
        result = orchestrator.build(DEFAULT_PROFILES["controller"])

        assert result.success is True
        assert result.exit_code == 0
        assert result.elf_path == (
            tmp_path / "controller" / "target" / "avr-atmega328p" / "release" / "ofs-controller.elf"
        )
        result.raise_for_status()

    def test_failure_status_is_surfaced(self, orchestrator, runner):
        runner.script("cargo", ProcessOutcome(101))

        result = orchestrator.build(DEFAULT_PROFILES["controller"])

        assert result.success is False
        assert result.exit_code == 101
        with pytest.raises(BuildFailure) as exc_info:
            result.raise_for_status()
        assert exc_info.value.exit_code == 101

    def test_no_retry_on_failure(self, orchestrator, runner):
        runner.script("cargo", ProcessOutcome(1))
        orchestrator.build(DEFAULT_PROFILES["controller"])
        assert len(runner.calls) == 1

    def test_custom_cargo(self, tmp_path, runner):
        BuildOrchestrator(tmp_path, runner, cargo="/opt/rust/bin/cargo").build(DEFAULT_PROFILES["controller"])
        assert runner.tools() == ["/opt/rust/bin/cargo"]

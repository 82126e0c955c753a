"""Tests for serial ISP deployment with avrdude."""

from unittest.mock import Mock

import pytest

from ofsbuild.config import DEFAULT_PROFILES, ProjectProfile
from ofsbuild.deploy import ISPDeployer, SerialPortDetector
from ofsbuild.process import ProcessOutcome


@pytest.fixture
def port_detector():
    detector = Mock(spec=SerialPortDetector)
    detector.is_available.return_value = True
    return detector


@pytest.fixture
def deployer(tmp_path, runner, flash_config, port_detector):
    return ISPDeployer(tmp_path, flash_config, runner=runner, port_detector=port_detector)


@pytest.fixture
def controller():
    return DEFAULT_PROFILES["controller"]


class TestISPDeployer:
    """Tests for ISPDeployer.deploy."""

    def test_success_passes_avrdude_status_and_stdout(self, deployer, runner, controller, tmp_path):
        runner.script("avrdude", ProcessOutcome(0, b"avrdude: 1024 bytes of flash verified\n", b"progress"))

        result = deployer.deploy(controller)

        assert result.success is True
        assert result.exit_code == 0
        assert result.port == "/dev/ttyACM0"
        assert "1024 bytes of flash verified" in result.output
        assert runner.tools() == ["cargo", "avrdude"]

        elf = tmp_path / "controller" / "target" / "avr-atmega328p" / "release" / "ofs-controller.elf"
        assert runner.calls_for("avrdude")[0].command == [
            "avrdude",
            "-q",
            "-patmega328p",
            "-carduino",
            "-P/dev/ttyACM0",
            "-D",
            f"-Uflash:w:{elf}:e",
        ]

    def test_build_failure_spawns_no_programmer(self, deployer, runner, controller, port_detector):
        runner.script("cargo", ProcessOutcome(101))

        result = deployer.deploy(controller)

        assert result.success is False
        assert result.exit_code == 101
        assert runner.tools() == ["cargo"]
        port_detector.is_available.assert_not_called()

    def test_programmer_failure_reports_stderr(self, deployer, runner, controller):
        runner.script("avrdude", ProcessOutcome(1, b"", b"avrdude: ser_open(): can't open device\n"))

        result = deployer.deploy(controller)

        assert result.success is False
        assert result.exit_code == 1
        assert "can't open device" in result.output

    def test_port_override(self, deployer, runner, controller):
        result = deployer.deploy(controller, port="/dev/ttyUSB3")

        assert result.port == "/dev/ttyUSB3"
        assert "-P/dev/ttyUSB3" in runner.calls_for("avrdude")[0].command

    def test_mcu_flag_comes_from_profile(self, deployer, runner):
        profile = ProjectProfile("mega", "atmega2560", "avr-atmega2560.json", "mega.elf")

        deployer.deploy(profile)

        assert "-patmega2560" in runner.calls_for("avrdude")[0].command

    def test_missing_port_only_warns(self, deployer, runner, controller, port_detector, caplog):
        port_detector.is_available.return_value = False

        with caplog.at_level("WARNING"):
            result = deployer.deploy(controller)

        assert result.success is True
        assert "/dev/ttyACM0" in caplog.text
        assert runner.tools() == ["cargo", "avrdude"]

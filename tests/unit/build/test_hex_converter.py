"""Tests for ELF to Intel HEX conversion."""

from pathlib import Path

import pytest

from ofsbuild.build import HexConverter
from ofsbuild.errors import ConversionFailure
from ofsbuild.process import ProcessOutcome


def test_objcopy_command(runner):
    hex_path = HexConverter(runner).convert(Path("fw.elf"), Path("/tmp/fw.hex"))

    assert hex_path == Path("/tmp/fw.hex")
    assert runner.calls[0].command == ["avr-objcopy", "-O", "ihex", "-R", ".eeprom", "fw.elf", "/tmp/fw.hex"]


def test_failure_raises_with_status(runner):
    runner.script("avr-objcopy", ProcessOutcome(1, b"", b"fw.elf: No such file\n"))

    with pytest.raises(ConversionFailure) as exc_info:
        HexConverter(runner).convert(Path("fw.elf"), Path("/tmp/fw.hex"))

    assert exc_info.value.exit_code == 1
    assert "No such file" in exc_info.value.stderr

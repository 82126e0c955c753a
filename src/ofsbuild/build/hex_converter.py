"""ELF to Intel HEX conversion with avr-objcopy.

dfu-programmer only accepts Intel HEX images, so the cargo ELF output is
converted before flashing over USB.
"""

import logging
from pathlib import Path
from typing import Optional

from ..errors import ConversionFailure
from ..process import IProcessRunner, SubprocessRunner

logger = logging.getLogger(__name__)


class HexConverter:
    """Converts firmware ELF files to Intel HEX."""

    def __init__(self, runner: Optional[IProcessRunner] = None, objcopy: str = "avr-objcopy"):
        """Initialize converter.

        Args:
            runner: Process runner (defaults to SubprocessRunner)
            objcopy: objcopy executable for the AVR toolchain
        """
        self.runner = runner or SubprocessRunner()
        self.objcopy = objcopy

    def convert(self, elf_path: Path, hex_path: Path) -> Path:
        """Convert elf_path to Intel HEX at hex_path.

        Args:
            elf_path: Path to firmware ELF
            hex_path: Output path for the .hex file

        Returns:
            hex_path

        Raises:
            ConversionFailure: If objcopy exits nonzero
        """
        cmd = [
            self.objcopy,
            "-O", "ihex",
            "-R", ".eeprom",
            str(elf_path),
            str(hex_path),
        ]
        outcome = self.runner.run(cmd)
        if not outcome.success:
            stderr = outcome.stderr_text
            logger.error("objcopy failed (%d): %s", outcome.returncode, stderr.strip())
            raise ConversionFailure(
                outcome.returncode,
                f"Hex conversion of {elf_path} failed",
                stderr=stderr,
            )
        return hex_path

"""
Device presence checks.

UsbEnumerationProbe looks for the DFU bootloader in `lsusb` output.
SerialPortDetector asks pyserial whether the ISP serial port is enumerated.
"""

import logging
from typing import List, Optional

import serial.tools.list_ports

from ..errors import EnumerationFailure
from ..process import IProcessRunner, SubprocessRunner

logger = logging.getLogger(__name__)


class UsbEnumerationProbe:
    """Detects a USB device by a VID:PID marker in the enumeration listing."""

    def __init__(
        self,
        marker: str,
        runner: Optional[IProcessRunner] = None,
        lsusb: str = "lsusb",
    ):
        """Initialize probe.

        Args:
            marker: Substring identifying the device, e.g. '03eb:2fef'
            runner: Process runner (defaults to SubprocessRunner)
            lsusb: Enumeration tool executable
        """
        self.marker = marker.lower()
        self.runner = runner or SubprocessRunner()
        self.lsusb = lsusb

    def is_present(self) -> bool:
        """Run one enumeration and check for the marker.

        Returns:
            True if the marker appears in the listing

        Raises:
            EnumerationFailure: If the enumeration tool exits nonzero
        """
        outcome = self.runner.run([self.lsusb])
        if not outcome.success:
            raise EnumerationFailure(outcome.returncode, outcome.stderr_text)
        return self.marker in outcome.stdout_text.lower()


class SerialPortDetector:
    """Checks serial ports through pyserial."""

    def list_ports(self) -> List[str]:
        return [port.device for port in serial.tools.list_ports.comports()]

    def is_available(self, port: str) -> bool:
        """Check whether port is currently enumerated.

        Args:
            port: Device path, e.g. '/dev/ttyACM0'

        Returns:
            True if pyserial lists the port
        """
        ports = self.list_ports()
        logger.debug("Serial ports: %s", ", ".join(ports) or "none")
        return port in ports

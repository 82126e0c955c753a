"""Common types for firmware deployers.

This module defines the flash request/result types and the interface shared
by the ISP (avrdude) and DFU (dfu-programmer) deployers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class FlashMode(Enum):
    """How firmware is delivered to the device."""

    ISP = "isp"
    DFU_WRITE = "dfu-write"
    DFU_RESTORE = "dfu-restore"


@dataclass(frozen=True)
class FlashRequest:
    """A single flash operation.

    Attributes:
        mode: Delivery mode
        image_path: Firmware image handed to the programmer
        device: Serial port (ISP) or programmer target name (DFU)
    """

    mode: FlashMode
    image_path: Path
    device: str


@dataclass
class DeploymentResult:
    """Result of a firmware deployment operation.

    Attributes:
        success: Whether every stage succeeded
        message: Human readable summary
        exit_code: Exit status of the last subprocess run, or of the first one that failed
        output: Captured stdout on success, captured stderr on failure
        port: Device the firmware was sent to
    """

    success: bool
    message: str
    exit_code: int = 0
    output: str = ""
    port: Optional[str] = None


class IDeployer(ABC):
    """Interface for firmware deployers.

    Deployers take firmware to a device:
    1. Produce the firmware image (build, convert, or a shipped image)
    2. Make sure the device is reachable
    3. Program the device
    """

    @abstractmethod
    def deploy(self, *args, **kwargs) -> DeploymentResult:
        """Deploy firmware to a device.

        Returns:
            DeploymentResult with success status and exit code
        """
        pass

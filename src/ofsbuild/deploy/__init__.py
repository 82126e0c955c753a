"""
Firmware deployment functionality for ofsbuild.

This module provides the serial ISP (avrdude) and USB DFU (dfu-programmer)
deployers.
"""

from .deployer import DeploymentResult, FlashMode, FlashRequest, IDeployer
from .device_probe import SerialPortDetector, UsbEnumerationProbe
from .dfu_deployer import DFUDeployer, DFUState
from .isp_deployer import ISPDeployer

__all__ = [
    "IDeployer",
    "ISPDeployer",
    "DFUDeployer",
    "DFUState",
    "DeploymentResult",
    "FlashMode",
    "FlashRequest",
    "SerialPortDetector",
    "UsbEnumerationProbe",
]

"""
Build system components for ofsbuild.

- Cargo cross-compilation per project profile
- ELF to Intel HEX conversion (avr-objcopy)
"""

from .hex_converter import HexConverter
from .orchestrator import BuildOrchestrator, BuildResult

__all__ = [
    "BuildOrchestrator",
    "BuildResult",
    "HexConverter",
]

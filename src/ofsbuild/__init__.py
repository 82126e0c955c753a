"""
ofsbuild - build and flash tooling for the Open Fight Stick firmware.

This package drives the AVR cross-compilation toolchain (cargo) and the two
device programmers used by the project: avrdude for the serial ISP path and
dfu-programmer for the USB DFU bootloader path.
"""

__version__ = "0.1.0"

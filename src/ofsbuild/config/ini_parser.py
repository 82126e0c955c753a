"""
ofs.ini configuration parser.

This module reads the optional ofs.ini file at the workspace root and turns it
into a FlashConfig plus a ProfileTable. Every setting has a built-in default,
so a missing file simply yields the defaults.
"""

import configparser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from ..errors import OfsConfigError
from .profiles import ProfileTable, ProjectProfile

CONFIG_FILENAME = "ofs.ini"

DFU_BOOTLOADER_MARKER = "03eb:2fef"  # Atmel atmega16u2 DFU bootloader VID:PID
DFU_ERASE_ALREADY_BLANK = 5  # dfu-programmer: "Chip already blank"
FACTORY_IMAGE = "usb-firmware/factory/Arduino-usbserial-atmega16u2-Uno-Rev3.hex"


@dataclass
class ToolPaths:
    """Executable names of the external tools."""

    cargo: str = "cargo"
    avrdude: str = "avrdude"
    dfu_programmer: str = "dfu-programmer"
    objcopy: str = "avr-objcopy"
    lsusb: str = "lsusb"


@dataclass
class FlashConfig:
    """Settings consumed by the build and flash pipelines."""

    isp_port: str = "/dev/ttyACM0"
    isp_programmer: str = "arduino"
    dfu_project: str = "usb-firmware"
    dfu_marker: str = DFU_BOOTLOADER_MARKER
    benign_erase_code: int = DFU_ERASE_ALREADY_BLANK
    poll_interval: float = 1.0
    max_polls: Optional[int] = None  # None waits forever
    hex_path: Path = Path("/tmp/ofs-usb-firmware.hex")
    factory_image: str = FACTORY_IMAGE
    tools: ToolPaths = field(default_factory=ToolPaths)

    def factory_image_path(self, root: Path) -> Path:
        image = Path(self.factory_image)
        if image.is_absolute():
            return image
        return Path(root) / image


class OfsConfig:
    """
    Parser for ofs.ini configuration files.

    Example ofs.ini:
        [isp]
        port = /dev/ttyUSB0

        [dfu]
        max_polls = 60

        [project:blinky]
        mcu = atmega328p
        target_spec = avr-atmega328p.json
        artifact = blinky.elf
        build_std = core

    Usage:
        config = OfsConfig.load(Path("."))
        profile = config.profiles.resolve("controller")
    """

    PROJECT_PREFIX = "project:"
    REQUIRED_PROJECT_FIELDS = {"mcu", "target_spec", "artifact"}

    def __init__(self, flash: FlashConfig, profiles: ProfileTable, path: Optional[Path] = None):
        self.flash = flash
        self.profiles = profiles
        self.path = path

    @classmethod
    def load(cls, root: Path, config_path: Optional[Path] = None) -> "OfsConfig":
        """
        Load configuration for a workspace.

        Args:
            root: Workspace root containing the firmware projects
            config_path: Explicit config file (must exist if given)

        Returns:
            OfsConfig with defaults overridden by the file contents

        Raises:
            OfsConfigError: If the file is missing (explicit path) or invalid
        """
        if config_path is None:
            candidate = Path(root) / CONFIG_FILENAME
            if not candidate.exists():
                return cls(FlashConfig(), ProfileTable())
            config_path = candidate
        elif not config_path.exists():
            raise OfsConfigError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser(interpolation=configparser.ExtendedInterpolation())
        try:
            parser.read(config_path, encoding="utf-8")
        except configparser.Error as e:
            raise OfsConfigError(f"Failed to parse {config_path}: {e}") from e

        flash = cls._parse_flash(parser, config_path)
        profiles = ProfileTable()
        for profile in cls._parse_profiles(parser, config_path):
            profiles.add(profile)
        return cls(flash, profiles, config_path)

    @staticmethod
    def _parse_flash(parser: configparser.ConfigParser, path: Path) -> FlashConfig:
        flash = FlashConfig()
        try:
            if parser.has_section("isp"):
                isp = parser["isp"]
                flash.isp_port = isp.get("port", flash.isp_port)
                flash.isp_programmer = isp.get("programmer", flash.isp_programmer)

            if parser.has_section("dfu"):
                dfu = parser["dfu"]
                flash.dfu_project = dfu.get("project", flash.dfu_project)
                flash.dfu_marker = dfu.get("marker", flash.dfu_marker).strip().lower()
                flash.benign_erase_code = dfu.getint("benign_erase_code", flash.benign_erase_code)
                flash.poll_interval = dfu.getfloat("poll_interval", flash.poll_interval)
                max_polls = dfu.getint("max_polls", 0)
                flash.max_polls = max_polls if max_polls > 0 else None
                if "hex_path" in dfu:
                    flash.hex_path = Path(dfu["hex_path"])
                flash.factory_image = dfu.get("factory_image", flash.factory_image)

            if parser.has_section("tools"):
                tools = parser["tools"]
                for name in vars(flash.tools):
                    if name in tools and tools[name]:
                        setattr(flash.tools, name, tools[name].strip())
        except (ValueError, TypeError) as e:
            raise OfsConfigError(f"Invalid value in {path}: {e}") from e

        for name in ("isp_port", "isp_programmer", "dfu_project", "factory_image"):
            if not getattr(flash, name).strip():
                raise OfsConfigError(f"{name} must not be empty in {path}")
        if flash.hex_path == Path("."):
            raise OfsConfigError(f"hex_path must not be empty in {path}")

        if flash.poll_interval < 0:
            raise OfsConfigError(f"poll_interval must not be negative in {path}")
        if not flash.dfu_marker:
            raise OfsConfigError(f"marker must not be empty in {path}")
        return flash

    @classmethod
    def _parse_profiles(cls, parser: configparser.ConfigParser, path: Path):
        for section in parser.sections():
            if not section.startswith(cls.PROJECT_PREFIX):
                continue
            project_id = section[len(cls.PROJECT_PREFIX):].strip()
            values: Dict[str, str] = {k: v.strip() for k, v in parser[section].items() if v}
            missing = cls.REQUIRED_PROJECT_FIELDS - set(values)
            if missing:
                raise OfsConfigError(
                    f"Project '{project_id}' in {path} is missing required fields: "
                    + f"{', '.join(sorted(missing))}"
                )
            yield ProjectProfile(
                project_id=project_id,
                mcu=values["mcu"],
                target_spec=values["target_spec"],
                artifact_name=values["artifact"],
                build_std=values.get("build_std", "core"),
            )

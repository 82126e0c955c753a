"""
Command-line interface for ofsbuild.

This module provides the `ofs` CLI tool for building the Open Fight Stick
firmware and flashing it over serial ISP or USB DFU. Every command exits with
the status of the tool that decided the outcome.
"""

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ofsbuild import __version__
from ofsbuild.build import BuildOrchestrator
from ofsbuild.cli_utils import ErrorFormatter, PathValidator, configure_logging
from ofsbuild.config import OfsConfig
from ofsbuild.deploy import DFUDeployer, FlashMode, ISPDeployer
from ofsbuild.descriptors import encode_string_descriptor, format_descriptor
from ofsbuild.errors import OfsError


@dataclass
class BuildArgs:
    """Arguments for the build command."""

    project: str
    root: Path
    config: Optional[Path] = None
    verbose: bool = False


@dataclass
class FlashArgs:
    """Arguments for the flash command."""

    project: str
    root: Path
    config: Optional[Path] = None
    port: Optional[str] = None
    verbose: bool = False


@dataclass
class UsbFlashArgs:
    """Arguments for the flash-usb and restore-usb commands."""

    root: Path
    config: Optional[Path] = None
    max_polls: Optional[int] = None
    poll_interval: Optional[float] = None
    show_progress: bool = True
    verbose: bool = False


def build_command(args: BuildArgs) -> None:
    """Build a firmware project.

    Examples:
        ofs build controller
        ofs build usb-firmware --root ~/ofs
    """
    try:
        config = OfsConfig.load(args.root, args.config)
        profile = config.profiles.resolve(args.project)

        print(f"Building {profile.project_id}...")
        orchestrator = BuildOrchestrator(
            args.root, cargo=config.flash.tools.cargo, verbose=args.verbose
        )
        result = orchestrator.build(profile)

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print()
            print(f"Firmware: {result.elf_path}")
            print(f"Build time: {result.build_time:.2f}s")
        else:
            ErrorFormatter.print_error("Build failed!", result.message)
        sys.exit(result.exit_code)

    except OfsError as e:
        ErrorFormatter.handle_ofs_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def flash_command(args: FlashArgs) -> None:
    """Build a project and flash it with avrdude.

    Examples:
        ofs flash controller
        ofs flash controller -p /dev/ttyUSB0
    """
    try:
        config = OfsConfig.load(args.root, args.config)
        profile = config.profiles.resolve(args.project)

        deployer = ISPDeployer(args.root, config.flash, verbose=args.verbose)
        result = deployer.deploy(profile, port=args.port)

        ErrorFormatter.report_deployment(result)
        sys.exit(result.exit_code)

    except OfsError as e:
        ErrorFormatter.handle_ofs_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def usb_flash_command(args: UsbFlashArgs, mode: FlashMode) -> None:
    """Flash the USB interface chip through its DFU bootloader.

    Examples:
        ofs flash-usb                   # build, convert and flash usb-firmware
        ofs restore-usb                 # flash the factory image back
        ofs flash-usb --max-polls 30    # give up after 30 polls
    """
    try:
        config = OfsConfig.load(args.root, args.config)
        flash_config = config.flash
        if args.max_polls is not None:
            flash_config.max_polls = args.max_polls if args.max_polls > 0 else None
        if args.poll_interval is not None:
            flash_config.poll_interval = args.poll_interval
        profile = config.profiles.resolve(flash_config.dfu_project)

        deployer = DFUDeployer(
            args.root,
            profile,
            flash_config,
            show_progress=args.show_progress,
            verbose=args.verbose,
        )
        result = deployer.deploy(mode)

        ErrorFormatter.report_deployment(result)
        sys.exit(result.exit_code)

    except OfsError as e:
        ErrorFormatter.handle_ofs_error(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def gen_string_descriptor_command(words: List[str]) -> None:
    """Print the USB string descriptor for the given text.

    Examples:
        ofs gen-string-descriptor Open Fight Stick v2a
    """
    text = " ".join(words)
    print(format_descriptor(encode_string_descriptor(text)))
    sys.exit(0)


def projects_command(root: Path, config_path: Optional[Path]) -> None:
    """List the known firmware projects."""
    try:
        config = OfsConfig.load(root, config_path)
        for profile in config.profiles.list_profiles():
            print(f"{profile.project_id}: {profile.mcu} ({profile.artifact_name}, build-std={profile.build_std})")
        sys.exit(0)
    except OfsError as e:
        ErrorFormatter.handle_ofs_error(e)


def _common_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root",
        type=Path,
        default=Path.cwd(),
        help="Workspace root containing the firmware projects (default: current directory)",
    )
    common.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: <root>/ofs.ini if present)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    return common


def _add_wait_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--max-polls",
        type=int,
        default=None,
        help="Give up after this many device polls (default: wait forever)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between device polls (default: 1.0)",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show the waiting indicator",
    )


def create_parser() -> argparse.ArgumentParser:
    common = _common_parser()
    parser = argparse.ArgumentParser(
        prog="ofs",
        description="Open Fight Stick firmware build and flash tool",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ofs {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser(
        "build", parents=[common], help="Build a firmware project"
    )
    build_parser.add_argument("project", help="Project to build (e.g. controller)")

    flash_parser = subparsers.add_parser(
        "flash", parents=[common], help="Build a project and flash it over serial ISP"
    )
    flash_parser.add_argument("project", help="Project to flash (e.g. controller)")
    flash_parser.add_argument(
        "-p",
        "--port",
        default=None,
        help="Serial port (default: from ofs.ini, /dev/ttyACM0)",
    )

    flash_usb_parser = subparsers.add_parser(
        "flash-usb", parents=[common], help="Build the USB firmware and flash it over DFU"
    )
    _add_wait_arguments(flash_usb_parser)

    restore_usb_parser = subparsers.add_parser(
        "restore-usb", parents=[common], help="Flash the factory USB-serial firmware over DFU"
    )
    _add_wait_arguments(restore_usb_parser)

    descriptor_parser = subparsers.add_parser(
        "gen-string-descriptor", help="Print a USB string descriptor byte array"
    )
    descriptor_parser.add_argument("text", nargs="+", help="Descriptor text")

    subparsers.add_parser("projects", parents=[common], help="List known firmware projects")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """ofs - Open Fight Stick firmware build and flash tool."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    if parsed_args.command == "gen-string-descriptor":
        gen_string_descriptor_command(parsed_args.text)

    configure_logging(parsed_args.verbose)
    PathValidator.validate_root(parsed_args.root)

    if parsed_args.command == "build":
        build_command(
            BuildArgs(
                project=parsed_args.project,
                root=parsed_args.root,
                config=parsed_args.config,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "flash":
        flash_command(
            FlashArgs(
                project=parsed_args.project,
                root=parsed_args.root,
                config=parsed_args.config,
                port=parsed_args.port,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command in ("flash-usb", "restore-usb"):
        usb_args = UsbFlashArgs(
            root=parsed_args.root,
            config=parsed_args.config,
            max_polls=parsed_args.max_polls,
            poll_interval=parsed_args.poll_interval,
            show_progress=not parsed_args.no_progress,
            verbose=parsed_args.verbose,
        )
        mode = FlashMode.DFU_WRITE if parsed_args.command == "flash-usb" else FlashMode.DFU_RESTORE
        usb_flash_command(usb_args, mode)
    elif parsed_args.command == "projects":
        projects_command(parsed_args.root, parsed_args.config)


if __name__ == "__main__":
    main()

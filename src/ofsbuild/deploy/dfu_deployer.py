"""
USB DFU deployment with dfu-programmer.

The USB interface chip is flashed through its DFU bootloader, which only shows
up after the user shorts the reset pins. The deployment runs as a small state
machine:

    BUILD -> WAIT_FOR_DEVICE -> CONVERT -> ERASE -> FLASH -> DONE
                                                        \\-> FAILED

Restore mode skips BUILD and CONVERT and flashes the shipped factory image.
The first fatal stage ends the run with that stage's exit status.
"""

import logging
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from tqdm import tqdm

from ..build import BuildOrchestrator, HexConverter
from ..config import FlashConfig, ProjectProfile
from ..errors import (
    DeviceWaitCancelled,
    DeviceWaitTimeout,
    EnumerationFailure,
    EraseFailure,
    OfsError,
    PipelineError,
    ProgrammerFailure,
)
from ..process import IProcessRunner, ProcessOutcome, SubprocessRunner
from .deployer import DeploymentResult, FlashMode, FlashRequest, IDeployer
from .device_probe import UsbEnumerationProbe

logger = logging.getLogger(__name__)


class DFUState(Enum):
    """DFU deployment state."""

    IDLE = "idle"
    BUILD = "build"
    WAIT_FOR_DEVICE = "wait_for_device"
    CONVERT = "convert"
    ERASE = "erase"
    FLASH = "flash"
    DONE = "done"
    FAILED = "failed"


class DFUDeployer(IDeployer):
    """
    Flashes the USB interface MCU through its DFU bootloader.

    Example usage:
        deployer = DFUDeployer(root, profile, config)
        result = deployer.deploy(FlashMode.DFU_WRITE)
        sys.exit(result.exit_code)
    """

    def __init__(
        self,
        root: Path,
        profile: ProjectProfile,
        config: Optional[FlashConfig] = None,
        runner: Optional[IProcessRunner] = None,
        builder: Optional[BuildOrchestrator] = None,
        converter: Optional[HexConverter] = None,
        probe: Optional[UsbEnumerationProbe] = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: Optional[threading.Event] = None,
        show_progress: bool = True,
        verbose: bool = False,
    ):
        """Initialize deployer.

        Args:
            root: Workspace root containing the project directories
            profile: Profile of the USB firmware project
            config: Flash settings (defaults to FlashConfig())
            runner: Process runner shared by every stage
            builder: Build orchestrator (created from runner if omitted)
            converter: ELF to hex converter (created from runner if omitted)
            probe: DFU device probe (created from runner if omitted)
            sleep: Called with poll_interval between device polls
            cancel_event: When set, the device wait stops with DeviceWaitCancelled
            show_progress: Show a progress indicator while waiting for the device
            verbose: Whether to show verbose output
        """
        self.root = Path(root)
        self.profile = profile
        self.config = config or FlashConfig()
        self.runner = runner or SubprocessRunner()
        tools = self.config.tools
        self.builder = builder or BuildOrchestrator(
            self.root, self.runner, cargo=tools.cargo, verbose=verbose
        )
        self.converter = converter or HexConverter(self.runner, objcopy=tools.objcopy)
        self.probe = probe or UsbEnumerationProbe(
            self.config.dfu_marker, self.runner, lsusb=tools.lsusb
        )
        self.sleep = sleep
        self.cancel_event = cancel_event
        self.show_progress = show_progress
        self.verbose = verbose

        self.state = DFUState.IDLE
        self.history: List[DFUState] = []

    def _enter(self, state: DFUState) -> None:
        logger.debug("DFU state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _programmer(self, *args: str) -> list:
        return [self.config.tools.dfu_programmer, self.profile.mcu, *args]

    def deploy(self, mode: FlashMode = FlashMode.DFU_WRITE) -> DeploymentResult:
        """
        Run the DFU pipeline.

        Args:
            mode: FlashMode.DFU_WRITE to build and flash the project,
                FlashMode.DFU_RESTORE to flash the factory image

        Returns:
            DeploymentResult whose exit_code is the final dfu-programmer
            status, or the status of the first stage that failed

        Raises:
            OfsError: If a tool is missing; the state still ends at FAILED
        """
        if mode not in (FlashMode.DFU_WRITE, FlashMode.DFU_RESTORE):
            raise ValueError(f"DFUDeployer cannot handle {mode}")

        self.state = DFUState.IDLE
        self.history = []
        try:
            elf_path = None
            if mode == FlashMode.DFU_WRITE:
                self._enter(DFUState.BUILD)
                print(f"Building {self.profile.project_id}...")
                build_result = self.builder.build(self.profile)
                build_result.raise_for_status()
                elf_path = build_result.elf_path
                request = FlashRequest(mode, self.config.hex_path, self.profile.mcu)
            else:
                request = FlashRequest(
                    mode, self.config.factory_image_path(self.root), self.profile.mcu
                )

            self._enter(DFUState.WAIT_FOR_DEVICE)
            self.wait_for_device()

            if elf_path is not None:
                self._enter(DFUState.CONVERT)
                print("Converting firmware to Intel HEX...")
                self.converter.convert(elf_path, request.image_path)

            self._enter(DFUState.ERASE)
            self.erase()

            self._enter(DFUState.FLASH)
            outcome = self.flash(request)

            self._enter(DFUState.DONE)
            return DeploymentResult(
                success=True,
                message="Flashing complete! Unplug and replug the device to run the new firmware.",
                exit_code=outcome.returncode,
                output=outcome.stdout_text,
                port=request.device,
            )
        except PipelineError as e:
            self._enter(DFUState.FAILED)
            return DeploymentResult(
                success=False,
                message=str(e),
                exit_code=e.exit_code,
                output=e.stderr,
                port=self.profile.mcu,
            )
        except (OfsError, KeyboardInterrupt):
            self._enter(DFUState.FAILED)
            raise

    def wait_for_device(self) -> int:
        """
        Poll the USB bus until the DFU bootloader shows up.

        Enumeration failures are logged and polling continues. Without
        max_polls or a cancel event the wait never ends on its own.

        Returns:
            Number of polls performed, including the successful one

        Raises:
            DeviceWaitCancelled: If cancel_event was set
            DeviceWaitTimeout: If max_polls polls found no device
        """
        max_polls = self.config.max_polls
        print("Waiting for DFU device (short the reset pins on the USB chip)...")
        progress = None
        if self.show_progress:
            progress = tqdm(
                desc="Waiting for DFU device",
                unit=" polls",
                bar_format="{desc}: {n_fmt}{unit} [{elapsed}]",
                leave=False,
            )

        polls = 0
        try:
            while True:
                self._check_cancelled()
                polls += 1
                try:
                    if self.probe.is_present():
                        logger.info("DFU device found after %d poll(s)", polls)
                        return polls
                except EnumerationFailure as e:
                    logger.warning("%s", e)

                if progress is not None:
                    progress.update(1)
                if max_polls is not None and polls >= max_polls:
                    raise DeviceWaitTimeout(polls)

                self.sleep(self.config.poll_interval)
        finally:
            if progress is not None:
                progress.close()

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise DeviceWaitCancelled()

    def erase(self) -> ProcessOutcome:
        """
        Erase the device flash.

        The programmer's "already blank" status is not an error.

        Raises:
            EraseFailure: For any other nonzero status
        """
        print("Erasing device...")
        outcome = self.runner.run(self._programmer("erase"))
        if outcome.returncode == self.config.benign_erase_code:
            logger.info("Chip already blank (status %d), continuing", outcome.returncode)
        elif not outcome.success:
            raise EraseFailure(
                outcome.returncode, "Erasing failed!", stderr=outcome.stderr_text
            )
        return outcome

    def flash(self, request: FlashRequest) -> ProcessOutcome:
        """
        Write the firmware image.

        Raises:
            ProgrammerFailure: If dfu-programmer exits nonzero
        """
        print(f"Flashing {request.image_path}...")
        outcome = self.runner.run(self._programmer("flash", str(request.image_path)))
        if not outcome.success:
            raise ProgrammerFailure(
                outcome.returncode, "Flashing failed!", stderr=outcome.stderr_text
            )
        return outcome

"""
Serial ISP deployment with avrdude.

Builds the project, then writes the ELF straight to flash through the
Arduino bootloader on the configured serial port.
"""

import logging
from pathlib import Path
from typing import Optional

from ..build import BuildOrchestrator
from ..config import FlashConfig, ProjectProfile
from ..errors import PipelineError, ProgrammerFailure
from ..process import IProcessRunner, SubprocessRunner
from .deployer import DeploymentResult, FlashMode, FlashRequest, IDeployer
from .device_probe import SerialPortDetector

logger = logging.getLogger(__name__)


class ISPDeployer(IDeployer):
    """Builds a project and flashes it with avrdude."""

    def __init__(
        self,
        root: Path,
        config: Optional[FlashConfig] = None,
        runner: Optional[IProcessRunner] = None,
        builder: Optional[BuildOrchestrator] = None,
        port_detector: Optional[SerialPortDetector] = None,
        verbose: bool = False,
    ):
        """Initialize deployer.

        Args:
            root: Workspace root containing the project directories
            config: Flash settings (defaults to FlashConfig())
            runner: Process runner shared by every stage
            builder: Build orchestrator (created from runner if omitted)
            port_detector: Serial port checker (created if omitted)
            verbose: Whether to show verbose output
        """
        self.root = Path(root)
        self.config = config or FlashConfig()
        self.runner = runner or SubprocessRunner()
        self.builder = builder or BuildOrchestrator(
            self.root, self.runner, cargo=self.config.tools.cargo, verbose=verbose
        )
        self.port_detector = port_detector or SerialPortDetector()
        self.verbose = verbose

    def avrdude_command(self, profile: ProjectProfile, request: FlashRequest) -> list:
        return [
            self.config.tools.avrdude,
            "-q",
            f"-p{profile.mcu}",
            f"-c{self.config.isp_programmer}",
            f"-P{request.device}",
            "-D",
            f"-Uflash:w:{request.image_path}:e",
        ]

    def deploy(self, profile: ProjectProfile, port: Optional[str] = None) -> DeploymentResult:
        """Build and flash a project over the serial programmer.

        Args:
            profile: Resolved project profile
            port: Serial port (defaults to the configured ISP port)

        Returns:
            DeploymentResult whose exit_code is avrdude's status, or the
            build status if the build failed
        """
        port = port or self.config.isp_port
        try:
            print(f"Building {profile.project_id}...")
            build_result = self.builder.build(profile)
            build_result.raise_for_status()

            request = FlashRequest(FlashMode.ISP, build_result.elf_path, port)
            if not self.port_detector.is_available(port):
                logger.warning("Serial port %s is not enumerated, avrdude will probably fail", port)

            print(f"Flashing {profile.mcu} on {port}...")
            outcome = self.runner.run(self.avrdude_command(profile, request))
            if not outcome.success:
                raise ProgrammerFailure(
                    outcome.returncode, "Flashing failed!", stderr=outcome.stderr_text
                )

            return DeploymentResult(
                success=True,
                message="Flashing complete!",
                exit_code=outcome.returncode,
                output=outcome.stdout_text,
                port=port,
            )
        except PipelineError as e:
            return DeploymentResult(
                success=False,
                message=str(e),
                exit_code=e.exit_code,
                output=e.stderr,
                port=port,
            )

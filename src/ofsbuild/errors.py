"""
Exception hierarchy for ofsbuild.

Local precondition errors (unknown project, bad configuration, missing tool)
are raised before or instead of a subprocess. Pipeline errors carry the exit
status of the subprocess that failed so the CLI can exit with it unchanged.
"""

from typing import Optional


class OfsError(Exception):
    """Base exception for all ofsbuild errors."""

    pass


class UnknownProjectError(OfsError):
    """Raised when a project identifier has no profile."""

    def __init__(self, project_id: str, available: Optional[list] = None):
        self.project_id = project_id
        self.available = list(available or [])
        message = f"Unknown project '{project_id}'"
        if self.available:
            message += f". Available projects: {', '.join(self.available)}"
        super().__init__(message)


class OfsConfigError(OfsError):
    """Raised for invalid ofs.ini contents."""

    pass


class ToolNotFoundError(OfsError):
    """Raised when an external tool executable cannot be found."""

    exit_code = 127

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"'{tool}' not found. Make sure it is installed and on PATH.")


class PipelineError(OfsError):
    """A fatal pipeline stage failure.

    Attributes:
        exit_code: Exit status to terminate the process with
        stderr: Captured error text of the failing subprocess, if any
    """

    stage = "pipeline"

    def __init__(self, exit_code: int, message: str = "", stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message or f"{self.stage} failed with exit status {exit_code}")


class BuildFailure(PipelineError):
    stage = "build"


class ConversionFailure(PipelineError):
    stage = "hex conversion"


class EraseFailure(PipelineError):
    stage = "erase"


class ProgrammerFailure(PipelineError):
    stage = "flash"


class DeviceWaitTimeout(PipelineError):
    """Raised when the DFU device did not appear within max_polls."""

    stage = "device wait"

    def __init__(self, polls: int):
        self.polls = polls
        super().__init__(124, f"DFU device not detected after {polls} polls")


class DeviceWaitCancelled(PipelineError):
    """Raised when waiting for the DFU device was cancelled."""

    stage = "device wait"

    def __init__(self) -> None:
        super().__init__(130, "Waiting for DFU device was cancelled")


class EnumerationFailure(OfsError):
    """USB enumeration tool failed. Non-fatal: the device wait keeps polling."""

    def __init__(self, exit_code: int, stderr: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"USB enumeration failed with exit status {exit_code}: {stderr.strip()}")

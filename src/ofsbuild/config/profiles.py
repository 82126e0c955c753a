"""
Project profiles for the firmware crates in the workspace.

A profile maps a project directory name to the microcontroller it targets and
the cargo settings needed to cross-compile it. Artifact locations are derived
from the MCU, not the project, so two crates for the same MCU share a layout.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..errors import UnknownProjectError

ARTIFACT_DIR_TEMPLATE = "target/avr-{mcu}/release"


@dataclass(frozen=True)
class ProjectProfile:
    """Build settings for one firmware project."""

    project_id: str
    mcu: str
    target_spec: str  # cargo target JSON, relative to the project dir
    artifact_name: str  # ELF produced by cargo
    build_std: str = "core"  # value for CARGO_UNSTABLE_BUILD_STD

    def project_dir(self, root: Path) -> Path:
        return Path(root) / self.project_id

    def manifest_path(self, root: Path) -> Path:
        return self.project_dir(root) / "Cargo.toml"

    def target_spec_path(self, root: Path) -> Path:
        return self.project_dir(root) / self.target_spec

    def artifact_dir(self, root: Path) -> Path:
        return self.project_dir(root) / ARTIFACT_DIR_TEMPLATE.format(mcu=self.mcu)

    def artifact_path(self, root: Path) -> Path:
        """Get the ELF produced by a release build of this project."""
        return self.artifact_dir(root) / self.artifact_name


DEFAULT_PROFILES = {
    "controller": ProjectProfile(
        project_id="controller",
        mcu="atmega328p",
        target_spec="avr-atmega328p.json",
        artifact_name="ofs-controller.elf",
        build_std="core,alloc",  # controller ships a global allocator
    ),
    "usb-firmware": ProjectProfile(
        project_id="usb-firmware",
        mcu="atmega16u2",
        target_spec="avr-atmega16u2.json",
        artifact_name="ofs-usb-firmware.elf",
        build_std="core",
    ),
}


class ProfileTable:
    """Lookup table from project identifier to ProjectProfile."""

    def __init__(self, profiles: Optional[Iterable[ProjectProfile]] = None):
        if profiles is None:
            profiles = DEFAULT_PROFILES.values()
        self._profiles: Dict[str, ProjectProfile] = {p.project_id: p for p in profiles}

    def resolve(self, project_id: str) -> ProjectProfile:
        """
        Resolve a project identifier to its profile.

        Args:
            project_id: Project directory name (e.g., 'controller')

        Returns:
            The matching ProjectProfile

        Raises:
            UnknownProjectError: If no profile exists for project_id
        """
        profile = self._profiles.get(project_id)
        if profile is None:
            raise UnknownProjectError(project_id, sorted(self._profiles))
        return profile

    def add(self, profile: ProjectProfile) -> None:
        """Add a profile, replacing any existing one with the same id."""
        self._profiles[profile.project_id] = profile

    def list_profiles(self) -> List[ProjectProfile]:
        return [self._profiles[key] for key in sorted(self._profiles)]

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)


def resolve(project_id: str) -> ProjectProfile:
    """Resolve a project against the built-in profile table."""
    return ProfileTable().resolve(project_id)

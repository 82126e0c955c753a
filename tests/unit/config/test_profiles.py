"""Tests for project profile resolution."""

from pathlib import Path

import pytest

from ofsbuild.config import ProfileTable, ProjectProfile, resolve
from ofsbuild.errors import UnknownProjectError


class TestProfileTable:
    def test_resolve_controller(self):
        profile = resolve("controller")

        assert profile.mcu == "atmega328p"
        assert profile.artifact_name == "ofs-controller.elf"
        assert profile.build_std == "core,alloc"

    def test_resolve_usb_firmware(self):
        profile = resolve("usb-firmware")

        assert profile.mcu == "atmega16u2"
        assert profile.build_std == "core"

    def test_unknown_project(self):
        with pytest.raises(UnknownProjectError) as exc_info:
            resolve("ofs-support")

        assert exc_info.value.project_id == "ofs-support"
        assert "controller" in str(exc_info.value)
        assert "usb-firmware" in str(exc_info.value)

    def test_add_and_list(self):
        table = ProfileTable()
        table.add(ProjectProfile("blinky", "atmega328p", "avr-atmega328p.json", "blinky.elf"))

        assert "blinky" in table
        assert [p.project_id for p in table.list_profiles()] == ["blinky", "controller", "usb-firmware"]

    def test_empty_table(self):
        with pytest.raises(UnknownProjectError):
            ProfileTable([]).resolve("controller")


class TestProjectProfilePaths:
    def test_paths(self):
        profile = resolve("controller")
        root = Path("/work/ofs")

        assert profile.manifest_path(root) == Path("/work/ofs/controller/Cargo.toml")
        assert profile.target_spec_path(root) == Path("/work/ofs/controller/avr-atmega328p.json")
        assert profile.artifact_path(root) == Path(
            "/work/ofs/controller/target/avr-atmega328p/release/ofs-controller.elf"
        )

    def test_artifact_dir_follows_mcu_not_project(self):
        a = ProjectProfile("first", "atmega328p", "t.json", "a.elf")
        b = ProjectProfile("second", "atmega328p", "t.json", "b.elf")
        root = Path("/w")

        assert a.artifact_dir(root).relative_to(root / "first") == b.artifact_dir(root).relative_to(root / "second")
        assert a.artifact_dir(root).parts[-2] == "avr-atmega328p"

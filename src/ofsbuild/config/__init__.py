"""Configuration modules for ofsbuild."""

from .ini_parser import FlashConfig, OfsConfig, ToolPaths
from .profiles import DEFAULT_PROFILES, ProfileTable, ProjectProfile, resolve

__all__ = [
    "OfsConfig",
    "FlashConfig",
    "ToolPaths",
    "ProjectProfile",
    "ProfileTable",
    "DEFAULT_PROFILES",
    "resolve",
]

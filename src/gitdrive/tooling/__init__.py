"""Tool discovery: installed versions, executable locations, version probing."""

from __future__ import annotations

from gitdrive.tooling.probe import VersionProber, extract_single_line, parse_version_line
from gitdrive.tooling.resolver import ToolPaths, resolve_tool_paths
from gitdrive.tooling.version import ToolInstallation, ToolVersion

__all__ = [
    "ToolInstallation",
    "ToolPaths",
    "ToolVersion",
    "VersionProber",
    "extract_single_line",
    "parse_version_line",
    "resolve_tool_paths",
]

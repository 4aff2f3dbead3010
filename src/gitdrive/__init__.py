"""gitdrive - drive the git CLI from build and deploy workers."""

from __future__ import annotations

__version__ = "0.1.0"

from gitdrive.config import GitDriveConfig, load_config  # noqa: E402
from gitdrive.exceptions import GitDriveError  # noqa: E402
from gitdrive.git.manager import GitCliManager  # noqa: E402
from gitdrive.tooling.version import ToolInstallation, ToolVersion  # noqa: E402

__all__ = [
    "__version__",
    "GitCliManager",
    "GitDriveConfig",
    "GitDriveError",
    "ToolInstallation",
    "ToolVersion",
    "load_config",
]

"""gitdrive exception hierarchy.

All exceptions can be imported from this package:
    from gitdrive.exceptions import GitNotFoundError, UnsupportedGitVersionError
"""

from __future__ import annotations

from gitdrive.exceptions.base import GitDriveError
from gitdrive.exceptions.config import ConfigError
from gitdrive.exceptions.git import (
    GitError,
    GitNotFoundError,
    GitVersionUndeterminedError,
    UnsupportedGitVersionError,
)
from gitdrive.exceptions.runner import (
    ProcessExitCodeError,
    RunnerError,
    WorkingDirectoryError,
)

__all__ = [
    # Base
    "GitDriveError",
    # Config
    "ConfigError",
    # Git
    "GitError",
    "GitNotFoundError",
    "GitVersionUndeterminedError",
    "UnsupportedGitVersionError",
    # Runner
    "ProcessExitCodeError",
    "RunnerError",
    "WorkingDirectoryError",
]

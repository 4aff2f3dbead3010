from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from gitdrive.exceptions.base import GitDriveError

if TYPE_CHECKING:
    from gitdrive.tooling.version import ToolVersion


class GitError(GitDriveError):
    """Exception for git session failures.

    Per-call git failures are reported as exit codes, not exceptions. This
    hierarchy covers the conditions that make the whole session unusable.

    Attributes:
        message: Human-readable error message.
        operation: Operation that failed (e.g., "load", "ensure_version").
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize the GitError.

        Args:
            message: Human-readable error message.
            operation: Operation that failed.
        """
        self.operation = operation
        super().__init__(message)


class GitNotFoundError(GitError):
    """Exception raised when the git executable cannot be resolved.

    Attributes:
        message: Human-readable error message.
        path: The path that was expected to hold git, if any.
    """

    def __init__(
        self,
        message: str = "Git CLI not found",
        path: Path | str | None = None,
    ) -> None:
        """Initialize the GitNotFoundError.

        Args:
            message: Human-readable error message.
            path: The path that was expected to hold git.
        """
        self.path = path
        super().__init__(message, operation="load")


class GitVersionUndeterminedError(GitError):
    """Exception raised when the installed git version cannot be parsed."""

    def __init__(self, message: str = "Unable to determine git version") -> None:
        super().__init__(message, operation="load")


class UnsupportedGitVersionError(GitError):
    """Exception raised when an installed tool is older than a hard floor.

    Attributes:
        message: Human-readable error message.
        required: Minimum version that was required.
        actual: Version that is installed.
        tool: ``"git"`` or ``"git-lfs"``.
    """

    def __init__(
        self,
        message: str,
        *,
        required: ToolVersion,
        actual: ToolVersion,
        tool: str = "git",
    ) -> None:
        """Initialize the UnsupportedGitVersionError.

        Args:
            message: Human-readable error message.
            required: Minimum version that was required.
            actual: Version that is installed.
            tool: Name of the tool that failed the check.
        """
        self.required = required
        self.actual = actual
        self.tool = tool
        super().__init__(message, operation="ensure_version")

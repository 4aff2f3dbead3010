from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from gitdrive.exceptions.base import GitDriveError


class RunnerError(GitDriveError):
    """Base exception for process runner failures.

    Attributes:
        message: Human-readable error message.
    """

    pass


class WorkingDirectoryError(RunnerError):
    """Working directory does not exist or is not accessible.

    Attributes:
        message: Human-readable error message.
        path: The path that was not found.
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize the WorkingDirectoryError.

        Args:
            message: Human-readable error message.
            path: The path that was not found.
        """
        self.path = path
        super().__init__(message)


class ProcessExitCodeError(RunnerError):
    """Process exited non-zero while the caller required a zero exit.

    Attributes:
        message: Human-readable error message.
        exit_code: The exit code the process returned.
        command: The executable and arguments that were run.
    """

    def __init__(
        self,
        message: str,
        exit_code: int,
        command: Sequence[str] | None = None,
    ) -> None:
        """Initialize the ProcessExitCodeError.

        Args:
            message: Human-readable error message.
            exit_code: The exit code the process returned.
            command: The command that was run.
        """
        self.exit_code = exit_code
        self.command = list(command) if command is not None else None
        super().__init__(message)

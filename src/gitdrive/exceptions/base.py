from __future__ import annotations


class GitDriveError(Exception):
    """Base exception class for all gitdrive-specific errors.

    This is the root of the gitdrive exception hierarchy. Catching it at the
    CLI boundary handles every failure the package raises on purpose while
    letting system exceptions (and ``asyncio.CancelledError``) propagate.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            await manager.load()
        except GitDriveError as e:
            logger.error("git_load_failed", error=e.message)
            sys.exit(1)
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the GitDriveError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)

"""Asyncio-based implementation of the :class:`ProcessInvoker` protocol.

Spawns the executable directly (no shell), pumps stdout and stderr line by
line into the caller's callbacks, and on cancellation terminates the child
before flushing whatever output was already read.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Mapping, Sequence
from pathlib import Path

from gitdrive.exceptions import ProcessExitCodeError, WorkingDirectoryError
from gitdrive.logging import get_logger
from gitdrive.runners.protocols import LineCallback

__all__ = ["AsyncProcessInvoker"]

logger = get_logger(__name__)

# Timeout constants
TERMINATION_GRACE_PERIOD: float = 2.0

#: git can print very long lines (e.g. ref advertisements)
STREAM_LIMIT: int = 1024 * 1024


async def _pump(
    stream: asyncio.StreamReader | None,
    callback: LineCallback,
    encoding: str,
) -> None:
    """Read *stream* to EOF, handing each decoded line to *callback*."""
    if stream is None:
        return
    while True:
        line_bytes = await stream.readline()
        if not line_bytes:
            break
        callback(line_bytes.decode(encoding, errors="replace").rstrip("\r\n"))


class AsyncProcessInvoker:
    """Run external processes with ``asyncio.create_subprocess_exec``.

    Example:
        ```python
        invoker = AsyncProcessInvoker()
        code = await invoker.execute(
            working_directory=Path("/repo"),
            file_name=Path("/usr/bin/git"),
            arguments=["status"],
            environment=os.environ,
            on_stdout=print,
            on_stderr=print,
        )
        ```
    """

    def __init__(self, grace_period: float = TERMINATION_GRACE_PERIOD) -> None:
        """Initialize the invoker.

        Args:
            grace_period: Seconds to wait after SIGTERM before SIGKILL.
        """
        self._grace_period = grace_period

    async def execute(
        self,
        *,
        working_directory: Path,
        file_name: Path,
        arguments: Sequence[str],
        environment: Mapping[str, str],
        on_stdout: LineCallback,
        on_stderr: LineCallback,
        require_exit_code_zero: bool = False,
        encoding: str = "utf-8",
    ) -> int:
        """Run *file_name* and return its exit code.

        Returns 127 when the executable does not exist and 126 when it is not
        executable, matching shell conventions.

        Raises:
            WorkingDirectoryError: If working_directory does not exist.
            ProcessExitCodeError: If require_exit_code_zero and the exit is non-zero.
            asyncio.CancelledError: If the calling task is cancelled.
        """
        if not working_directory.is_dir():
            raise WorkingDirectoryError(
                f"Working directory does not exist: {working_directory}",
                path=working_directory,
            )

        command = [str(file_name), *arguments]
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=working_directory,
                env=dict(environment),
                limit=STREAM_LIMIT,
            )
        except FileNotFoundError:
            on_stderr(f"Command not found: {file_name}")
            returncode = 127
        except PermissionError:
            on_stderr(f"Permission denied: {file_name}")
            returncode = 126
        else:
            logger.debug("process_started", pid=process.pid, file_name=str(file_name))
            returncode = await self._wait(process, on_stdout, on_stderr, encoding)

        if returncode != 0 and require_exit_code_zero:
            raise ProcessExitCodeError(
                f"{file_name} exited with code {returncode}",
                exit_code=returncode,
                command=command,
            )
        return returncode

    async def _wait(
        self,
        process: asyncio.subprocess.Process,
        on_stdout: LineCallback,
        on_stderr: LineCallback,
        encoding: str,
    ) -> int:
        readers = {
            asyncio.create_task(_pump(process.stdout, on_stdout, encoding)),
            asyncio.create_task(_pump(process.stderr, on_stderr, encoding)),
        }
        try:
            # Readers outlive a cancellation here; the except branch drains them
            await asyncio.wait(readers)
            for task in readers:
                error = task.exception()
                if error is not None:
                    logger.warning("process_stream_error", error=str(error))
            return await process.wait()
        except asyncio.CancelledError:
            logger.debug("process_cancelled", pid=process.pid)
            await self._terminate(process)
            _, pending = await asyncio.wait(readers, timeout=self._grace_period)
            for task in pending:
                task.cancel()
            raise

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """SIGTERM, then SIGKILL after the grace period."""
        if process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=self._grace_period)
        except TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

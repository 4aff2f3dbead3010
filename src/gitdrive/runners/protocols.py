"""Protocol definitions for the collaborators gitdrive consumes.

The gateway never spawns processes or publishes telemetry itself; it talks
to these protocols so tests can substitute scripted fakes and hosts can plug
in their own process or telemetry plumbing.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

__all__ = ["LineCallback", "ProcessInvoker", "TelemetrySink"]

LineCallback = Callable[[str], None]


@runtime_checkable
class ProcessInvoker(Protocol):
    """Runs one external process and reports its output line by line.

    Example:
        A scripted fake satisfying this protocol::

            class FakeInvoker:
                async def execute(self, *, working_directory, file_name,
                                  arguments, environment, on_stdout,
                                  on_stderr, require_exit_code_zero=False,
                                  encoding="utf-8") -> int:
                    on_stdout("git version 2.43.0")
                    return 0
    """

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
        """Run *file_name* with *arguments* and return its exit code.

        Every line is delivered to the matching callback before this returns,
        including when the call is cancelled: buffered lines are flushed and
        then ``asyncio.CancelledError`` propagates.

        Raises:
            ProcessExitCodeError: If require_exit_code_zero and the exit is non-zero.
        """
        ...


@runtime_checkable
class TelemetrySink(Protocol):
    """Fire-and-forget receiver for named telemetry events."""

    def publish(self, area: str, feature: str, properties: Mapping[str, str]) -> None:
        """Publish one event with flat string properties."""
        ...

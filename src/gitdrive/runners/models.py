"""Data models for subprocess execution.

All models are frozen dataclasses with slots, mirroring how results flow
out of the gateway: produced once, never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "CaptureMode",
    "CapturedOutput",
]


class CaptureMode(str, Enum):
    """How the gateway treats a command's standard output.

    STREAM forwards every line to the logger and retains nothing. COLLECT
    keeps stdout lines for the caller; stderr is still logged so diagnostics
    survive.
    """

    STREAM = "stream"
    COLLECT = "collect"


@dataclass(frozen=True, slots=True)
class CapturedOutput:
    """Exit code and collected stdout of a single invocation.

    Attributes:
        exit_code: Exit code from the process (0 = success).
        lines: Stdout lines in emission order, without trailing newlines.

    Example:
        >>> out = CapturedOutput(exit_code=0, lines=("git version 2.43.0",))
        >>> out.success
        True
    """

    exit_code: int
    lines: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """True if the process exited 0."""
        return self.exit_code == 0

    @property
    def non_empty_lines(self) -> tuple[str, ...]:
        """Lines with empty entries removed."""
        return tuple(line for line in self.lines if line)

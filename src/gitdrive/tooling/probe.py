"""Detect installed tool versions from ``git version`` style output.

Probing is lenient: anything unexpected about the output
yields ``None`` ("version unknown") rather than an exception. Whether an
unknown version is fatal is the load step's call, not the prober's.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from gitdrive.logging import get_logger
from gitdrive.tooling.version import ToolVersion

if TYPE_CHECKING:
    from gitdrive.runners.gateway import ExecutionGateway

__all__ = [
    "VersionProber",
    "extract_single_line",
    "parse_version_line",
]

logger = get_logger(__name__)

#: major.minor[.patch] anywhere in the line; first match wins
_VERSION_PATTERN = re.compile(r"\d+\.\d+(\.\d+)?")

_PROBE_COMMANDS: dict[str, str] = {
    "git": "version",
    "lfs": "lfs version",
}


def extract_single_line(lines: Iterable[str]) -> str | None:
    """Return the only non-empty line, or None if there are zero or several.

    Example:
        >>> extract_single_line(["", "git version 2.43.0", ""])
        'git version 2.43.0'
        >>> extract_single_line(["a", "b"]) is None
        True
    """
    non_empty = [line for line in lines if line]
    if len(non_empty) != 1:
        return None
    return non_empty[0]


def parse_version_line(line: str) -> ToolVersion | None:
    """Extract the first ``major.minor[.patch]`` token from *line*.

    Example:
        >>> parse_version_line("git version 2.39.2.windows.1")
        ToolVersion(major=2, minor=39, patch=2)
        >>> parse_version_line("git version abc.def") is None
        True
    """
    match = _VERSION_PATTERN.search(line)
    if match is None or not match.group(0):
        return None
    try:
        return ToolVersion.parse(match.group(0))
    except ValueError:
        return None


class VersionProber:
    """Run a tool's version command through the gateway and parse the result.

    Used identically for git (``git version``) and git-lfs
    (``git lfs version``).
    """

    def __init__(self, gateway: ExecutionGateway) -> None:
        self._gateway = gateway

    async def probe(
        self,
        tool: Literal["git", "lfs"],
        work_dir: Path,
    ) -> ToolVersion | None:
        """Probe *tool* from *work_dir*.

        Returns:
            The parsed version, or None if the command failed or its output
            was not a single parseable line.
        """
        logger.debug("tool_version_probe", tool=tool)
        output = await self._gateway.execute_collect(work_dir, _PROBE_COMMANDS[tool])
        # Version banners carry no credentials.
        for line in output.lines:
            logger.info("git_output", line=line)

        if not output.success:
            return None

        line = extract_single_line(output.lines)
        if line is None:
            logger.debug(
                "tool_version_unparsed",
                tool=tool,
                reason="expected exactly one non-empty line",
                line_count=len(output.non_empty_lines),
            )
            return None

        version = parse_version_line(line)
        if version is None:
            logger.debug("tool_version_unparsed", tool=tool, reason="no version token")
        return version

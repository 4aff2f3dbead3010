"""Locate the git and git-lfs executables.

Two sources: ``PATH`` via :func:`shutil.which` (every platform), or the
git distribution bundled under an agent home directory (Windows only).
"""

from __future__ import annotations

import os
import platform
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from gitdrive.logging import get_logger

__all__ = ["ToolPaths", "resolve_tool_paths"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ToolPaths:
    """Resolved executable locations.

    Attributes:
        git: Path to git, or None if it could not be found.
        lfs: Path to git-lfs, or None if it is not installed.
        path_prefix: Directories to prepend to PATH so git finds git-lfs.
    """

    git: Path | None
    lfs: Path | None = None
    path_prefix: tuple[Path, ...] = ()

    def prepended_path(self, current: str | None = None) -> str | None:
        """PATH value with path_prefix in front, or None if there is no prefix."""
        if not self.path_prefix:
            return None
        current = os.environ.get("PATH", "") if current is None else current
        parts = [str(p) for p in self.path_prefix]
        if current:
            parts.append(current)
        return os.pathsep.join(parts)


def _which(name: str) -> Path | None:
    found = shutil.which(name)
    return Path(found) if found else None


def _built_in_paths(agent_home: Path) -> ToolPaths:
    git = agent_home / "externals" / "git" / "cmd" / "git.exe"
    is_x86 = platform.machine().lower() in ("x86", "i386", "i686")
    mingw = "mingw32" if is_x86 else "mingw64"
    lfs = agent_home / "externals" / "git" / mingw / "bin" / "git-lfs.exe"
    # git-lfs's directory goes first so `git` still resolves to cmd/git.exe
    return ToolPaths(git=git, lfs=lfs, path_prefix=(git.parent, lfs.parent))


def resolve_tool_paths(
    *,
    use_built_in_git: bool = False,
    agent_home: Path | None = None,
) -> ToolPaths:
    """Resolve git and git-lfs.

    Args:
        use_built_in_git: Prefer the git bundled under *agent_home*. Only
            honored on Windows; other platforms have no bundled git.
        agent_home: Agent installation root holding ``externals/git``.

    Returns:
        ToolPaths; ``git`` is None when git cannot be found.
    """
    if use_built_in_git and sys.platform == "win32" and agent_home is not None:
        paths = _built_in_paths(agent_home)
        logger.debug("git_resolved_built_in", git=str(paths.git), lfs=str(paths.lfs))
        return paths

    paths = ToolPaths(git=_which("git"), lfs=_which("git-lfs"))
    logger.debug(
        "git_resolved_from_path",
        git=str(paths.git) if paths.git else None,
        lfs=str(paths.lfs) if paths.lfs else None,
    )
    return paths

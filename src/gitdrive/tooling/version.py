"""Version value types for installed tools.

:class:`ToolVersion` is the unit every capability decision compares against.
Ordering treats a missing patch component as ``0`` so ``2.17`` and ``2.17.0``
sort (and compare equal) identically. :meth:`ToolVersion.is_exactly` is the
one comparison that does not: it requires both sides to carry all three
components, for advisories that target a single point release.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from pathlib import Path

__all__ = ["ToolInstallation", "ToolVersion"]

_VERSION_TOKEN = re.compile(r"^(\d+)\.(\d+)(?:\.(\d+))?$")


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class ToolVersion:
    """Parsed ``major.minor[.patch]`` version of an external tool.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component, or None when the tool reported only two.

    Example:
        >>> ToolVersion.parse("2.17") >= ToolVersion(2, 17, 0)
        True
        >>> ToolVersion(2, 7).is_exactly(ToolVersion(2, 7, 0))
        False
    """

    major: int
    minor: int
    patch: int | None = None

    def __post_init__(self) -> None:
        components = (self.major, self.minor, self.patch or 0)
        if any(component < 0 for component in components):
            raise ValueError(f"Version components must be non-negative: {self}")

    @classmethod
    def parse(cls, text: str) -> ToolVersion:
        """Parse a ``major.minor[.patch]`` token.

        Raises:
            ValueError: If *text* is not exactly such a token.
        """
        match = _VERSION_TOKEN.match(text.strip())
        if match is None:
            raise ValueError(f"Not a version token: {text!r}")
        major, minor, patch = match.groups()
        return cls(int(major), int(minor), int(patch) if patch is not None else None)

    @property
    def _key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch or 0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ToolVersion):
            return NotImplemented
        return self._key == other._key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ToolVersion):
            return NotImplemented
        return self._key < other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def is_exactly(self, other: ToolVersion) -> bool:
        """True only when both versions carry all three components and they match."""
        if self.patch is None or other.patch is None:
            return False
        return (self.major, self.minor, self.patch) == (
            other.major,
            other.minor,
            other.patch,
        )

    def __str__(self) -> str:
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, slots=True)
class ToolInstallation:
    """A detected tool on disk.

    Attributes:
        executable_path: Absolute path to the executable.
        version: Detected version, or None if it could not be determined.

    Raises:
        ValueError: If executable_path is empty.
    """

    executable_path: Path
    version: ToolVersion | None = None

    def __post_init__(self) -> None:
        if not self.executable_path.name:
            raise ValueError("Executable path cannot be empty")

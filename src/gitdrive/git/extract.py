"""Extract a URL from collected ``git config`` output.

Mirrors the version extraction in :mod:`gitdrive.tooling.probe`: anything
other than exactly one well-formed absolute URL is "undetermined" (None),
never an exception.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from gitdrive.tooling.probe import extract_single_line

__all__ = ["extract_absolute_url", "is_absolute_url"]


def is_absolute_url(value: str) -> bool:
    """True if *value* is a well-formed absolute URL with a scheme and host.

    Example:
        >>> is_absolute_url("https://dev.example.com/org/repo.git")
        True
        >>> is_absolute_url("git@github.com:org/repo.git")
        False
        >>> is_absolute_url("../relative/repo")
        False
    """
    if not value or any(ch.isspace() for ch in value):
        return False
    try:
        parts = urlsplit(value)
        # .port raises ValueError for a non-numeric or out-of-range port
        parts.port  # noqa: B018
    except ValueError:
        return False
    if parts.scheme == "file":
        return bool(parts.path)
    return bool(parts.scheme) and bool(parts.hostname)


def extract_absolute_url(lines: Iterable[str]) -> str | None:
    """Return the single non-empty line if it is an absolute URL, else None."""
    line = extract_single_line(lines)
    if line is None or not is_absolute_url(line):
        return None
    return line

"""Version-gated command-line construction.

Every flag whose presence depends on the installed git version (or on a
session setting) is one :class:`FlagRule` row. Rows are evaluated
independently of each other.

The builders below are pure: same context and arguments, same argument list.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from gitdrive.constants import (
    CHECKOUT_PROGRESS_VERSION,
    CLEAN_DOUBLE_FORCE_VERSION,
    FETCH_FORCE_TAGS_VERSION,
    FETCH_PRUNE_TAGS_VERSION,
    SHALLOW_MARKER,
)
from gitdrive.tooling.version import ToolVersion

__all__ = [
    "CHECKOUT_RULES",
    "CLEAN_RULES",
    "FETCH_RULES",
    "FlagRule",
    "PolicyContext",
    "checkout_options",
    "clean_options",
    "evaluate_rules",
    "fetch_options",
    "shallow_args",
    "submodule_clean_options",
    "submodule_sync_options",
    "submodule_update_options",
]


@dataclass(frozen=True, slots=True)
class PolicyContext:
    """Inputs every flag rule may consult.

    Attributes:
        version: Installed git version.
        quiet: Suppress progress reporting on fetch.
        prune_tags_disabled: Never add --prune-tags, whatever the version.
    """

    version: ToolVersion
    quiet: bool = False
    prune_tags_disabled: bool = False


@dataclass(frozen=True, slots=True)
class FlagRule:
    """One row of the decision table.

    Attributes:
        name: Key the builder looks the result up by.
        flags: Arguments contributed when the predicate holds.
        predicate: Decides inclusion for a context.
        fallback: Arguments contributed when it does not.
    """

    name: str
    flags: tuple[str, ...]
    predicate: Callable[[PolicyContext], bool]
    fallback: tuple[str, ...] = ()

    def apply(self, ctx: PolicyContext) -> tuple[str, ...]:
        return self.flags if self.predicate(ctx) else self.fallback


FETCH_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "force_tags",
        ("--force",),
        lambda ctx: ctx.version >= FETCH_FORCE_TAGS_VERSION,
    ),
    FlagRule(
        "prune_tags",
        ("--prune-tags",),
        lambda ctx: ctx.version >= FETCH_PRUNE_TAGS_VERSION
        and not ctx.prune_tags_disabled,
    ),
    FlagRule("progress", ("--progress",), lambda ctx: not ctx.quiet),
)

CHECKOUT_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "progress",
        ("--progress",),
        lambda ctx: ctx.version >= CHECKOUT_PROGRESS_VERSION,
    ),
)

CLEAN_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "force",
        ("-ffdx",),
        lambda ctx: ctx.version >= CLEAN_DOUBLE_FORCE_VERSION,
        fallback=("-fdx",),
    ),
)


def evaluate_rules(
    rules: Iterable[FlagRule], ctx: PolicyContext
) -> dict[str, tuple[str, ...]]:
    """Evaluate every row and map rule name to its contributed arguments."""
    return {rule.name: rule.apply(ctx) for rule in rules}


def shallow_args(depth: int, repository_path: Path) -> list[str]:
    """Choose between ``--depth=N``, ``--unshallow`` and nothing.

    A positive depth always wins. Without one, an existing shallow marker
    means the clone was shallow before and should be converted to full.
    """
    if depth > 0:
        return [f"--depth={depth}"]
    if repository_path.joinpath(*SHALLOW_MARKER).exists():
        return ["--unshallow"]
    return []


def fetch_options(
    ctx: PolicyContext,
    remote: str,
    depth: int,
    refspecs: Sequence[str] | None,
    repository_path: Path,
) -> list[str]:
    """Build ``git fetch`` options.

    Shape: ``[--force] --tags --prune [--prune-tags] [--progress]
    --no-recurse-submodules <remote> [--depth=N|--unshallow] <refspec>...``
    """
    flags = evaluate_rules(FETCH_RULES, ctx)
    return [
        *flags["force_tags"],
        "--tags",
        "--prune",
        *flags["prune_tags"],
        *flags["progress"],
        "--no-recurse-submodules",
        remote,
        *shallow_args(depth, repository_path),
        *(spec for spec in refspecs or () if spec),
    ]


def checkout_options(ctx: PolicyContext, ref: str) -> list[str]:
    """Build ``git checkout`` options: ``[--progress] --force <ref>``."""
    flags = evaluate_rules(CHECKOUT_RULES, ctx)
    return [*flags["progress"], "--force", ref]


def clean_options(ctx: PolicyContext) -> list[str]:
    """Build ``git clean`` options: ``-ffdx`` or, on old git, ``-fdx``."""
    return list(evaluate_rules(CLEAN_RULES, ctx)["force"])


def submodule_clean_options(ctx: PolicyContext) -> list[str]:
    """Build ``git submodule`` options running clean in every submodule."""
    return ["foreach", "--recursive", " ".join(["git", "clean", *clean_options(ctx)])]


def submodule_update_options(depth: int, recursive: bool) -> list[str]:
    options = ["update", "--init", "--force"]
    if depth > 0:
        options.append(f"--depth={depth}")
    if recursive:
        options.append("--recursive")
    return options


def submodule_sync_options(recursive: bool) -> list[str]:
    options = ["sync"]
    if recursive:
        options.append("--recursive")
    return options

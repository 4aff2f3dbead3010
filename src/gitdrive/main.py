"""CLI entry point for gitdrive.

This module defines the Click-based command-line interface. Every repository
command exits with git's own exit code.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable
from enum import IntEnum
from pathlib import Path
from typing import Any, TypeVar

import click

from gitdrive import __version__
from gitdrive.config import GitDriveConfig, load_config
from gitdrive.exceptions import ConfigError, GitDriveError
from gitdrive.git.manager import GitCliManager
from gitdrive.logging import bind_context, configure_logging

__all__ = ["ExitCode", "async_command", "cli"]


class ExitCode(IntEnum):
    """Exit codes for failures that happen before git runs."""

    SUCCESS = 0
    FAILURE = 1


F = TypeVar("F", bound=Callable[..., Any])


def async_command(f: F) -> F:
    """Decorator to run async Click commands with asyncio.run()."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper  # type: ignore[return-value]


_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group()
@click.version_option(version=__version__, prog_name="gitdrive")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides project/user config).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.pass_context
def cli(ctx: click.Context, config_file: str | None, verbose: int) -> None:
    """gitdrive - run version-correct git commands for build workers."""
    ctx.ensure_object(dict)

    try:
        config = load_config(Path(config_file) if config_file else None)
    except ConfigError as e:
        # Can't use logging yet, just output error
        error_parts = [f"Error: {e.message}"]
        if e.field:
            error_parts.append(f"  Field: {e.field}")
        if e.value is not None:
            error_parts.append(f"  Value: {e.value}")
        click.echo("\n".join(error_parts), err=True)
        ctx.exit(ExitCode.FAILURE)

    ctx.obj["config"] = config

    # CLI verbose flag takes precedence over config
    if verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config.verbosity, logging.INFO)
    configure_logging(level=level)


async def _load_manager(config: GitDriveConfig) -> GitCliManager:
    """Create and load a manager, exiting with FAILURE if git is unusable."""
    manager = GitCliManager(config)
    try:
        await manager.load()
    except GitDriveError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise click.exceptions.Exit(ExitCode.FAILURE) from e
    return manager


@cli.command()
@click.pass_context
@async_command
async def version(ctx: click.Context) -> None:
    """Print the installed git and git-lfs versions."""
    manager = await _load_manager(ctx.obj["config"])
    click.echo(f"git {manager.git.version}")
    lfs = manager.git_lfs
    if lfs is None:
        click.echo("git-lfs not installed")
    else:
        click.echo(f"git-lfs {lfs.version or 'unknown'}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("refspecs", nargs=-1)
@click.option("--remote", default="origin", show_default=True, help="Remote to fetch.")
@click.option(
    "--depth",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Shallow fetch depth (0 = full history).",
)
@click.pass_context
@async_command
async def fetch(
    ctx: click.Context,
    path: Path,
    refspecs: tuple[str, ...],
    remote: str,
    depth: int,
) -> None:
    """Fetch REFSPECS from a remote, retrying transient failures."""
    bind_context(repository=str(path), operation="fetch")
    manager = await _load_manager(ctx.obj["config"])
    ctx.exit(await manager.fetch(path, remote, depth, list(refspecs)))


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("ref")
@click.pass_context
@async_command
async def checkout(ctx: click.Context, path: Path, ref: str) -> None:
    """Force-checkout REF."""
    bind_context(repository=str(path), operation="checkout")
    manager = await _load_manager(ctx.obj["config"])
    ctx.exit(await manager.checkout(path, ref))


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
@async_command
async def clean(ctx: click.Context, path: Path) -> None:
    """Remove untracked and ignored files."""
    bind_context(repository=str(path), operation="clean")
    manager = await _load_manager(ctx.obj["config"])
    ctx.exit(await manager.clean(path))


@cli.command("fetch-url")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
@async_command
async def fetch_url(ctx: click.Context, path: Path) -> None:
    """Print the fetch URL of remote "origin"."""
    bind_context(repository=str(path), operation="fetch-url")
    manager = await _load_manager(ctx.obj["config"])
    url = await manager.get_fetch_url(path)
    if url is None:
        click.echo("Error: no fetch URL configured for origin", err=True)
        ctx.exit(ExitCode.FAILURE)
    click.echo(url)


if __name__ == "__main__":
    cli()

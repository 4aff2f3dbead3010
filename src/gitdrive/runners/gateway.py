"""Execution gateway: one git invocation per call, exit code returned as-is.

The gateway owns the environment every git process sees and the logging of
command lines and output. It never retries and never interprets the exit
code; callers and :mod:`gitdrive.git.retry` decide what a failure means.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from gitdrive.constants import DEFAULT_GIT_ENV
from gitdrive.logging import get_logger
from gitdrive.runners.models import CaptureMode, CapturedOutput
from gitdrive.runners.protocols import ProcessInvoker
from gitdrive.utils.security import scrub_secrets

__all__ = ["ExecutionGateway"]

logger = get_logger(__name__)


class ExecutionGateway:
    """Run git subcommands through an injected :class:`ProcessInvoker`.

    Environment precedence, lowest to highest: the parent environment,
    :data:`~gitdrive.constants.DEFAULT_GIT_ENV`, overrides set after
    construction with :meth:`set_override` (e.g. the user agent), and the
    session environment passed to ``__init__``.

    Attributes:
        git_path: Executable every call runs.

    Example:
        ```python
        gateway = ExecutionGateway(AsyncProcessInvoker(), Path("/usr/bin/git"))
        code = await gateway.execute(repo, "reset", ["--hard", "HEAD"])
        out = await gateway.execute_collect(repo, "config", ["--get", "remote.origin.url"])
        ```
    """

    def __init__(
        self,
        invoker: ProcessInvoker,
        git_path: Path,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            invoker: Process collaborator used for every call.
            git_path: Absolute path to the git executable.
            env: Session environment; wins over every other source.
        """
        self._invoker = invoker
        self.git_path = git_path
        self._session_env = {key: value or "" for key, value in (env or {}).items() if key}
        self._overrides: dict[str, str] = {}

    def set_override(self, key: str, value: str) -> None:
        """Set an environment override below the session environment."""
        self._overrides[key] = value

    def build_env(self) -> dict[str, str]:
        """Build the complete environment for a git process."""
        env = os.environ.copy()
        env.update(DEFAULT_GIT_ENV)
        env.update(self._overrides)
        env.update(self._session_env)
        return env

    @staticmethod
    def build_arguments(
        command: str,
        options: Sequence[str] = (),
        leading_args: Sequence[str] = (),
    ) -> list[str]:
        """Assemble ``[*leading_args, *command tokens, *options]``."""
        return [*leading_args, *command.split(), *options]

    async def execute(
        self,
        cwd: Path,
        command: str,
        options: Sequence[str] = (),
        *,
        leading_args: Sequence[str] = (),
    ) -> int:
        """Run a git command, streaming all output to the logger.

        Returns:
            The process exit code, uninterpreted.
        """
        output = await self._invoke(
            CaptureMode.STREAM, cwd, command, options, leading_args
        )
        return output.exit_code

    async def execute_collect(
        self,
        cwd: Path,
        command: str,
        options: Sequence[str] = (),
        *,
        leading_args: Sequence[str] = (),
    ) -> CapturedOutput:
        """Run a git command, collecting stdout lines for the caller.

        Collected lines are not logged; they may carry credentials. Stderr is
        still streamed to the logger.
        """
        return await self._invoke(
            CaptureMode.COLLECT, cwd, command, options, leading_args
        )

    async def _invoke(
        self,
        mode: CaptureMode,
        cwd: Path,
        command: str,
        options: Sequence[str],
        leading_args: Sequence[str],
    ) -> CapturedOutput:
        arguments = self.build_arguments(command, options, leading_args)
        command_line = " ".join(["git", *arguments])
        logger.info("git_command", command=scrub_secrets(command_line))

        collected: list[str] = []

        def log_line(line: str) -> None:
            logger.info("git_output", line=scrub_secrets(line))

        exit_code = await self._invoker.execute(
            working_directory=cwd,
            file_name=self.git_path,
            arguments=arguments,
            environment=self.build_env(),
            on_stdout=collected.append if mode is CaptureMode.COLLECT else log_line,
            on_stderr=log_line,
            require_exit_code_zero=False,
        )
        return CapturedOutput(exit_code=exit_code, lines=tuple(collected))

"""Scripted stand-ins for the process and telemetry collaborators.

Provides:
- ScriptedInvoker: ProcessInvoker fake answering by argument prefix
- RecordingTelemetrySink: TelemetrySink fake keeping every event
- RecordingSleep: backoff sleep that returns immediately
- invoker / telemetry / make_manager fixtures
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from gitdrive.config import GitDriveConfig
from gitdrive.exceptions import ProcessExitCodeError
from gitdrive.git.manager import GitCliManager
from gitdrive.runners.protocols import LineCallback
from gitdrive.tooling.resolver import ToolPaths

GIT_VERSION_BANNER = "git version 2.43.0"
LFS_VERSION_BANNER = "git-lfs/3.4.1 (GitHub; linux amd64; go 1.21.5)"


@dataclass(frozen=True)
class Script:
    """Canned outcome of one invocation.

    Attributes:
        exit_code: Exit code to return.
        stdout: Lines delivered to on_stdout.
        stderr: Lines delivered to on_stderr.
        raises: Exception raised after the lines are delivered.
    """

    exit_code: int = 0
    stdout: tuple[str, ...] = ()
    stderr: tuple[str, ...] = ()
    raises: BaseException | None = None


@dataclass(frozen=True)
class RecordedCall:
    working_directory: Path
    file_name: Path
    arguments: tuple[str, ...]
    environment: dict[str, str]
    require_exit_code_zero: bool


class ScriptedInvoker:
    """ProcessInvoker fake.

    Register outcomes with :meth:`on` against an argument prefix. The longest
    matching prefix wins. Outcomes for a prefix are consumed in order and the
    last one repeats. Unmatched calls exit 0 with no output.
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self._scripts: dict[tuple[str, ...], list[Script]] = {}

    def on(self, command: str, *scripts: Script) -> ScriptedInvoker:
        self._scripts[tuple(command.split())] = list(scripts)
        return self

    def calls_for(self, command: str) -> list[RecordedCall]:
        prefix = tuple(command.split())
        return [c for c in self.calls if c.arguments[: len(prefix)] == prefix]

    def _next(self, arguments: tuple[str, ...]) -> Script:
        matches = [p for p in self._scripts if arguments[: len(p)] == p]
        if not matches:
            return Script()
        queue = self._scripts[max(matches, key=len)]
        return queue.pop(0) if len(queue) > 1 else queue[0]

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
        args = tuple(arguments)
        self.calls.append(
            RecordedCall(
                working_directory=working_directory,
                file_name=file_name,
                arguments=args,
                environment=dict(environment),
                require_exit_code_zero=require_exit_code_zero,
            )
        )
        script = self._next(args)
        for line in script.stdout:
            on_stdout(line)
        for line in script.stderr:
            on_stderr(line)
        if script.raises is not None:
            raise script.raises
        if script.exit_code != 0 and require_exit_code_zero:
            raise ProcessExitCodeError(
                "scripted failure", exit_code=script.exit_code, command=list(args)
            )
        return script.exit_code


@dataclass
class RecordingTelemetrySink:
    events: list[tuple[str, str, dict[str, str]]] = field(default_factory=list)

    def publish(self, area: str, feature: str, properties: Mapping[str, str]) -> None:
        self.events.append((area, feature, dict(properties)))


@dataclass
class RecordingSleep:
    """Backoff sleep that records the requested delays and returns at once."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def default_invoker(
    git_banner: str = GIT_VERSION_BANNER,
    lfs_banner: str = LFS_VERSION_BANNER,
) -> ScriptedInvoker:
    invoker = ScriptedInvoker()
    invoker.on("version", Script(stdout=(git_banner,)))
    invoker.on("lfs version", Script(stdout=(lfs_banner,)))
    return invoker


@pytest.fixture
def invoker() -> ScriptedInvoker:
    """Invoker answering both version probes with current releases."""
    return default_invoker()


@pytest.fixture
def telemetry() -> RecordingTelemetrySink:
    return RecordingTelemetrySink()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_manager(
    invoker: ScriptedInvoker,
    telemetry: RecordingTelemetrySink,
    recording_sleep: RecordingSleep,
    fake_git: Path,
) -> Callable[..., GitCliManager]:
    """Factory for managers wired to the scripted collaborators.

    Example:
        >>> manager = make_manager(GitDriveConfig(lfs_support=True))
        >>> await manager.load()
    """

    def factory(
        config: GitDriveConfig | None = None,
        *,
        with_lfs: bool = True,
    ) -> GitCliManager:
        lfs = fake_git.parent / "git-lfs" if with_lfs else None
        paths = ToolPaths(git=fake_git, lfs=lfs)
        return GitCliManager(
            config or GitDriveConfig(work_folder=fake_git.parent),
            invoker=invoker,
            telemetry=telemetry,
            resolver=lambda **_: paths,
            sleep=recording_sleep,
        )

    return factory

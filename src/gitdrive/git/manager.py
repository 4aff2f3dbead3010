"""Session-level git driver.

:class:`GitCliManager` ties the pieces together: it resolves and probes the
installed tools once in :meth:`GitCliManager.load`, then turns every
repository operation into a version-correct command line and runs it through
the :class:`~gitdrive.runners.gateway.ExecutionGateway`.

Per-call failures are exit codes, never exceptions. Only conditions that make
the whole session unusable (missing git, unknown or too-old version) raise.
"""

from __future__ import annotations

import asyncio
import shlex
import time
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from gitdrive.config import GitDriveConfig
from gitdrive.constants import (
    FETCH_TELEMETRY_FEATURE,
    KNOWN_BAD_GIT_LFS_VERSION,
    MIN_GIT_VERSION,
    RECOMMENDED_GIT_LFS_VERSION,
    RECOMMENDED_GIT_VERSION,
    TELEMETRY_AREA,
    USER_AGENT_ENV_VAR,
    USER_AGENT_PRODUCT,
)
from gitdrive.exceptions import (
    GitDriveError,
    GitNotFoundError,
    GitVersionUndeterminedError,
    UnsupportedGitVersionError,
)
from gitdrive.git.extract import extract_absolute_url
from gitdrive.git.policy import (
    PolicyContext,
    checkout_options,
    clean_options,
    fetch_options,
    submodule_clean_options,
    submodule_sync_options,
    submodule_update_options,
)
from gitdrive.git.retry import RetryState, retry_exit_code
from gitdrive.git.telemetry import FetchTelemetry, LoggingTelemetrySink
from gitdrive.logging import get_logger
from gitdrive.runners.gateway import ExecutionGateway
from gitdrive.runners.process import AsyncProcessInvoker
from gitdrive.runners.protocols import ProcessInvoker, TelemetrySink
from gitdrive.tooling.probe import VersionProber
from gitdrive.tooling.resolver import ToolPaths, resolve_tool_paths
from gitdrive.tooling.version import ToolInstallation, ToolVersion
from gitdrive.utils.security import is_potentially_secret, scrub_secrets

__all__ = ["GitCliManager"]

logger = get_logger(__name__)

ToolResolver = Callable[..., ToolPaths]


class GitCliManager:
    """Drive the git CLI for one worker session.

    Construct, ``await load()``, then call operations. After ``load()`` the
    manager is read-only and may be shared by concurrent coroutines.

    Args:
        config: Session settings. Defaults to ``GitDriveConfig()``.
        invoker: Process collaborator. Defaults to :class:`AsyncProcessInvoker`.
        telemetry: Receiver for fetch telemetry. Defaults to a logging sink.
        resolver: Locates git and git-lfs; called with ``use_built_in_git``
            and ``agent_home`` keywords.
        sleep: Backoff sleep for fetch retries; replaced by tests.

    Example:
        ```python
        manager = GitCliManager(GitDriveConfig(agent_version="3.1.0"))
        await manager.load()
        code = await manager.fetch(repo, "origin", 0, ["+refs/heads/main"])
        ```
    """

    def __init__(
        self,
        config: GitDriveConfig | None = None,
        *,
        invoker: ProcessInvoker | None = None,
        telemetry: TelemetrySink | None = None,
        resolver: ToolResolver = resolve_tool_paths,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config if config is not None else GitDriveConfig()
        self._invoker = invoker or AsyncProcessInvoker()
        self._telemetry = telemetry or LoggingTelemetrySink()
        self._resolver = resolver
        self._sleep = sleep
        self._gateway: ExecutionGateway | None = None
        self._git: ToolInstallation | None = None
        self._git_lfs: ToolInstallation | None = None

    @property
    def git(self) -> ToolInstallation:
        """The loaded git installation.

        Raises:
            GitDriveError: If :meth:`load` has not completed.
        """
        if self._git is None:
            raise GitDriveError("GitCliManager.load() has not been called")
        return self._git

    @property
    def git_lfs(self) -> ToolInstallation | None:
        """The loaded git-lfs installation, or None if git-lfs is not installed."""
        return self._git_lfs

    @property
    def gateway(self) -> ExecutionGateway:
        if self._gateway is None:
            raise GitDriveError("GitCliManager.load() has not been called")
        return self._gateway

    @property
    def policy_context(self) -> PolicyContext:
        """Inputs for the command policy, derived from the loaded git version."""
        version = self.git.version
        assert version is not None  # load() refuses an unknown version
        return PolicyContext(
            version=version,
            quiet=self._config.quiet_checkout,
            prune_tags_disabled=self._config.disable_fetch_prune_tags,
        )

    @property
    def work_folder(self) -> Path:
        return self._config.work_folder or Path.cwd()

    # =====================================================================
    # Load
    # =====================================================================

    async def load(self) -> None:
        """Resolve and probe git (and git-lfs), then apply load-time policy.

        Raises:
            GitNotFoundError: If git cannot be located.
            GitVersionUndeterminedError: If git's version cannot be parsed.
            UnsupportedGitVersionError: If git is older than the hard floor.
        """
        paths = self._resolver(
            use_built_in_git=self._config.use_built_in_git,
            agent_home=self._config.agent_home,
        )
        if paths.git is None or not paths.git.is_file():
            raise GitNotFoundError(path=paths.git)

        gateway = ExecutionGateway(self._invoker, paths.git, self._config.env)
        prepended = paths.prepended_path()
        if prepended is not None:
            gateway.set_override("PATH", prepended)
        self._gateway = gateway

        git_version = await self.git_version()
        if git_version is None:
            raise GitVersionUndeterminedError()
        self._git = ToolInstallation(paths.git, git_version)
        logger.info("git_detected", path=str(paths.git), version=str(git_version))

        if paths.lfs is not None:
            lfs_version = await self.git_lfs_version()
            if lfs_version is None:
                logger.warning("git_lfs_version_undetermined", path=str(paths.lfs))
            else:
                logger.info(
                    "git_lfs_detected", path=str(paths.lfs), version=str(lfs_version)
                )
            self._git_lfs = ToolInstallation(paths.lfs, lfs_version)

        self.ensure_git_version(MIN_GIT_VERSION, throw_on_mismatch=True)

        if not self.ensure_git_version(RECOMMENDED_GIT_VERSION, throw_on_mismatch=False):
            logger.warning(
                "git_version_below_recommended",
                installed=str(git_version),
                recommended=str(RECOMMENDED_GIT_VERSION),
            )

        lfs_version = self._git_lfs.version if self._git_lfs else None
        if (
            self._config.lfs_support
            and lfs_version is not None
            and lfs_version.is_exactly(KNOWN_BAD_GIT_LFS_VERSION)
        ):
            logger.warning(
                "git_lfs_known_bad_version",
                installed=str(lfs_version),
                recommended=str(RECOMMENDED_GIT_LFS_VERSION),
                detail="git-lfs 2.7.1 ignores http extra headers from git config",
            )

        agent_version = self._config.agent_version or "unknown"
        user_agent = f"git/{git_version} ({USER_AGENT_PRODUCT}/{agent_version})"
        gateway.set_override(USER_AGENT_ENV_VAR, user_agent)
        logger.debug("git_user_agent_set", user_agent=user_agent)

    async def git_version(self) -> ToolVersion | None:
        """Run ``git version`` in the work folder."""
        return await VersionProber(self.gateway).probe("git", self.work_folder)

    async def git_lfs_version(self) -> ToolVersion | None:
        """Run ``git lfs version`` in the work folder."""
        return await VersionProber(self.gateway).probe("lfs", self.work_folder)

    def ensure_git_version(
        self, required: ToolVersion, throw_on_mismatch: bool = True
    ) -> bool:
        """Check the loaded git version against *required*.

        Returns:
            True if the installed version is at least *required*.

        Raises:
            GitDriveError: If git has not been loaded.
            UnsupportedGitVersionError: If below *required* and throw_on_mismatch.
        """
        return self._ensure_version(self.git, required, throw_on_mismatch, "git")

    def ensure_git_lfs_version(
        self, required: ToolVersion, throw_on_mismatch: bool = True
    ) -> bool:
        """Check the loaded git-lfs version against *required*.

        Raises:
            GitDriveError: If git-lfs is not installed or its version is unknown.
            UnsupportedGitVersionError: If below *required* and throw_on_mismatch.
        """
        if self._git_lfs is None:
            raise GitDriveError("git-lfs is not installed or load() has not run")
        return self._ensure_version(
            self._git_lfs, required, throw_on_mismatch, "git-lfs"
        )

    @staticmethod
    def _ensure_version(
        installation: ToolInstallation,
        required: ToolVersion,
        throw_on_mismatch: bool,
        tool: str,
    ) -> bool:
        actual = installation.version
        if actual is None:
            raise GitDriveError(f"{tool} version is unknown")
        satisfied = actual >= required
        if not satisfied and throw_on_mismatch:
            raise UnsupportedGitVersionError(
                f"Minimum required {tool} version is {required}, "
                f"your {tool} ('{installation.executable_path}') version is {actual}",
                required=required,
                actual=actual,
                tool=tool,
            )
        return satisfied

    # =====================================================================
    # Repository lifecycle
    # =====================================================================

    async def init(self, repository_path: Path) -> int:
        """``git init <path>``; the directory must already exist."""
        return await self.gateway.execute(
            repository_path, "init", [str(repository_path)]
        )

    async def fetch(
        self,
        repository_path: Path,
        remote: str,
        depth: int,
        refspecs: Sequence[str] | None,
        additional_command_line: str = "",
        *,
        state: RetryState | None = None,
    ) -> int:
        """Fetch with bounded, jittered retries.

        One telemetry event is published per attempt, so the number of
        events always equals the number of attempts made.

        Returns:
            Exit code of the last attempt.
        """
        options = fetch_options(
            self.policy_context, remote, depth, refspecs, repository_path
        )
        leading_args = shlex.split(additional_command_line)
        gateway = self.gateway

        async def attempt() -> int:
            started = time.monotonic()
            exit_code = await gateway.execute(
                repository_path, "fetch", options, leading_args=leading_args
            )
            elapsed_ms = int((time.monotonic() - started) * 1000)
            event = FetchTelemetry.from_attempt(
                elapsed_ms=elapsed_ms,
                refspecs=[spec for spec in refspecs or () if spec],
                remote_name=remote,
                fetch_depth=depth,
                exit_code=exit_code,
                options=options,
            )
            self._telemetry.publish(
                TELEMETRY_AREA, FETCH_TELEMETRY_FEATURE, event.to_properties()
            )
            return exit_code

        def on_retry(exit_code: int, delay: float) -> None:
            logger.warning(
                "git_fetch_retry",
                remote=remote,
                exit_code=exit_code,
                delay_seconds=round(delay, 2),
            )

        return await self._retry(attempt, on_retry, state)

    async def lfs_fetch(
        self,
        repository_path: Path,
        remote: str,
        refspec: str,
        additional_command_line: str = "",
        *,
        state: RetryState | None = None,
    ) -> int:
        """``git lfs fetch <remote> <refspec>`` with the fetch retry policy."""
        leading_args = shlex.split(additional_command_line)
        gateway = self.gateway

        async def attempt() -> int:
            return await gateway.execute(
                repository_path,
                "lfs fetch",
                [remote, refspec],
                leading_args=leading_args,
            )

        def on_retry(exit_code: int, delay: float) -> None:
            logger.warning(
                "git_lfs_fetch_retry",
                remote=remote,
                exit_code=exit_code,
                delay_seconds=round(delay, 2),
            )

        return await self._retry(attempt, on_retry, state)

    async def _retry(
        self,
        attempt: Callable[[], Awaitable[int]],
        on_retry: Callable[[int, float], None],
        state: RetryState | None,
    ) -> int:
        retry = self._config.retry
        return await retry_exit_code(
            attempt,
            max_attempts=retry.max_attempts,
            min_backoff=retry.min_backoff_seconds,
            max_backoff=retry.max_backoff_seconds,
            sleep=self._sleep,
            on_retry=on_retry,
            state=state,
        )

    async def checkout(self, repository_path: Path, ref: str) -> int:
        return await self.gateway.execute(
            repository_path, "checkout", checkout_options(self.policy_context, ref)
        )

    async def clean(self, repository_path: Path) -> int:
        return await self.gateway.execute(
            repository_path, "clean", clean_options(self.policy_context)
        )

    async def reset(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "reset", ["--hard", "HEAD"])

    # =====================================================================
    # Remotes
    # =====================================================================

    async def remote_add(self, repository_path: Path, name: str, url: str) -> int:
        return await self.gateway.execute(repository_path, "remote", ["add", name, url])

    async def remote_set_url(self, repository_path: Path, name: str, url: str) -> int:
        return await self.gateway.execute(
            repository_path, "remote", ["set-url", name, url]
        )

    async def remote_set_push_url(
        self, repository_path: Path, name: str, url: str
    ) -> int:
        return await self.gateway.execute(
            repository_path, "remote", ["set-url", "--push", name, url]
        )

    async def get_fetch_url(self, repository_path: Path) -> str | None:
        """Read ``remote.origin.url``.

        Returns:
            The URL if git printed exactly one absolute URL, else None.
        """
        output = await self.gateway.execute_collect(
            repository_path, "config", ["--get", "remote.origin.url"]
        )
        if not output.success:
            logger.warning("git_fetch_url_unavailable", exit_code=output.exit_code)
            return None

        url = extract_absolute_url(output.lines)
        if url is None:
            logger.debug(
                "git_fetch_url_unparsed", line_count=len(output.non_empty_lines)
            )
            return None
        logger.debug(
            "git_fetch_url_found",
            url=scrub_secrets(url),
            has_credentials=is_potentially_secret(url),
        )
        return url

    # =====================================================================
    # Submodules
    # =====================================================================

    async def submodule_clean(self, repository_path: Path) -> int:
        return await self.gateway.execute(
            repository_path, "submodule", submodule_clean_options(self.policy_context)
        )

    async def submodule_reset(self, repository_path: Path) -> int:
        return await self.gateway.execute(
            repository_path,
            "submodule",
            ["foreach", "--recursive", "git reset --hard HEAD"],
        )

    async def submodule_update(
        self,
        repository_path: Path,
        depth: int,
        additional_command_line: str = "",
        recursive: bool = False,
    ) -> int:
        return await self.gateway.execute(
            repository_path,
            "submodule",
            submodule_update_options(depth, recursive),
            leading_args=shlex.split(additional_command_line),
        )

    async def submodule_sync(self, repository_path: Path, recursive: bool = False) -> int:
        return await self.gateway.execute(
            repository_path, "submodule", submodule_sync_options(recursive)
        )

    # =====================================================================
    # Config
    # =====================================================================

    async def config(self, repository_path: Path, key: str, value: str) -> int:
        return await self.gateway.execute(repository_path, "config", [key, value])

    async def config_exists(self, repository_path: Path, key: str) -> bool:
        """True if git reports *key* as set, even to an empty value.

        Values are never logged.
        """
        output = await self.gateway.execute_collect(
            repository_path, "config", ["--get-all", key]
        )
        return output.success

    async def config_unset(self, repository_path: Path, key: str) -> int:
        return await self.gateway.execute(repository_path, "config", ["--unset-all", key])

    async def disable_auto_gc(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "config", ["gc.auto", "0"])

    # =====================================================================
    # Maintenance
    # =====================================================================

    async def repack(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "repack", ["-adfl"])

    async def prune(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "prune", ["-v"])

    async def count_objects(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "count-objects", ["-v", "-H"])

    # =====================================================================
    # LFS
    # =====================================================================

    async def lfs_install(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "lfs install", ["--local"])

    async def lfs_prune(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "lfs prune")

    async def lfs_logs(self, repository_path: Path) -> int:
        return await self.gateway.execute(repository_path, "lfs logs", ["last"])

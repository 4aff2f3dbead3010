"""Shared test fixtures for the gitdrive test suite.

Available Fixtures
==================

Process and telemetry fakes (from tests/fixtures/invoker.py)
------------------------------------------------------------

Classes:
    Script: Canned outcome (exit code, stdout/stderr lines, optional raise).
    ScriptedInvoker: ProcessInvoker fake answering by argument prefix and
        recording every call (arguments, environment, working directory).
    RecordingTelemetrySink: Keeps every published telemetry event.
    RecordingSleep: Backoff sleep that records delays and returns at once.

Fixtures:
    invoker: ScriptedInvoker answering ``version`` and ``lfs version``.
    telemetry: Fresh RecordingTelemetrySink.
    recording_sleep: Fresh RecordingSleep.
    make_manager: Factory building a GitCliManager on the fakes above.

Example:
    >>> @pytest.mark.asyncio
    ... async def test_fetch(make_manager, invoker, repo_dir):
    ...     invoker.on("fetch", Script(exit_code=1), Script(exit_code=0))
    ...     manager = make_manager()
    ...     await manager.load()
    ...     assert await manager.fetch(repo_dir, "origin", 0, []) == 0
"""

from __future__ import annotations

from tests.fixtures.invoker import (
    GIT_VERSION_BANNER,
    LFS_VERSION_BANNER,
    RecordedCall,
    RecordingSleep,
    RecordingTelemetrySink,
    Script,
    ScriptedInvoker,
    default_invoker,
)

__all__ = [
    "GIT_VERSION_BANNER",
    "LFS_VERSION_BANNER",
    "RecordedCall",
    "RecordingSleep",
    "RecordingTelemetrySink",
    "Script",
    "ScriptedInvoker",
    "default_invoker",
]

from __future__ import annotations

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest


def make_stream(*lines: bytes, block: bool = False) -> MagicMock:
    """A StreamReader stand-in yielding *lines*, then EOF (or blocking forever)."""

    async def blocked() -> bytes:
        await asyncio.Event().wait()
        return b""

    stream = MagicMock()
    side_effect: list[object] = list(lines)
    if block:
        side_effect.append(blocked)
    else:
        side_effect.append(b"")

    results = iter(side_effect)

    async def readline() -> bytes:
        item = next(results)
        if callable(item):
            return await item()
        return item  # type: ignore[return-value]

    stream.readline = readline
    return stream


@pytest.fixture
def make_process() -> Callable[..., MagicMock]:
    """Factory for a mock asyncio subprocess with scripted pipes."""

    def factory(
        stdout: tuple[bytes, ...] = (),
        stderr: tuple[bytes, ...] = (),
        returncode: int = 0,
        block_stdout: bool = False,
    ) -> MagicMock:
        process = MagicMock()
        process.pid = 12345
        process.returncode = None
        process.stdout = make_stream(*stdout, block=block_stdout)
        process.stderr = make_stream(*stderr)
        process.wait = AsyncMock(return_value=returncode)
        process.terminate = MagicMock()
        process.kill = MagicMock()
        return process

    return factory

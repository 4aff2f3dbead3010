"""Unit tests for runner models."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from gitdrive.runners.models import CaptureMode, CapturedOutput


class TestCapturedOutput:
    """Tests for CapturedOutput dataclass."""

    def test_success_when_exit_code_zero(self) -> None:
        assert CapturedOutput(exit_code=0).success is True

    def test_not_success_when_exit_code_nonzero(self) -> None:
        assert CapturedOutput(exit_code=128, lines=("fatal: x",)).success is False

    def test_non_empty_lines_preserves_order(self) -> None:
        output = CapturedOutput(exit_code=0, lines=("", "b", "", "a"))
        assert output.non_empty_lines == ("b", "a")

    def test_frozen(self) -> None:
        output = CapturedOutput(exit_code=0)
        with pytest.raises(FrozenInstanceError):
            output.exit_code = 1  # type: ignore[misc]


class TestCaptureMode:
    def test_values(self) -> None:
        assert CaptureMode("stream") is CaptureMode.STREAM
        assert CaptureMode("collect") is CaptureMode.COLLECT

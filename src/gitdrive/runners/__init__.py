"""Subprocess execution: the process collaborator and the git gateway."""

from __future__ import annotations

from gitdrive.runners.gateway import ExecutionGateway
from gitdrive.runners.models import CaptureMode, CapturedOutput
from gitdrive.runners.process import AsyncProcessInvoker
from gitdrive.runners.protocols import LineCallback, ProcessInvoker, TelemetrySink

__all__ = [
    # Models
    "CaptureMode",
    "CapturedOutput",
    # Protocols
    "LineCallback",
    "ProcessInvoker",
    "TelemetrySink",
    # Runners
    "AsyncProcessInvoker",
    "ExecutionGateway",
]

"""Git command construction, retry and the session manager."""

from __future__ import annotations

from gitdrive.git.extract import extract_absolute_url, is_absolute_url
from gitdrive.git.manager import GitCliManager
from gitdrive.git.policy import (
    CHECKOUT_RULES,
    CLEAN_RULES,
    FETCH_RULES,
    FlagRule,
    PolicyContext,
)
from gitdrive.git.retry import RetryState, retry_exit_code
from gitdrive.git.telemetry import FetchTelemetry, LoggingTelemetrySink

__all__ = [
    # Manager
    "GitCliManager",
    # Policy
    "CHECKOUT_RULES",
    "CLEAN_RULES",
    "FETCH_RULES",
    "FlagRule",
    "PolicyContext",
    # Retry
    "RetryState",
    "retry_exit_code",
    # Telemetry
    "FetchTelemetry",
    "LoggingTelemetrySink",
    # Extraction
    "extract_absolute_url",
    "is_absolute_url",
]

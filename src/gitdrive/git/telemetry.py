"""Per-attempt fetch telemetry.

One :class:`FetchTelemetry` snapshot is published for every fetch attempt,
successful or not. Aggregation is the sink's business; nothing here keeps
events around.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from gitdrive.logging import get_logger
from gitdrive.utils.security import scrub_secrets

__all__ = ["FetchTelemetry", "LoggingTelemetrySink"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FetchTelemetry:
    """Snapshot of a single fetch attempt.

    Attributes:
        elapsed_ms: Wall time of the attempt in milliseconds.
        ref_spec: Space-joined refspecs requested.
        remote_name: Remote fetched from.
        fetch_depth: Requested depth (0 = full history).
        exit_code: Exit code of the attempt.
        options: Full option string passed to ``git fetch``.
    """

    elapsed_ms: int
    ref_spec: str
    remote_name: str
    fetch_depth: int
    exit_code: int
    options: str

    @classmethod
    def from_attempt(
        cls,
        *,
        elapsed_ms: int,
        refspecs: Sequence[str],
        remote_name: str,
        fetch_depth: int,
        exit_code: int,
        options: Sequence[str],
    ) -> FetchTelemetry:
        return cls(
            elapsed_ms=elapsed_ms,
            ref_spec=" ".join(refspecs),
            remote_name=remote_name,
            fetch_depth=fetch_depth,
            exit_code=exit_code,
            options=" ".join(options),
        )

    def to_properties(self) -> dict[str, str]:
        """Flat string mapping in the shape telemetry sinks expect."""
        return {
            "ElapsedTimeMilliseconds": str(self.elapsed_ms),
            "RefSpec": self.ref_spec,
            "RemoteName": self.remote_name,
            "FetchDepth": str(self.fetch_depth),
            "ExitCode": str(self.exit_code),
            "Options": self.options,
        }


class LoggingTelemetrySink:
    """Telemetry sink that writes one debug log entry per event."""

    def publish(self, area: str, feature: str, properties: Mapping[str, str]) -> None:
        logger.debug(
            "telemetry_event",
            area=area,
            feature=feature,
            properties={k: scrub_secrets(v) for k, v in properties.items()},
        )

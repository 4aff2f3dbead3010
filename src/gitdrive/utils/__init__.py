"""Shared utilities for gitdrive."""

from __future__ import annotations

from gitdrive.utils.security import is_potentially_secret, scrub_secrets

__all__ = ["is_potentially_secret", "scrub_secrets"]

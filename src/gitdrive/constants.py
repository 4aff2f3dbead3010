"""gitdrive constants: tool version thresholds and fixed names.

Single source of truth for the git/git-lfs versions the command policy and the
load step compare against. Update these when a new upstream behavior change
needs gating.
"""

from __future__ import annotations

from gitdrive.tooling.version import ToolVersion

# =============================================================================
# Load-time floors
# =============================================================================

#: Every command line gitdrive builds needs at least git 2.0
MIN_GIT_VERSION: ToolVersion = ToolVersion(2, 0)

#: Versions below this get an upgrade advisory
RECOMMENDED_GIT_VERSION: ToolVersion = ToolVersion(2, 17)

#: git-lfs 2.7.1 drops extra headers from git config (git-lfs/git-lfs#3571)
KNOWN_BAD_GIT_LFS_VERSION: ToolVersion = ToolVersion(2, 7, 1)

#: First release with the extra header fix
RECOMMENDED_GIT_LFS_VERSION: ToolVersion = ToolVersion(2, 7, 2)

# =============================================================================
# Command policy thresholds
# =============================================================================

#: git 2.20 rejects tag updates on fetch unless --force is given
FETCH_FORCE_TAGS_VERSION: ToolVersion = ToolVersion(2, 20)

#: --prune-tags first shipped in git 2.17
FETCH_PRUNE_TAGS_VERSION: ToolVersion = ToolVersion(2, 17)

#: git 2.7 reports checkout progress to stderr while streams are redirected
CHECKOUT_PROGRESS_VERSION: ToolVersion = ToolVersion(2, 7)

#: git 2.4 accepts a doubled -f on clean (removes nested repositories too)
CLEAN_DOUBLE_FORCE_VERSION: ToolVersion = ToolVersion(2, 4)

# =============================================================================
# Retry
# =============================================================================

FETCH_MAX_ATTEMPTS: int = 3
FETCH_MIN_BACKOFF_SECONDS: float = 1.0
FETCH_MAX_BACKOFF_SECONDS: float = 10.0

# =============================================================================
# Environment and telemetry
# =============================================================================

#: Environment applied to every git invocation before session overrides
DEFAULT_GIT_ENV: dict[str, str] = {"GIT_TERMINAL_PROMPT": "0"}

USER_AGENT_ENV_VAR = "GIT_HTTP_USER_AGENT"
USER_AGENT_PRODUCT = "gitdrive"

#: Relative to the repository root; present only in shallow clones
SHALLOW_MARKER = (".git", "shallow")

TELEMETRY_AREA = "gitdrive"
FETCH_TELEMETRY_FEATURE = "GitFetch"

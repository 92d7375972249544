"""
Core system constants.

Basic system constants that are used across multiple modules.

Only place true invariants here (level names, known prefixes, file names).
Deployment-specific paths live in ampmap.runtime.paths; the role catalog and
migration table live in ampmap.mappings.catalog.
"""

from __future__ import annotations


# Settings and activity log file names under the system root
SETTINGS_FILE_NAME = "settings.yaml"
ACTIVITY_LOG_FILE_NAME = "activity.log"

# Environment variable used to relocate the system root
SYSTEM_ROOT_ENV = "AMPMAP_SYSTEM_ROOT"

# ==============================================================================
# Reasoning levels
# ==============================================================================

# Ordered from no override to maximum effort. "none" never appears as a suffix.
REASONING_LEVELS = ("none", "minimal", "low", "medium", "high", "xhigh")

# Levels that may be encoded as a "(level)" suffix on a model alias
SUFFIX_REASONING_LEVELS = frozenset(level for level in REASONING_LEVELS if level != "none")

# ==============================================================================
# Model identifiers
# ==============================================================================

# Known vendor prefixes stripped before reasoning-capability checks
# (e.g. copilot-gpt-5 -> gpt-5). Tried in order; at most one is stripped.
KNOWN_MODEL_PREFIXES = ("copilot-",)

# Base models that accept a reasoning suffix. Seeds settings.yaml; the live
# set is read from settings at runtime and may be refreshed.
DEFAULT_REASONING_MODELS = (
    "gpt-5",
    "gpt-5-mini",
    "gpt-5-codex",
    "gpt-5-codex-mini",
    "gpt-5.1",
    "gpt-5.1-codex",
    "gpt-5.1-codex-mini",
    "gpt-5.1-codex-max",
    "gpt-5.2",
    "gpt-5.2-codex",
    "gpt-5.3-codex",
)

# Rotating activity log bounds
ACTIVITY_LOG_MAX_BYTES = 1_048_576
ACTIVITY_LOG_BACKUP_COUNT = 5

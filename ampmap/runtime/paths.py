"""
Runtime-aware path helpers.

Provides centralized access to the system root, preferring the runtime
context when available and falling back to the environment default.
"""

import os
from pathlib import Path

from ampmap.constants import SYSTEM_ROOT_ENV
from ampmap.runtime.state import get_runtime_context, has_runtime_context

# Default root when neither runtime context nor environment override is set
_DEFAULT_SYSTEM_ROOT = Path.home() / ".ampmap"


def get_system_root() -> Path:
    """Return the active system root (settings file, activity log)."""
    if has_runtime_context():
        try:
            return Path(get_runtime_context().config.system_root)
        except Exception:
            pass
    override = os.getenv(SYSTEM_ROOT_ENV)
    if override:
        return Path(override).expanduser()
    return _DEFAULT_SYSTEM_ROOT

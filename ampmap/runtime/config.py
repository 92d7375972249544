"""
Runtime configuration for ampmap bootstrap.

Provides structured configuration for system initialization with
validation, defaults, and path management.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ampmap.runtime.paths import get_system_root


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class RuntimeConfig:
    """
    Configuration for ampmap runtime bootstrap.

    Attributes:
        system_root: Directory holding settings.yaml and the activity log
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        features: Feature flags and configuration overrides
    """

    system_root: Path
    log_level: str = "INFO"
    features: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.system_root, str):
            self.system_root = Path(self.system_root)
        self.system_root = self.system_root.expanduser()

        try:
            self.system_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RuntimeConfigError(f"Cannot create system root '{self.system_root}': {e}") from e

        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise RuntimeConfigError(
                f"Invalid log_level '{self.log_level}'. Must be one of: {sorted(VALID_LOG_LEVELS)}"
            )
        self.log_level = self.log_level.upper()

    @classmethod
    def from_environment(cls, log_level: str = "INFO") -> "RuntimeConfig":
        """Create configuration from AMPMAP_SYSTEM_ROOT, or the home default."""
        return cls(system_root=get_system_root(), log_level=log_level)

    @classmethod
    def for_testing(cls, system_root: Path, features: Optional[Dict[str, Any]] = None) -> "RuntimeConfig":
        """Create configuration isolated under a throwaway root."""
        return cls(
            system_root=system_root,
            log_level="DEBUG",
            features={"testing": True, **(features or {})},
        )


class RuntimeConfigError(Exception):
    """Raised when runtime configuration is invalid."""
    pass

"""
Runtime context for ampmap.

Holds the live mapping store and its updater for the lifetime of the
process, plus the metadata surfaced by the status endpoint.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ampmap.logger import UnifiedLogger
from ampmap.mappings.store import MappingStore
from ampmap.mappings.updater import ConcurrentMappingUpdater
from . import state as runtime_state
from .config import RuntimeConfig


@dataclass
class RuntimeContext:
    """
    Central runtime context for ampmap services.

    Attributes:
        config: Runtime configuration
        store: Live mapping table
        updater: Entry point for every mapping change
        logger: Unified logger for runtime operations
        boot_id: Sequence number of this bootstrap within the process
        started_at: When bootstrap completed
        last_config_reload: Timestamp of most recent configuration reload (if any)
        migrated_on_boot: Whether stored keys were migrated during bootstrap
    """

    config: RuntimeConfig
    store: MappingStore
    updater: ConcurrentMappingUpdater
    logger: UnifiedLogger
    boot_id: int
    started_at: datetime
    last_config_reload: Optional[datetime] = None
    migrated_on_boot: bool = False

    async def shutdown(self):
        """Release this runtime so a new one can be bootstrapped."""
        self.logger.info("Shutting down runtime context", boot_id=self.boot_id)
        if not runtime_state.release_runtime_context(self):
            self.logger.warning("Runtime was no longer registered at shutdown", boot_id=self.boot_id)

    def get_runtime_summary(self) -> dict:
        """
        Get runtime context summary for diagnostics.

        Returns basic information about the runtime state without
        exposing internal objects.
        """
        uniform = self.updater.uniform_level()
        return {
            "system_root": str(self.config.system_root),
            "boot_id": self.boot_id,
            "started_at": self.started_at.isoformat(),
            "last_config_reload": (
                self.last_config_reload.isoformat() if self.last_config_reload else None
            ),
            "mappings": len(self.store),
            "active_mappings": len(self.store.active()),
            "custom_mappings": len(self.updater.custom_mappings()),
            "uniform_level": uniform if uniform is not None else "mixed",
            "migrated_on_boot": self.migrated_on_boot,
            "features": self.config.features,
            "log_level": self.config.log_level,
        }

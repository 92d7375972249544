"""
Runtime bootstrap for ampmap.

Provides single entry point for loading the mapping table, migrating stale
keys, and wiring the updater to settings.yaml persistence.
"""

import asyncio
import os
from datetime import datetime
from typing import List

from ampmap.constants import SYSTEM_ROOT_ENV
from ampmap.logger import UnifiedLogger
from ampmap.mappings.catalog import ROLE_SLOTS, SLOT_MODEL_MIGRATIONS, slot_source_models
from ampmap.mappings.migration import migrate_mappings
from ampmap.mappings.models import ModelMapping
from ampmap.mappings.store import MappingStore
from ampmap.mappings.updater import ConcurrentMappingUpdater
from ampmap.settings import (
    refresh_app_settings_cache,
    refresh_configuration_status_cache,
    validate_settings,
)
from ampmap.settings.store import (
    get_reasoning_models,
    load_model_mappings,
    refresh_settings_cache,
    save_model_mappings,
)
from .config import RuntimeConfig, RuntimeConfigError
from .context import RuntimeContext
from .state import next_boot_id, set_runtime_context


async def persist_model_mappings(mappings: List[ModelMapping]) -> None:
    """Write the mapping table to settings.yaml off the event loop."""
    await asyncio.to_thread(save_model_mappings, mappings)
    refresh_configuration_status_cache()


async def bootstrap_runtime(config: RuntimeConfig) -> RuntimeContext:
    """
    Bootstrap ampmap runtime with centralized service initialization.

    Validates settings.yaml, loads and migrates the mapping table, builds the
    updater and registers the runtime context globally.

    Args:
        config: Runtime configuration with paths and settings

    Returns:
        RuntimeContext with initialized services

    Raises:
        RuntimeConfigError: If configuration is invalid
        RuntimeStartupError: If service initialization fails
    """
    # Settings helpers resolve the root from the environment until the
    # context is registered.
    os.environ[SYSTEM_ROOT_ENV] = str(config.system_root)
    refresh_settings_cache()
    refresh_app_settings_cache()
    refresh_configuration_status_cache()

    logger = UnifiedLogger(tag="runtime-bootstrap")
    logger.info("Starting runtime bootstrap", metadata={"system_root": str(config.system_root)})

    try:
        config_status = validate_settings()
        if not config_status.is_healthy:
            error_messages = [f"{issue.name}: {issue.message}" for issue in config_status.errors]
            logger.error(
                "Critical configuration validation failed",
                metadata={"errors": error_messages},
            )
            raise RuntimeConfigError("; ".join(error_messages))

        for warning in config_status.warnings:
            logger.warning(
                warning.message,
                metadata={"issue": warning.name, "severity": warning.severity},
            )

        store = MappingStore(load_model_mappings())

        migration = migrate_mappings(
            store.all(),
            SLOT_MODEL_MIGRATIONS,
            slot_source_models(ROLE_SLOTS),
        )
        if migration.migrated:
            store.replace_all(migration.mappings)
            try:
                await persist_model_mappings(store.all())
            except Exception as exc:
                # Keep serving the migrated table; the next successful save writes it.
                logger.warning(
                    "Failed to persist migrated mappings",
                    metadata={"error": str(exc)},
                )
            else:
                logger.activity(
                    "Migrated stored mappings to current role models",
                    metadata={"mappings": [mapping.to_record() for mapping in store.all()]},
                )

        updater = ConcurrentMappingUpdater(
            store=store,
            persist=persist_model_mappings,
            reasoning_models=get_reasoning_models,
            slots=ROLE_SLOTS,
        )

        runtime_context = RuntimeContext(
            config=config,
            store=store,
            updater=updater,
            logger=logger,
            boot_id=next_boot_id(),
            started_at=datetime.now(),
            migrated_on_boot=migration.migrated,
        )

        set_runtime_context(runtime_context)

        logger.activity(
            "Runtime bootstrap completed successfully",
            metadata={
                "system_root": str(config.system_root),
                "mappings": len(store),
                "migrated": migration.migrated,
                "features": config.features,
            },
        )

        return runtime_context

    except RuntimeConfigError:
        # Re-raise configuration errors without wrapping
        raise

    except Exception as e:
        logger.error(f"Runtime bootstrap failed: {e}")
        raise RuntimeStartupError(f"Failed to bootstrap runtime: {e}") from e


class RuntimeBootstrapError(Exception):
    """Base exception for runtime bootstrap failures."""
    pass


class RuntimeStartupError(RuntimeBootstrapError):
    """Raised when service initialization fails during bootstrap."""
    pass

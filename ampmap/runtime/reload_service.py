"""
Runtime configuration reload helpers.

Provides a single entry point for refreshing configuration caches after
users edit settings.yaml or environment variables.
"""

from dataclasses import dataclass
from datetime import datetime

from ampmap.logger import refresh_logfire_configuration
from ampmap.runtime.state import get_runtime_context, has_runtime_context
from ampmap.settings import (
    ConfigurationStatus,
    get_configuration_status,
    refresh_app_settings_cache,
    refresh_configuration_status_cache,
)
from ampmap.settings.store import refresh_settings_cache


@dataclass
class ConfigurationReloadResult:
    """Outcome from executing a configuration reload."""

    performed_at: datetime
    status: ConfigurationStatus
    restart_required: bool = False


def reload_configuration(restart_required: bool = False) -> ConfigurationReloadResult:
    """
    Refresh configuration caches and update runtime metadata.

    The updater reads reasoning models through the settings cache on every
    call, so an edited list takes effect on the next operation. The mapping
    table itself is owned by the runtime and is not reloaded here.

    Args:
        restart_required: Propagated flag indicating the caller wants to surface
            a restart recommendation.

    Returns:
        ConfigurationReloadResult summarising the new configuration status.
    """
    refresh_settings_cache()
    refresh_app_settings_cache()
    refresh_configuration_status_cache()
    refresh_logfire_configuration(force=True)
    status = get_configuration_status()

    performed_at = datetime.now()

    if has_runtime_context():
        get_runtime_context().last_config_reload = performed_at

    return ConfigurationReloadResult(
        performed_at=performed_at,
        status=status,
        restart_required=restart_required,
    )

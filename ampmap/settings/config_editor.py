"""
Configuration editing helpers for settings.yaml.

Provides validated update operations for general settings while preserving
the mapping table and reasoning model list, which are owned by the mapping
engine.
"""

from ampmap.settings.store import (
    SettingsEntry,
    edit_settings,
    load_settings,
)
from . import SettingsError, refresh_configuration_status_cache


def list_general_settings() -> dict[str, SettingsEntry]:
    """Return general settings entries."""
    return load_settings().settings


def get_general_setting_value(name: str, default=None):
    """Return a general setting's value, or ``default`` when it is not defined."""
    entry = load_settings().settings.get(name)
    return entry.value if entry is not None else default


def update_general_setting(name: str, raw_value: str) -> SettingsEntry:
    """
    Update a general setting value while preserving metadata and types.

    The file is re-read under the settings write lock, so a mapping save in
    flight is neither overwritten nor lost.
    """
    with edit_settings() as settings_file:
        entry = settings_file.settings.get(name)

        if entry is None:
            raise SettingsError(f"Setting '{name}' does not exist.")

        coerced_value = _coerce_setting_value(raw_value, entry.value)
        updated = SettingsEntry(
            value=coerced_value,
            description=entry.description,
            restart_required=entry.restart_required,
        )
        settings_file.settings[name] = updated

    refresh_configuration_status_cache()
    return updated


def _coerce_setting_value(raw_value: str, current_value):
    """Attempt to convert the provided raw string into the original setting type."""
    raw_value = raw_value if raw_value is not None else ""

    if isinstance(current_value, bool):
        normalized = raw_value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False
        raise SettingsError("Value must be true or false.")

    if isinstance(current_value, int) and not isinstance(current_value, bool):
        try:
            return int(raw_value.strip())
        except ValueError as exc:
            raise SettingsError("Value must be an integer.") from exc

    if isinstance(current_value, float):
        try:
            return float(raw_value.strip())
        except ValueError as exc:
            raise SettingsError("Value must be a number.") from exc

    if current_value is None:
        return raw_value or None

    return raw_value

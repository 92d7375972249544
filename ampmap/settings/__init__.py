"""
Application settings and configuration health utilities.

Provides a single typed interface for environment-driven settings along with
helpers to diagnose problems in the stored mapping table before the runtime
starts serving it.
"""

from collections import Counter
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ampmap.mappings.catalog import SLOT_MODEL_MIGRATIONS
from ampmap.mappings.migration import find_orphaned_mappings
from ampmap.mappings.models import ModelMapping
from ampmap.settings.store import (
    SettingsError,
    get_reasoning_models,
    load_model_mappings,
)


__all__ = [
    "AppSettings",
    "ConfigurationIssue",
    "ConfigurationStatus",
    "SettingsError",
    "get_app_settings",
    "get_configuration_status",
    "refresh_app_settings_cache",
    "refresh_configuration_status_cache",
    "validate_settings",
]


class ConfigurationIssue(BaseModel):
    """Represents a configuration validation issue."""

    name: str
    message: str
    severity: str  # 'error' or 'warning'


class ConfigurationStatus(BaseModel):
    """Aggregated configuration validation results."""

    issues: List[ConfigurationIssue] = Field(default_factory=list)

    @property
    def errors(self) -> List[ConfigurationIssue]:
        """Return error-severity issues."""
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> List[ConfigurationIssue]:
        """Return warning-severity issues."""
        return [issue for issue in self.issues if issue.severity == "warning"]

    @property
    def is_healthy(self) -> bool:
        """Return True when no error-severity issues exist."""
        return not self.errors

    def add_issue(self, name: str, message: str, severity: str = "error") -> None:
        """Append an issue to the collection."""
        self.issues.append(ConfigurationIssue(name=name, message=message, severity=severity))


class AppSettings(BaseSettings):
    """
    Infrastructure settings loaded from environment variables.

    Mapping data and general toggles live in settings.yaml; only the system
    root and the Logfire token come from the environment.
    """

    model_config = SettingsConfigDict(env_file=None, extra="ignore", case_sensitive=True)

    system_root: Optional[Path] = Field(default=None, alias="AMPMAP_SYSTEM_ROOT")
    logfire_token: Optional[str] = Field(default=None, alias="LOGFIRE_TOKEN")

    @field_validator("system_root", mode="before")
    @classmethod
    def _expand_system_root(cls, value):
        """Expand user paths to absolute Path instances."""
        if value in (None, ""):
            return None
        if isinstance(value, Path):
            return value.expanduser()
        return Path(value).expanduser()

    def required_env_keys(self) -> Dict[str, Optional[str]]:
        """Environment variables worth reporting, with their current values."""
        return {"AMPMAP_SYSTEM_ROOT": str(self.system_root) if self.system_root else None}


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Load application settings from environment variables."""
    return AppSettings()


def refresh_app_settings_cache() -> None:
    """Clear cached settings so future calls reload from environment."""
    get_app_settings.cache_clear()  # type: ignore[attr-defined]


def validate_settings(
    mappings: Optional[List[ModelMapping]] = None,
    reasoning_models: Optional[frozenset] = None,
) -> ConfigurationStatus:
    """
    Validate the stored mapping table and reasoning model list.

    Args:
        mappings: Optional pre-loaded mapping list (defaults to settings.yaml)
        reasoning_models: Optional pre-loaded reasoning model set

    Returns:
        ConfigurationStatus describing any issues discovered.
    """
    status = ConfigurationStatus()
    mappings = load_model_mappings() if mappings is None else mappings
    reasoning_models = get_reasoning_models() if reasoning_models is None else reasoning_models

    counts = Counter(mapping.source_model for mapping in mappings)
    for source_model, count in counts.items():
        if count > 1:
            status.add_issue(
                name=f"model_mappings:duplicate:{source_model}",
                message=f"Source model '{source_model}' is mapped {count} times; keep exactly one entry.",
            )

    for orphan in find_orphaned_mappings(mappings, SLOT_MODEL_MIGRATIONS):
        status.add_issue(
            name=f"model_mappings:orphan:{orphan.source_model}",
            message=(
                f"Mapping for '{orphan.source_model}' was not migrated because its "
                "replacement is already mapped. The agent no longer requests this name."
            ),
            severity="warning",
        )

    if not reasoning_models:
        status.add_issue(
            name="reasoning_models",
            message="No reasoning models configured; reasoning levels cannot be applied to any mapping.",
            severity="warning",
        )

    return status


@lru_cache(maxsize=1)
def get_configuration_status() -> ConfigurationStatus:
    """Return cached configuration status assessment."""
    return validate_settings()


def refresh_configuration_status_cache() -> None:
    """Clear cached configuration status."""
    get_configuration_status.cache_clear()  # type: ignore[attr-defined]

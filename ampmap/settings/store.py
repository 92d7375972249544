"""
Settings file loader and helpers.

Provides typed access to `<system root>/settings.yaml`, covering general
settings, the reasoning-capable model list, and the persisted model mapping
table. This is the storage collaborator behind the mapping engine's
load/persist interface.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import threading
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterator, List

import yaml
from pydantic import BaseModel, Field, ValidationError

from ampmap.constants import DEFAULT_REASONING_MODELS, SETTINGS_FILE_NAME
from ampmap.mappings.models import ModelMapping
from ampmap.runtime.paths import get_system_root


SETTINGS_TEMPLATE = Path(__file__).parent / "settings.template.yaml"

# Held for every read-modify-write of settings.yaml; saves run in worker threads.
_settings_write_lock = threading.RLock()


class SettingsError(Exception):
    """Raised when application settings are invalid or unavailable."""


class SettingsEntry(BaseModel):
    """Single general settings entry."""

    value: Any
    description: str | None = None
    restart_required: bool = False


class SettingsFile(BaseModel):
    """Root schema for settings.yaml content."""

    settings: Dict[str, SettingsEntry] = Field(default_factory=dict)
    reasoning_models: List[str] = Field(default_factory=list)
    model_mappings: List[ModelMapping] = Field(default_factory=list)

    def to_yaml_data(self) -> Dict[str, Any]:
        """Render the file content, keeping mapping records in their wire shape."""
        return {
            "settings": {
                name: entry.model_dump(mode="python")
                for name, entry in self.settings.items()
            },
            "reasoning_models": list(self.reasoning_models),
            "model_mappings": [mapping.to_record() for mapping in self.model_mappings],
        }


def _resolve_settings_path() -> Path:
    """Determine the active settings file path."""
    return get_system_root() / SETTINGS_FILE_NAME


def _ensure_settings_file(target_path: Path) -> None:
    """Ensure the settings file exists at the target path, seeding from template if missing."""
    target_path.parent.mkdir(parents=True, exist_ok=True)

    if target_path.exists():
        return

    if not SETTINGS_TEMPLATE.exists():
        raise FileNotFoundError(f"Default settings template missing: {SETTINGS_TEMPLATE}")

    shutil.copyfile(SETTINGS_TEMPLATE, target_path)


def _read_settings_file(path: Path) -> SettingsFile:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            raw_data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid settings.yaml syntax: {exc}") from exc

    if not isinstance(raw_data, dict):
        raise SettingsError("Invalid settings.yaml configuration: top level must be a mapping")

    if raw_data.get("settings") is None:
        raw_data["settings"] = {}
    if raw_data.get("model_mappings") is None:
        raw_data["model_mappings"] = []
    # A missing section falls back to the shipped list; an explicit empty list is kept.
    if raw_data.get("reasoning_models") is None:
        raw_data["reasoning_models"] = list(DEFAULT_REASONING_MODELS)

    try:
        return SettingsFile.model_validate(raw_data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings.yaml configuration: {exc}") from exc


@lru_cache(maxsize=1)
def load_settings() -> SettingsFile:
    """
    Load complete settings.yaml configuration with caching.

    Returns:
        SettingsFile model for general settings, reasoning models and mappings.

    Raises:
        SettingsError: If the file cannot be parsed or fails validation.
    """
    return _read_settings_file(get_active_settings_path())


def refresh_settings_cache() -> None:
    """Clear the settings cache so future calls reload from disk."""
    load_settings.cache_clear()  # type: ignore[attr-defined]


def save_settings(settings: SettingsFile) -> None:
    """Persist settings configuration to disk using atomic write."""
    data = settings.to_yaml_data()

    with _settings_write_lock:
        path = get_active_settings_path()
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f"{path.stem}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = Path(handle.name)
        try:
            with handle:
                yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=False)
            os.replace(tmp_path, path)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise


@contextmanager
def edit_settings() -> Iterator[SettingsFile]:
    """
    Read settings.yaml fresh from disk, yield it for changes, then save it.

    Concurrent editors are serialized so no writer saves a copy that is
    missing another writer's change. Nothing is saved if the block raises.
    """
    with _settings_write_lock:
        current = _read_settings_file(get_active_settings_path())
        yield current
        save_settings(current)
        refresh_settings_cache()


def get_active_settings_path() -> Path:
    """Return the active settings file path, ensuring it exists."""
    path = _resolve_settings_path()
    _ensure_settings_file(path)
    return path


def get_general_settings() -> Dict[str, SettingsEntry]:
    """Get general settings section."""
    return load_settings().settings


def get_reasoning_models() -> frozenset[str]:
    """Get the set of base models that accept a reasoning suffix."""
    return frozenset(load_settings().reasoning_models)


def load_model_mappings() -> List[ModelMapping]:
    """Get the persisted model mapping table in stored order."""
    return list(load_settings().model_mappings)


def save_model_mappings(mappings: List[ModelMapping]) -> None:
    """
    Replace the persisted mapping table.

    Re-reads the file so concurrent edits to other sections are kept, then
    writes atomically and drops the cached copy.
    """
    with edit_settings() as current:
        current.model_mappings = list(mappings)

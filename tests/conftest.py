import asyncio
from typing import Optional

import pytest

from ampmap.logger import reset_activity_logger
from ampmap.mappings.models import ModelMapping
from ampmap.runtime.state import clear_runtime_context
from ampmap.settings import refresh_app_settings_cache, refresh_configuration_status_cache
from ampmap.settings.store import refresh_settings_cache


def _reset_caches():
    refresh_settings_cache()
    refresh_app_settings_cache()
    refresh_configuration_status_cache()
    reset_activity_logger()


@pytest.fixture(autouse=True)
def system_root(tmp_path, monkeypatch):
    """Isolated system root with fresh caches and no runtime context."""
    root = tmp_path / "system"
    monkeypatch.setenv("AMPMAP_SYSTEM_ROOT", str(root))
    monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)
    clear_runtime_context()
    _reset_caches()
    yield root
    clear_runtime_context()
    _reset_caches()


@pytest.fixture
def reasoning_models():
    return frozenset({"gpt-5", "gpt-5.2", "gpt-5.2-codex"})


def mapping(source: str, alias: str, enabled: Optional[bool] = True, fork: Optional[bool] = None) -> ModelMapping:
    return ModelMapping(source_model=source, target_alias=alias, enabled=enabled, fork=fork)


class RecordingPersist:
    """Persist stand-in that records snapshots and can block or fail on demand."""

    def __init__(self):
        self.calls: list[list[ModelMapping]] = []
        self.error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None
        self.started = asyncio.Event()

    async def __call__(self, mappings):
        self.calls.append(list(mappings))
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        self.started = asyncio.Event()
        return self.gate


@pytest.fixture
def persist():
    return RecordingPersist()

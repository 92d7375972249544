"""
Service layer for API operations.
Translates HTTP requests into mapping engine calls on the live runtime.
"""

from contextlib import contextmanager
from typing import Any, List, Optional

from ampmap.logger import UnifiedLogger
from ampmap.mappings.codec import decode_alias, is_reasoning_model
from ampmap.mappings.exceptions import (
    MappingNotFoundError,
    MappingValidationError,
    PersistenceError,
)
from ampmap.mappings.models import ModelMapping
from ampmap.mappings.updater import SlotState
from ampmap.runtime.context import RuntimeContext
from ampmap.runtime.reload_service import reload_configuration
from ampmap.runtime.state import RuntimeStateError, get_runtime_context
from ampmap.settings import SettingsError, validate_settings
from ampmap.settings.config_editor import list_general_settings, update_general_setting
from ampmap.settings.store import get_reasoning_models

from .exceptions import (
    MappingNotFoundAPIError,
    MappingValidationAPIError,
    PersistenceFailedError,
    RuntimeUnavailableError,
    SystemConfigurationError,
)
from .models import (
    ConfigurationIssueInfo,
    CustomMappingCreateRequest,
    CustomMappingUpdateRequest,
    CustomTargetRequest,
    EnableSlotRequest,
    MappingInfo,
    MappingTableResponse,
    OperationResult,
    ReasoningLevelRequest,
    ReasoningSummaryResponse,
    ReasoningUpdateResponse,
    ResolveResponse,
    SettingInfo,
    SettingUpdateRequest,
    SlotInfo,
    SlotMappingRequest,
    SlotTargetRequest,
    StatusResponse,
    SystemInfo,
)

logger = UnifiedLogger(tag="api-services")


def _runtime() -> RuntimeContext:
    try:
        return get_runtime_context()
    except RuntimeStateError as exc:
        raise RuntimeUnavailableError() from exc


@contextmanager
def _mapping_errors():
    """Re-raise engine errors as their HTTP counterparts."""
    try:
        yield
    except MappingValidationError as exc:
        raise MappingValidationAPIError(exc.message) from exc
    except MappingNotFoundError as exc:
        raise MappingNotFoundAPIError(exc.key, exc.message) from exc
    except PersistenceError as exc:
        raise PersistenceFailedError(exc.source_model, exc.message, exc.rolled_back) from exc
    except SettingsError as exc:
        raise SystemConfigurationError(str(exc)) from exc


def _build_mapping_info(mapping: ModelMapping, reasoning_models, slot_models) -> MappingInfo:
    decoded = decode_alias(mapping.target_alias, reasoning_models)
    return MappingInfo(
        source_model=mapping.source_model,
        target_alias=mapping.target_alias,
        enabled=mapping.is_enabled,
        fork=mapping.is_fork,
        base=decoded.base,
        level=decoded.level,
        is_reasoning_target=is_reasoning_model(decoded.base, reasoning_models),
        is_custom=mapping.source_model not in slot_models,
    )


def _build_slot_info(state: SlotState) -> SlotInfo:
    return SlotInfo(
        id=state.slot.id,
        display_name=state.slot.display_name,
        source_model=state.slot.source_model,
        source_label=state.slot.source_label,
        enabled=state.is_enabled,
        target_alias=state.mapping.target_alias if state.mapping else None,
        base=state.base,
        level=state.level,
        fork=state.mapping.is_fork if state.mapping else False,
        is_reasoning_target=state.is_reasoning_target,
        saving=state.saving,
    )


def _slot_info(runtime: RuntimeContext, slot_id: str) -> SlotInfo:
    for state in runtime.updater.slot_states():
        if state.slot.id == slot_id:
            return _build_slot_info(state)
    raise MappingNotFoundAPIError(slot_id, f"Unknown role '{slot_id}'")


def _format_setting_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _build_setting_info(key: str, entry) -> SettingInfo:
    return SettingInfo(
        key=key,
        value=_format_setting_value(getattr(entry, "value", None)),
        description=getattr(entry, "description", None),
        restart_required=bool(getattr(entry, "restart_required", False)),
    )


#######################################################################
## Status
#######################################################################

def get_system_status() -> StatusResponse:
    """
    Collect runtime status and configuration health.

    Raises:
        RuntimeUnavailableError: If bootstrap has not completed
        SystemConfigurationError: If settings.yaml cannot be read
    """
    runtime = _runtime()
    summary = runtime.get_runtime_summary()

    try:
        configuration_status = validate_settings(mappings=runtime.store.all())
    except SettingsError as exc:
        raise SystemConfigurationError(str(exc)) from exc

    return StatusResponse(
        system=SystemInfo(
            startup_time=runtime.started_at,
            last_config_reload=runtime.last_config_reload,
            system_root=summary["system_root"],
            boot_id=runtime.boot_id,
            migrated_on_boot=runtime.migrated_on_boot,
        ),
        total_mappings=summary["mappings"],
        active_mappings=summary["active_mappings"],
        custom_mappings=summary["custom_mappings"],
        active_slots=sum(1 for state in runtime.updater.slot_states() if state.is_enabled),
        uniform_level=runtime.updater.uniform_level(),
        configuration_issues=[
            ConfigurationIssueInfo(name=issue.name, message=issue.message, severity=issue.severity)
            for issue in configuration_status.issues
        ],
    )


#######################################################################
## Mapping table
#######################################################################

def list_mappings() -> MappingTableResponse:
    runtime = _runtime()
    with _mapping_errors():
        reasoning_models = get_reasoning_models()
    slot_models = {slot.source_model for slot in runtime.updater.slots}
    mappings = runtime.store.all()
    return MappingTableResponse(
        mappings=[_build_mapping_info(m, reasoning_models, slot_models) for m in mappings],
        total=len(mappings),
        active=len(runtime.store.active()),
    )


def get_reasoning_summary() -> ReasoningSummaryResponse:
    runtime = _runtime()
    with _mapping_errors():
        uniform = runtime.updater.uniform_level()
        reasoning_models = get_reasoning_models()
    return ReasoningSummaryResponse(
        uniform_level=uniform,
        mixed=uniform is None,
        reasoning_models=sorted(reasoning_models),
    )


def resolve_model(model: str) -> ResolveResponse:
    """Report the decoded target an agent request for ``model`` would use."""
    runtime = _runtime()
    with _mapping_errors():
        decoded = runtime.store.resolve(model, get_reasoning_models())
    if decoded is None:
        return ResolveResponse(requested_model=model, mapped=False)
    return ResolveResponse(
        requested_model=model,
        mapped=True,
        target_alias=decoded.base if decoded.level == "none" else f"{decoded.base}({decoded.level})",
        base=decoded.base,
        level=decoded.level,
    )


#######################################################################
## Role slots
#######################################################################

def list_slots() -> List[SlotInfo]:
    runtime = _runtime()
    with _mapping_errors():
        return [_build_slot_info(state) for state in runtime.updater.slot_states()]


async def set_slot_mapping(slot_id: str, request: SlotMappingRequest) -> SlotInfo:
    runtime = _runtime()
    with _mapping_errors():
        await runtime.updater.set_slot_mapping(
            slot_id,
            request.target_alias,
            enabled=request.enabled,
            fork=request.fork,
        )
        return _slot_info(runtime, slot_id)


async def enable_slot(slot_id: str, request: Optional[EnableSlotRequest] = None) -> SlotInfo:
    runtime = _runtime()
    default_target = request.default_target if request else None
    with _mapping_errors():
        await runtime.updater.enable_slot(slot_id, default_target)
        return _slot_info(runtime, slot_id)


async def disable_slot(slot_id: str) -> SlotInfo:
    runtime = _runtime()
    with _mapping_errors():
        await runtime.updater.disable_slot(slot_id)
        return _slot_info(runtime, slot_id)


async def set_slot_target(slot_id: str, request: SlotTargetRequest) -> SlotInfo:
    runtime = _runtime()
    with _mapping_errors():
        await runtime.updater.set_slot_target(slot_id, request.target_base)
        return _slot_info(runtime, slot_id)


async def toggle_slot_fork(slot_id: str) -> SlotInfo:
    runtime = _runtime()
    with _mapping_errors():
        await runtime.updater.toggle_slot_fork(slot_id)
        return _slot_info(runtime, slot_id)


async def update_slot_reasoning(slot_id: str, request: ReasoningLevelRequest) -> ReasoningUpdateResponse:
    runtime = _runtime()
    with _mapping_errors():
        result = await runtime.updater.update_level(slot_id, request.level)
    return ReasoningUpdateResponse(
        status=result.status,
        role_id=result.role_id,
        target_alias=result.target_alias,
    )


#######################################################################
## Custom mappings
#######################################################################

def list_custom_mappings() -> List[MappingInfo]:
    runtime = _runtime()
    with _mapping_errors():
        reasoning_models = get_reasoning_models()
    slot_models = {slot.source_model for slot in runtime.updater.slots}
    return [
        _build_mapping_info(mapping, reasoning_models, slot_models)
        for mapping in runtime.updater.custom_mappings()
    ]


async def add_custom_mapping(request: CustomMappingCreateRequest) -> MappingInfo:
    runtime = _runtime()
    with _mapping_errors():
        mapping = await runtime.updater.add_custom_mapping(request.source_model, request.target_alias)
        return _build_mapping_info(mapping, get_reasoning_models(), set())


async def update_custom_mapping(source_model: str, request: CustomMappingUpdateRequest) -> MappingInfo:
    runtime = _runtime()
    with _mapping_errors():
        mapping = await runtime.updater.update_custom_mapping(
            source_model,
            request.target_alias,
            enabled=request.enabled,
            fork=request.fork,
        )
        return _build_mapping_info(mapping, get_reasoning_models(), set())


async def set_custom_target(source_model: str, request: CustomTargetRequest) -> MappingInfo:
    runtime = _runtime()
    with _mapping_errors():
        mapping = await runtime.updater.set_custom_target(source_model, request.target_base)
        return _build_mapping_info(mapping, get_reasoning_models(), set())


async def remove_custom_mapping(source_model: str) -> OperationResult:
    runtime = _runtime()
    with _mapping_errors():
        removed = await runtime.updater.remove_custom_mapping(source_model)
    return OperationResult(message=f"Removed mapping for '{removed.source_model}'")


#######################################################################
## General settings
#######################################################################

def get_general_settings_config() -> List[SettingInfo]:
    """Return serialized general settings metadata."""
    try:
        settings_map = list_general_settings()
    except SettingsError as exc:
        raise SystemConfigurationError(str(exc)) from exc
    return [
        _build_setting_info(key, entry)
        for key, entry in settings_map.items()
    ]


def update_general_setting_value(setting_name: str, payload: SettingUpdateRequest) -> SettingInfo:
    """Persist a general setting update and refresh configuration caches."""
    try:
        updated = update_general_setting(setting_name, payload.value)
    except SettingsError as exc:
        raise SystemConfigurationError(str(exc)) from exc

    reload_result = reload_configuration(restart_required=updated.restart_required)
    logger.activity(
        "General setting updated",
        metadata={"value": updated.value},
        setting=setting_name,
    )
    setting_info = _build_setting_info(setting_name, updated)
    setting_info.restart_required = setting_info.restart_required or reload_result.restart_required
    return setting_info

"""
API endpoint implementations for the ampmap mapping service.
"""


from typing import List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ampmap.runtime.state import get_runtime_context, RuntimeStateError

from .models import (
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
)
from .exceptions import APIException
from .utils import create_error_response
from . import services

# Create API router
router = APIRouter(prefix="/api", tags=["ampmap API"])


#######################################################################
## Health & Status Endpoints
#######################################################################

@router.get("/health")
async def health_check():
    """
    Lightweight health check endpoint for monitoring.

    Use /api/status for mapping counts and configuration issues.
    """
    try:
        runtime = get_runtime_context()
        return JSONResponse(
            status_code=200,
            content={"status": "healthy", "mappings": len(runtime.store)}
        )
    except RuntimeStateError:
        # Runtime not initialized yet - still starting up
        return JSONResponse(
            status_code=503,
            content={"status": "starting", "mappings": 0}
        )


@router.get("/status", response_model=StatusResponse)
async def get_status():
    """Runtime metadata, mapping counts and configuration issues."""
    try:
        return services.get_system_status()
    except Exception as e:
        return create_error_response(e)


#######################################################################
## Mapping Table Endpoints
#######################################################################

@router.get("/mappings", response_model=MappingTableResponse)
async def list_mappings():
    """Full mapping table in stored order."""
    try:
        return services.list_mappings()
    except Exception as e:
        return create_error_response(e)


@router.get("/mappings/reasoning", response_model=ReasoningSummaryResponse)
async def reasoning_summary():
    """Uniform reasoning level and the reasoning-capable model list."""
    try:
        return services.get_reasoning_summary()
    except Exception as e:
        return create_error_response(e)


@router.get("/mappings/resolve/{model:path}", response_model=ResolveResponse)
async def resolve_model(model: str):
    """Where an agent request for ``model`` would be routed."""
    try:
        return services.resolve_model(model)
    except Exception as e:
        return create_error_response(e)


#######################################################################
## Role Slot Endpoints
#######################################################################

@router.get("/mappings/slots", response_model=List[SlotInfo])
async def list_slots():
    """Every role slot in catalog order with its current mapping."""
    try:
        return services.list_slots()
    except Exception as e:
        return create_error_response(e)


@router.put("/mappings/slots/{slot_id}", response_model=SlotInfo)
async def set_slot_mapping(slot_id: str, request: SlotMappingRequest):
    """Point a slot at a target; disabled or empty target removes the mapping."""
    try:
        return await services.set_slot_mapping(slot_id, request)
    except Exception as e:
        return create_error_response(e)


@router.delete("/mappings/slots/{slot_id}", response_model=SlotInfo)
async def disable_slot(slot_id: str):
    """Remove a slot's mapping."""
    try:
        return await services.disable_slot(slot_id)
    except Exception as e:
        return create_error_response(e)


@router.post("/mappings/slots/{slot_id}/enable", response_model=SlotInfo)
async def enable_slot(slot_id: str, request: Optional[EnableSlotRequest] = None):
    """Activate a slot, applying the uniform reasoning level to its target."""
    try:
        return await services.enable_slot(slot_id, request)
    except Exception as e:
        return create_error_response(e)


@router.put("/mappings/slots/{slot_id}/target", response_model=SlotInfo)
async def set_slot_target(slot_id: str, request: SlotTargetRequest):
    """Change an active slot's target model, keeping its reasoning level."""
    try:
        return await services.set_slot_target(slot_id, request)
    except Exception as e:
        return create_error_response(e)


@router.post("/mappings/slots/{slot_id}/fork", response_model=SlotInfo)
async def toggle_slot_fork(slot_id: str):
    """Flip fork mode on an active slot."""
    try:
        return await services.toggle_slot_fork(slot_id)
    except Exception as e:
        return create_error_response(e)


@router.put("/mappings/slots/{slot_id}/reasoning", response_model=ReasoningUpdateResponse)
async def update_slot_reasoning(slot_id: str, request: ReasoningLevelRequest):
    """
    Apply a reasoning level to an active slot.

    A second request for the same slot while the first is still saving
    returns ``conflict_skip`` and changes nothing.
    """
    try:
        return await services.update_slot_reasoning(slot_id, request)
    except Exception as e:
        return create_error_response(e)


#######################################################################
## Custom Mapping Endpoints
#######################################################################

@router.get("/mappings/custom", response_model=List[MappingInfo])
async def list_custom_mappings():
    """Mappings for models outside the role catalog."""
    try:
        return services.list_custom_mappings()
    except Exception as e:
        return create_error_response(e)


@router.post("/mappings/custom", response_model=MappingInfo)
async def add_custom_mapping(request: CustomMappingCreateRequest):
    """Add an enabled custom mapping."""
    try:
        return await services.add_custom_mapping(request)
    except Exception as e:
        return create_error_response(e)


@router.put("/mappings/custom/{source_model:path}/target", response_model=MappingInfo)
async def set_custom_target(source_model: str, request: CustomTargetRequest):
    """Change a custom mapping's target model, keeping its reasoning level."""
    try:
        return await services.set_custom_target(source_model, request)
    except Exception as e:
        return create_error_response(e)


@router.put("/mappings/custom/{source_model:path}", response_model=MappingInfo)
async def update_custom_mapping(source_model: str, request: CustomMappingUpdateRequest):
    """Edit an existing custom mapping."""
    try:
        return await services.update_custom_mapping(source_model, request)
    except Exception as e:
        return create_error_response(e)


@router.delete("/mappings/custom/{source_model:path}", response_model=OperationResult)
async def remove_custom_mapping(source_model: str):
    """Delete a custom mapping."""
    try:
        return await services.remove_custom_mapping(source_model)
    except Exception as e:
        return create_error_response(e)


#######################################################################
## Settings Endpoints
#######################################################################

@router.get("/system/settings/general", response_model=List[SettingInfo])
async def list_general_settings():
    """List general settings entries."""
    try:
        return services.get_general_settings_config()
    except Exception as e:
        return create_error_response(e)


@router.put("/system/settings/general/{setting_key}", response_model=SettingInfo)
async def update_general_setting(setting_key: str, request: SettingUpdateRequest):
    """Update a general setting value."""
    try:
        return services.update_general_setting_value(setting_key, request)
    except Exception as e:
        return create_error_response(e)


#######################################################################
## Error Handlers (registered with the main FastAPI app)
#######################################################################

def register_exception_handlers(app):
    """Register exception handlers with the FastAPI app."""

    @app.exception_handler(APIException)
    async def api_exception_handler(request, exc: APIException):
        """Handle API-specific exceptions with proper error responses."""
        return create_error_response(exc)

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc: Exception):
        """Handle unexpected exceptions with generic error responses."""
        return create_error_response(exc)

"""
Pydantic models for API request and response schemas.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field


#######################################################################
## Request Models
#######################################################################

class SlotMappingRequest(BaseModel):
    """Point a role slot at a target, or disable it."""
    target_alias: str = Field("", description="Target model, optionally with a (level) suffix")
    enabled: bool = Field(..., description="False (or an empty target) removes the slot's mapping")
    fork: Optional[bool] = Field(None, description="Send to both models; omitted keeps the current value")


class EnableSlotRequest(BaseModel):
    """Activate a role slot."""
    default_target: Optional[str] = Field(None, description="Target base model; defaults to the slot's own model")


class SlotTargetRequest(BaseModel):
    """Change an active slot's target while keeping its reasoning level."""
    target_base: str = Field(..., description="New target base model")


class ReasoningLevelRequest(BaseModel):
    """Apply a reasoning level to an active slot."""
    level: str = Field(..., description="One of none, minimal, low, medium, high, xhigh")


class CustomMappingCreateRequest(BaseModel):
    """Add a mapping for a model outside the role catalog."""
    source_model: str = Field(..., description="Model name the agent requests")
    target_alias: str = Field(..., description="Target model")


class CustomMappingUpdateRequest(BaseModel):
    """Edit an existing custom mapping."""
    target_alias: str = Field(..., description="Target model")
    enabled: bool = Field(True, description="Whether the mapping is applied")
    fork: Optional[bool] = Field(None, description="Send to both models; omitted keeps the current value")


class CustomTargetRequest(BaseModel):
    """Change a custom mapping's target while keeping its reasoning level."""
    target_base: str = Field(..., description="New target base model")


class SettingUpdateRequest(BaseModel):
    """Request payload for updating a general setting value."""

    value: str = Field(..., description="New value for the setting")


#######################################################################
## Response Models
#######################################################################

class MappingInfo(BaseModel):
    """A stored mapping with its decoded target."""
    source_model: str = Field(..., description="Model name the agent requests")
    target_alias: str = Field(..., description="Stored target alias")
    enabled: bool = Field(..., description="Whether the mapping is applied")
    fork: bool = Field(False, description="Whether requests also go to the original model")
    base: str = Field(..., description="Target base model with any reasoning suffix removed")
    level: str = Field("none", description="Decoded reasoning level")
    is_reasoning_target: bool = Field(False, description="True when the target accepts a reasoning level")
    is_custom: bool = Field(False, description="True when the source model is not a role slot")


class MappingTableResponse(BaseModel):
    """Full mapping table in stored order."""
    mappings: List[MappingInfo] = Field(default_factory=list)
    total: int = Field(..., description="Number of stored mappings")
    active: int = Field(..., description="Number of enabled mappings")


class ReasoningSummaryResponse(BaseModel):
    """Uniform reasoning level across enabled reasoning-model mappings."""
    uniform_level: Optional[str] = Field(None, description="Shared level, or null when mixed")
    mixed: bool = Field(False, description="True when enabled mappings use different levels")
    reasoning_models: List[str] = Field(default_factory=list, description="Base models that accept a level")


class SlotInfo(BaseModel):
    """A role slot and its current mapping."""
    id: str
    display_name: str
    source_model: str
    source_label: str
    enabled: bool = Field(False, description="True when an enabled mapping exists")
    target_alias: Optional[str] = Field(None, description="Stored target alias when mapped")
    base: Optional[str] = Field(None, description="Decoded target base model")
    level: str = Field("none", description="Decoded reasoning level")
    fork: bool = False
    is_reasoning_target: bool = False
    saving: bool = Field(False, description="A reasoning update for this slot is in flight")


class ReasoningUpdateResponse(BaseModel):
    """Outcome of a reasoning level update."""
    status: Literal["updated", "unchanged", "conflict_skip"]
    role_id: str
    target_alias: Optional[str] = None


class ResolveResponse(BaseModel):
    """Where a requested model name would be routed."""
    requested_model: str
    mapped: bool = Field(..., description="True when an enabled mapping applies")
    target_alias: Optional[str] = None
    base: Optional[str] = None
    level: str = "none"


class SystemInfo(BaseModel):
    """System health information."""
    startup_time: datetime = Field(..., description="When the runtime was bootstrapped")
    last_config_reload: Optional[datetime] = Field(None, description="Last time configuration was reloaded")
    system_root: str = Field(..., description="Directory holding settings.yaml and the activity log")
    boot_id: int = Field(..., description="Bootstrap sequence number within this process")
    migrated_on_boot: bool = Field(False, description="Whether stored keys were migrated at startup")


class ConfigurationIssueInfo(BaseModel):
    """Configuration issue surfaced by validation."""
    name: str = Field(..., description="Identifier for the issue (e.g., model_mappings:orphan:<model>)")
    message: str = Field(..., description="Human-readable description of the issue")
    severity: str = Field(..., description="Issue severity (error or warning)")


class StatusResponse(BaseModel):
    """System status with mapping counts and configuration health."""
    system: SystemInfo
    total_mappings: int
    active_mappings: int
    custom_mappings: int
    active_slots: int
    uniform_level: Optional[str] = None
    configuration_issues: List[ConfigurationIssueInfo] = Field(default_factory=list)


class SettingInfo(BaseModel):
    """Information about a general application setting."""

    key: str = Field(..., description="Setting name")
    value: str = Field(..., description="Current value rendered as string")
    description: Optional[str] = Field(None, description="Human-readable description")
    restart_required: bool = Field(False, description="True when edits recommend a restart")


class OperationResult(BaseModel):
    """Generic success response for mutating operations."""

    success: bool = Field(True, description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable summary")


class ErrorResponse(BaseModel):
    """Standard error response model."""
    success: bool = Field(False, description="Always false for error responses")
    error: str = Field(..., description="Error type or category")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")

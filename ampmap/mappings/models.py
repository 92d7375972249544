"""
Data model for role-to-target model mappings.

ModelMapping is the persisted record and keeps the original wire names
(``name``/``alias``) on the serialization boundary. Everything else is an
immutable value type used inside the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


ReasoningLevel = Literal["none", "minimal", "low", "medium", "high", "xhigh"]


class ModelMapping(BaseModel):
    """A single source model -> target alias mapping.

    ``enabled`` and ``fork`` are optional on the wire; an absent flag stays
    absent when the record is written back. Readers use ``is_enabled`` and
    ``is_fork`` rather than the raw fields.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_model: str = Field(..., alias="name", description="Model name the agent requests")
    target_alias: str = Field(..., alias="alias", description="Target model, optionally with a (level) suffix")
    enabled: Optional[bool] = Field(None, description="False disables the mapping; absent means enabled")
    fork: Optional[bool] = Field(None, description="Send requests to both original and target model")

    @property
    def is_enabled(self) -> bool:
        return self.enabled is not False

    @property
    def is_fork(self) -> bool:
        return bool(self.fork)

    def with_alias(self, target_alias: str) -> "ModelMapping":
        """Return a copy pointing at a different target alias."""
        return self.model_copy(update={"target_alias": target_alias})

    def to_record(self) -> dict:
        """Serialize to the persisted ``{name, alias, enabled?, fork?}`` shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class ModelPrefixSplit:
    """Result of splitting a known vendor prefix from a model id."""

    prefix: str
    unprefixed: str


@dataclass(frozen=True)
class DecodedAlias:
    """Explicit form of a ``base(level)`` alias string."""

    base: str
    level: ReasoningLevel = "none"


@dataclass(frozen=True)
class RoleSlot:
    """A fixed logical role the agent addresses by ``source_model``."""

    id: str
    display_name: str
    source_model: str
    source_label: str


@dataclass(frozen=True)
class MigrationRule:
    """Rewrite a stored mapping key from ``from_model`` to ``to_model``."""

    from_model: str
    to_model: str

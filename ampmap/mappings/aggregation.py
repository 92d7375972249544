"""Uniform reasoning level across a mapping collection."""

from typing import AbstractSet, Iterable, Optional

from .codec import decode_alias, is_reasoning_model
from .models import ModelMapping, ReasoningLevel


def uniform_reasoning_level(
    mappings: Iterable[ModelMapping],
    reasoning_models: AbstractSet[str],
) -> Optional[ReasoningLevel]:
    """
    Report the reasoning level shared by all enabled reasoning-model mappings.

    Returns:
        The shared level; None when levels are mixed; "none" when no enabled
        mapping targets a reasoning model (same value as an explicit uniform
        "none").
    """
    uniform: Optional[ReasoningLevel] = None
    for mapping in mappings:
        if not mapping.is_enabled:
            continue
        decoded = decode_alias(mapping.target_alias, reasoning_models)
        if not is_reasoning_model(decoded.base, reasoning_models):
            continue
        if uniform is None:
            uniform = decoded.level
        elif uniform != decoded.level:
            return None

    return uniform if uniform is not None else "none"


def default_level_for_new_role(
    mappings: Iterable[ModelMapping],
    reasoning_models: AbstractSet[str],
) -> ReasoningLevel:
    """Level to apply when activating a role: the uniform level, or "none" when mixed."""
    return uniform_reasoning_level(mappings, reasoning_models) or "none"

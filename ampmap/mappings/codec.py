"""
Reasoning-level alias codec.

Converts between the ``base(level)`` string stored as a mapping target and
the explicit DecodedAlias structure. This is the only module that reads or
writes the suffix syntax; everything else works with DecodedAlias.

The set of reasoning-capable base models is always passed in by the caller
so a refreshed set takes effect on the next call.
"""

import re
from typing import AbstractSet, Sequence

from ampmap.constants import KNOWN_MODEL_PREFIXES, REASONING_LEVELS, SUFFIX_REASONING_LEVELS
from .exceptions import MappingValidationError
from .models import DecodedAlias, ReasoningLevel
from .prefixes import unprefixed_model


# Trailing "(...)" group. The base is greedy so only the last group counts.
# Groups: (base, level)
SUFFIX_PATTERN = re.compile(r'(.*)\(([^)]+)\)')


def is_reasoning_model(
    model: str,
    reasoning_models: AbstractSet[str],
    prefixes: Sequence[str] = KNOWN_MODEL_PREFIXES,
) -> bool:
    """Return True when the unprefixed model id accepts a reasoning suffix."""
    return unprefixed_model(model, prefixes) in reasoning_models


def decode_alias(
    alias: str,
    reasoning_models: AbstractSet[str],
    prefixes: Sequence[str] = KNOWN_MODEL_PREFIXES,
) -> DecodedAlias:
    """
    Decode a mapping target into base model and reasoning level.

    The suffix is only accepted when the base is a known reasoning model and
    the level is one of the suffix levels. Anything else, including model
    names that legitimately end in parentheses, comes back whole as the base
    with level "none". Never raises.

    Examples:
        >>> decode_alias("gpt-5(high)", {"gpt-5"})
        DecodedAlias(base='gpt-5', level='high')
        >>> decode_alias("my-model(custom)", {"gpt-5"})
        DecodedAlias(base='my-model(custom)', level='none')
    """
    match = SUFFIX_PATTERN.fullmatch(alias)
    if not match:
        return DecodedAlias(base=alias)

    candidate_base, candidate_level = match.group(1), match.group(2)
    if (
        is_reasoning_model(candidate_base, reasoning_models, prefixes)
        and candidate_level in SUFFIX_REASONING_LEVELS
    ):
        return DecodedAlias(base=candidate_base, level=candidate_level)

    return DecodedAlias(base=alias)


def encode_alias(
    alias: str,
    level: ReasoningLevel,
    reasoning_models: AbstractSet[str],
    prefixes: Sequence[str] = KNOWN_MODEL_PREFIXES,
) -> str:
    """
    Apply a reasoning level to a mapping target.

    Any existing suffix is replaced. Targets that are not reasoning models are
    returned unchanged whatever the level, so callers never rewrite aliases of
    models that cannot carry a suffix.

    Raises:
        MappingValidationError: If level is not a known reasoning level.
    """
    if level not in REASONING_LEVELS:
        raise MappingValidationError(
            f"Unknown reasoning level '{level}'. Expected one of: {', '.join(REASONING_LEVELS)}"
        )

    base = decode_alias(alias, reasoning_models, prefixes).base
    if not is_reasoning_model(base, reasoning_models, prefixes):
        return alias

    if level == "none":
        return base
    return f"{base}({level})"

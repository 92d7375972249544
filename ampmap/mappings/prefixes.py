"""Vendor prefix handling for model identifiers."""

from typing import Sequence

from ampmap.constants import KNOWN_MODEL_PREFIXES
from .models import ModelPrefixSplit


def split_model_prefix(
    model: str,
    prefixes: Sequence[str] = KNOWN_MODEL_PREFIXES,
) -> ModelPrefixSplit:
    """
    Split the first matching vendor prefix off a model id.

    Prefixes are tried in order and only one is stripped, so
    ``copilot-copilot-gpt-5`` yields ``copilot-gpt-5``.

    Returns:
        ModelPrefixSplit with an empty prefix when nothing matches.
    """
    for prefix in prefixes:
        if prefix and model.startswith(prefix):
            return ModelPrefixSplit(prefix=prefix, unprefixed=model[len(prefix):])
    return ModelPrefixSplit(prefix="", unprefixed=model)


def unprefixed_model(model: str, prefixes: Sequence[str] = KNOWN_MODEL_PREFIXES) -> str:
    """Return the model id with any known vendor prefix removed."""
    return split_model_prefix(model, prefixes).unprefixed

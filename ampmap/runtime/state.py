"""
Process-wide registry for the live mapping runtime.

One RuntimeContext is registered per boot. API handlers and path helpers
read it from here; bootstrap registers it and shutdown releases it.
"""

import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from .context import RuntimeContext


class RuntimeStateError(Exception):
    """Raised when no runtime is registered, or a second one is registered."""


@dataclass
class _RuntimeRegistry:
    context: Optional["RuntimeContext"] = None
    boot_ids: Iterator[int] = field(default_factory=lambda: itertools.count(1))


_registry = _RuntimeRegistry()


def set_runtime_context(context: Optional["RuntimeContext"]) -> None:
    """
    Register the runtime for the current boot, or clear it with None.

    Raises:
        RuntimeStateError: If another boot's runtime is still registered
    """
    if context is not None and _registry.context is not None:
        raise RuntimeStateError(
            f"Runtime boot {_registry.context.boot_id} is still registered; "
            "shut it down before bootstrapping again."
        )
    _registry.context = context


def get_runtime_context() -> "RuntimeContext":
    """
    Return the registered runtime.

    Raises:
        RuntimeStateError: If bootstrap_runtime() has not completed
    """
    if _registry.context is None:
        raise RuntimeStateError("No mapping runtime is registered; bootstrap_runtime() has not completed.")
    return _registry.context


def has_runtime_context() -> bool:
    return _registry.context is not None


def clear_runtime_context() -> None:
    """Drop whatever runtime is registered (test teardown)."""
    _registry.context = None


def release_runtime_context(context: "RuntimeContext") -> bool:
    """
    Unregister ``context`` if it is still the registered runtime.

    Returns:
        False when a different runtime has since been registered; it is left in place
    """
    if _registry.context is not context:
        return False
    _registry.context = None
    return True


def next_boot_id() -> int:
    """Return the next boot sequence number for this process."""
    return next(_registry.boot_ids)

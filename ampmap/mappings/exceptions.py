"""
Exception classes for mapping operations.

Every failure is scoped to a single mapping update; none of these are fatal
to the process.
"""

from typing import Optional


class MappingError(Exception):
    """Base exception for mapping engine errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MappingValidationError(MappingError):
    """Raised before any mutation when a request is malformed or would duplicate a key."""
    pass


class MappingNotFoundError(MappingError):
    """Raised when an operation references an unknown role or mapping."""

    def __init__(self, key: str, message: Optional[str] = None):
        super().__init__(message or f"No mapping found for '{key}'")
        self.key = key


class PersistenceError(MappingError):
    """Raised when the external save rejected an update.

    ``rolled_back`` reports whether the optimistic change was reverted in the
    store; it stays False when a later edit had already superseded it.
    """

    def __init__(self, source_model: str, reason: str, rolled_back: bool):
        super().__init__(f"Failed to persist mapping '{source_model}': {reason}")
        self.source_model = source_model
        self.reason = reason
        self.rolled_back = rolled_back

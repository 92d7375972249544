"""
In-memory mapping table keyed by source model.

Preserves insertion order so the persisted list keeps the user's ordering.
A missing entry and an entry with ``enabled: false`` both mean "disabled";
``active()`` and ``resolve()`` treat them the same.
"""

from typing import Iterable, Iterator, Optional, Sequence

from .catalog import ROLE_SLOTS, resolve_request_model
from .codec import decode_alias
from .exceptions import MappingValidationError
from .models import DecodedAlias, ModelMapping, RoleSlot


class MappingStore:
    """Ordered collection of ModelMapping with unique source models."""

    def __init__(self, mappings: Optional[Iterable[ModelMapping]] = None):
        self._entries: dict[str, ModelMapping] = {}
        for mapping in mappings or ():
            if mapping.source_model in self._entries:
                raise MappingValidationError(
                    f"Duplicate mapping for source model '{mapping.source_model}'"
                )
            self._entries[mapping.source_model] = mapping

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, source_model: object) -> bool:
        return source_model in self._entries

    def __iter__(self) -> Iterator[ModelMapping]:
        return iter(list(self._entries.values()))

    def get(self, source_model: str) -> Optional[ModelMapping]:
        return self._entries.get(source_model)

    def upsert(self, mapping: ModelMapping) -> None:
        """Insert or replace the entry for ``mapping.source_model`` in place."""
        self._entries[mapping.source_model] = mapping

    def remove(self, source_model: str) -> Optional[ModelMapping]:
        """Remove and return the entry, or None if it was absent."""
        return self._entries.pop(source_model, None)

    def all(self) -> list[ModelMapping]:
        """Snapshot of every entry in order."""
        return list(self._entries.values())

    def replace_all(self, mappings: Iterable[ModelMapping]) -> None:
        """Swap the whole table, enforcing unique keys."""
        self._entries = MappingStore(mappings)._entries

    def active(self) -> list[ModelMapping]:
        """Entries whose mapping is enabled."""
        return [mapping for mapping in self._entries.values() if mapping.is_enabled]

    def custom_mappings(self, slots: Sequence[RoleSlot] = ROLE_SLOTS) -> list[ModelMapping]:
        """Entries whose key is not a role slot's source model."""
        slot_models = {slot.source_model for slot in slots}
        return [mapping for mapping in self._entries.values() if mapping.source_model not in slot_models]

    def mapping_for_slot(self, slot: RoleSlot) -> Optional[ModelMapping]:
        return self._entries.get(slot.source_model)

    def resolve(self, requested_model: str, reasoning_models) -> Optional[DecodedAlias]:
        """
        Decode the target for a model name as the agent requests it.

        Returns:
            DecodedAlias of the enabled mapping, or None when the name is unmapped
            or its mapping is disabled
        """
        mapping = self._entries.get(requested_model)
        if mapping is None:
            mapping = self._entries.get(resolve_request_model(requested_model))
        if mapping is None or not mapping.is_enabled:
            return None
        return decode_alias(mapping.target_alias, reasoning_models)

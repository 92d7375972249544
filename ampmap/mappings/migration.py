"""
Forward migration of stored mapping keys.

When the agent changes the source model behind a role, mappings saved under
the old name are rewritten to the new one. Runs once per load and is a no-op
on its own output.

A mapping whose migration target is already mapped is left in place under
its old key. Nothing cleans it up here; ampmap.settings.validate_settings
reports it as an orphan warning.
"""

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Sequence

from .models import MigrationRule, ModelMapping


@dataclass(frozen=True)
class MigrationResult:
    """Outcome of a migration pass."""

    mappings: list[ModelMapping]
    migrated: bool


def migrate_mappings(
    mappings: Sequence[ModelMapping],
    rules: Iterable[MigrationRule],
    active_source_models: AbstractSet[str],
) -> MigrationResult:
    """
    Rewrite mapping keys covered by a migration rule.

    A mapping is rewritten only when its rule targets a source model in
    ``active_source_models`` and no mapping in the input already uses that
    target. Order is preserved.

    Args:
        mappings: Stored mappings, in persisted order
        rules: Migration table (first rule per from_model wins)
        active_source_models: Source models addressed by the current role catalog

    Returns:
        MigrationResult with the new list and whether anything changed
    """
    rule_map: dict[str, str] = {}
    for rule in rules:
        rule_map.setdefault(rule.from_model, rule.to_model)

    existing_keys = {mapping.source_model for mapping in mappings}
    migrated = False
    updated: list[ModelMapping] = []

    for mapping in mappings:
        new_name = rule_map.get(mapping.source_model)
        if new_name and new_name in active_source_models and new_name not in existing_keys:
            updated.append(mapping.model_copy(update={"source_model": new_name}))
            # Two old keys migrating to the same new key: only the first moves.
            existing_keys.add(new_name)
            migrated = True
        else:
            updated.append(mapping)

    return MigrationResult(mappings=updated, migrated=migrated)


def find_orphaned_mappings(
    mappings: Iterable[ModelMapping],
    rules: Iterable[MigrationRule],
) -> list[ModelMapping]:
    """Mappings stuck under a migrated-away key because the new key is already mapped."""
    mappings = list(mappings)
    keys = {mapping.source_model for mapping in mappings}
    rule_map = {}
    for rule in rules:
        rule_map.setdefault(rule.from_model, rule.to_model)
    return [
        mapping
        for mapping in mappings
        if mapping.source_model in rule_map and rule_map[mapping.source_model] in keys
    ]
